# profile_schema.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime

from schemas.user_schema import UserRead


class ProfileRead(BaseModel):
    id: int
    user_id: int
    position: Optional[str] = None
    department: Optional[str] = None
    phone_number: Optional[str] = None
    timezone: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    created_date: Optional[datetime] = None
    last_modified_date: Optional[datetime] = None
    user: UserRead

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Only the fields sent are changed."""

    position: Optional[str] = Field(default=None, max_length=100)
    department: Optional[str] = Field(default=None, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=50)
    timezone: Optional[str] = Field(default=None, max_length=50)
    skills: Optional[List[str]] = None
    profile_image_url: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = Field(default=None, max_length=1000)
