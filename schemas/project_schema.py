# project_schema.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("Project name must not be blank")
    return value.strip() if value is not None else value


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    # Legacy id lists; membership is normally managed through /members
    member_ids: Optional[List[int]] = None
    admin_ids: Optional[List[int]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        return _not_blank(v)


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    member_ids: Optional[List[int]] = None
    admin_ids: Optional[List[int]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        return _not_blank(v)


class ProjectRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    owner_id: int
    member_ids: List[int] = Field(default_factory=list)
    admin_ids: List[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
