# member_schema.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime

from models.models import ProjectRole


class MemberInvite(BaseModel):
    user_id: int
    role: ProjectRole = Field(default=ProjectRole.MEMBER)


class MemberRead(BaseModel):
    id: int
    project_id: int
    user_id: int
    role: ProjectRole
    joined_at: datetime
    invited_by: Optional[int] = None
    invitation_accepted: bool

    model_config = ConfigDict(from_attributes=True)
