# task_schema.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

from models.models import TaskPriority, TaskStatus
from schemas.common import to_naive_utc


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    assignee_id: Optional[int] = None
    status: TaskStatus = Field(default=TaskStatus.TODO)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    deadline: Optional[datetime] = None
    estimated_hours: Optional[int] = Field(default=None, ge=0)
    parent_task_id: Optional[int] = None

    @field_validator("deadline")
    @classmethod
    def deadline_in_utc(cls, v):
        return to_naive_utc(v)


class TaskUpdate(BaseModel):
    """
    Partial update. Omitted fields are left alone; an explicit
    "parent_task_id": null detaches the task from its parent.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    assignee_id: Optional[int] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    deadline: Optional[datetime] = None
    estimated_hours: Optional[int] = Field(default=None, ge=0)
    parent_task_id: Optional[int] = None

    @field_validator("deadline")
    @classmethod
    def deadline_in_utc(cls, v):
        return to_naive_utc(v)


class TaskRead(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    project_id: int
    creator_id: int
    assignee_id: Optional[int] = None
    status: TaskStatus
    priority: TaskPriority
    deadline: Optional[datetime] = None
    estimated_hours: Optional[int] = None
    parent_task_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    subtasks: List["TaskRead"] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class AiTaskPlanRead(BaseModel):
    task_id: int
    task_title: str
    plan: str
