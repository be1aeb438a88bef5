# calendar_schema.py
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional
from datetime import datetime

from models.models import CalendarEventType
from schemas.common import to_naive_utc


class CalendarRead(BaseModel):
    id: int
    project_id: int
    name: str
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CalendarEventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    event_type: CalendarEventType = Field(default=CalendarEventType.OTHER)
    start_time: datetime
    end_time: Optional[datetime] = None
    all_day: bool = False
    location: Optional[str] = Field(default=None, max_length=255)
    task_id: Optional[int] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def times_in_utc(cls, v):
        return to_naive_utc(v)


class CalendarEventUpdate(BaseModel):
    """Partial update; an explicit "task_id": null unlinks the task."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    event_type: Optional[CalendarEventType] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    all_day: Optional[bool] = None
    location: Optional[str] = Field(default=None, max_length=255)
    task_id: Optional[int] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def times_in_utc(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_window(self):
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class CalendarEventRead(BaseModel):
    id: int
    calendar_id: int
    title: str
    description: Optional[str] = None
    event_type: CalendarEventType
    start_time: datetime
    end_time: Optional[datetime] = None
    all_day: bool
    location: Optional[str] = None
    task_id: Optional[int] = None
    created_by: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
