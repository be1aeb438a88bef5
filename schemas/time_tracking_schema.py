# time_tracking_schema.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from schemas.common import to_naive_utc


class TimeTrackingStart(BaseModel):
    start_time: Optional[datetime] = None
    description: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("start_time")
    @classmethod
    def start_in_utc(cls, v):
        return to_naive_utc(v)


class TimeTrackingStop(BaseModel):
    end_time: Optional[datetime] = None
    description: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("end_time")
    @classmethod
    def end_in_utc(cls, v):
        return to_naive_utc(v)


class TimeTrackingRead(BaseModel):
    id: int
    task_id: int
    user_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    description: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
