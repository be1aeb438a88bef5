# routes/calendar.py
from datetime import datetime
from fastapi import APIRouter, Depends, Query, Response, status
from typing import List, Optional

from core.dependencies import get_calendar_service
from core.security import get_bearer_token
from schemas.calendar_schema import (
    CalendarEventCreate,
    CalendarEventRead,
    CalendarEventUpdate,
    CalendarRead,
)
from services.calendar_service import CalendarService

router = APIRouter(tags=["Calendar"])


@router.post("/{project_id}/calendar", response_model=CalendarRead, status_code=status.HTTP_201_CREATED)
def create_calendar(
    project_id: int,
    name: str = Query(..., min_length=1, max_length=255),
    description: Optional[str] = Query(default=None, max_length=1000),
    token: str = Depends(get_bearer_token),
    service: CalendarService = Depends(get_calendar_service),
):
    return service.create_calendar(project_id, name, description, token)


@router.post(
    "/{project_id}/calendar/events",
    response_model=CalendarEventRead,
    status_code=status.HTTP_201_CREATED,
)
def add_event(
    project_id: int,
    data: CalendarEventCreate,
    token: str = Depends(get_bearer_token),
    service: CalendarService = Depends(get_calendar_service),
):
    """The project calendar is created on the first event if missing."""
    return service.add_event(project_id, data, token)


@router.get("/{project_id}/calendar/events", response_model=List[CalendarEventRead])
def list_events(
    project_id: int,
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    token: str = Depends(get_bearer_token),
    service: CalendarService = Depends(get_calendar_service),
):
    return service.list_events(project_id, token, start=start, end=end)


@router.put("/{project_id}/calendar/events/{event_id}", response_model=CalendarEventRead)
def update_event(
    project_id: int,
    event_id: int,
    data: CalendarEventUpdate,
    token: str = Depends(get_bearer_token),
    service: CalendarService = Depends(get_calendar_service),
):
    return service.update_event(project_id, event_id, data, token)


@router.delete("/{project_id}/calendar/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    project_id: int,
    event_id: int,
    token: str = Depends(get_bearer_token),
    service: CalendarService = Depends(get_calendar_service),
):
    service.delete_event(project_id, event_id, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
