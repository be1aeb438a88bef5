# routes/time_tracking.py
from fastapi import APIRouter, Depends, Response, status
from typing import List

from core.dependencies import get_time_tracking_service
from core.security import get_bearer_token
from schemas.time_tracking_schema import TimeTrackingRead, TimeTrackingStart, TimeTrackingStop
from services.time_tracking_service import TimeTrackingService

router = APIRouter(tags=["Time Tracking"])


@router.post(
    "/{project_id}/tasks/{task_id}/time-tracking",
    response_model=TimeTrackingRead,
    status_code=status.HTTP_201_CREATED,
)
def start_time_tracking(
    project_id: int,
    task_id: int,
    data: TimeTrackingStart,
    token: str = Depends(get_bearer_token),
    service: TimeTrackingService = Depends(get_time_tracking_service),
):
    return service.start(project_id, task_id, data, token)


@router.get("/{project_id}/tasks/{task_id}/time-tracking", response_model=List[TimeTrackingRead])
def list_task_time_tracking(
    project_id: int,
    task_id: int,
    token: str = Depends(get_bearer_token),
    service: TimeTrackingService = Depends(get_time_tracking_service),
):
    return service.list_for_task(project_id, task_id, token)


@router.put("/{project_id}/tasks/{task_id}/time-tracking/{entry_id}", response_model=TimeTrackingRead)
def stop_time_tracking(
    project_id: int,
    task_id: int,
    entry_id: int,
    data: TimeTrackingStop,
    token: str = Depends(get_bearer_token),
    service: TimeTrackingService = Depends(get_time_tracking_service),
):
    """Stops a running entry; end_time defaults to now."""
    return service.stop(project_id, task_id, entry_id, data, token)


@router.delete("/{project_id}/tasks/{task_id}/time-tracking/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_time_tracking(
    project_id: int,
    task_id: int,
    entry_id: int,
    token: str = Depends(get_bearer_token),
    service: TimeTrackingService = Depends(get_time_tracking_service),
):
    service.delete(project_id, task_id, entry_id, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/time-tracking/my", response_model=List[TimeTrackingRead])
def list_my_time_tracking(
    project_id: int,
    token: str = Depends(get_bearer_token),
    service: TimeTrackingService = Depends(get_time_tracking_service),
):
    return service.list_mine(project_id, token)
