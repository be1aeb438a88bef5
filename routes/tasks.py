# routes/tasks.py
from fastapi import APIRouter, Depends, Response, status
from typing import List

from core.dependencies import get_task_service
from core.security import get_bearer_token
from schemas.task_schema import AiTaskPlanRead, TaskCreate, TaskRead, TaskUpdate
from services.task_service import TaskService

router = APIRouter(tags=["Tasks"])


# ==================================================================
#  ✅ Task CRUD inside a project
# ==================================================================
@router.post("/{project_id}/tasks", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    project_id: int,
    data: TaskCreate,
    token: str = Depends(get_bearer_token),
    service: TaskService = Depends(get_task_service),
):
    return service.create_task(project_id, data, token)


@router.get("/{project_id}/tasks", response_model=List[TaskRead])
def list_tasks(
    project_id: int,
    token: str = Depends(get_bearer_token),
    service: TaskService = Depends(get_task_service),
):
    """Top-level tasks with their subtasks nested."""
    return service.list_tasks(project_id, token)


@router.get("/{project_id}/tasks/{task_id}", response_model=TaskRead)
def get_task(
    project_id: int,
    task_id: int,
    token: str = Depends(get_bearer_token),
    service: TaskService = Depends(get_task_service),
):
    return service.get_task(project_id, task_id, token)


@router.put("/{project_id}/tasks/{task_id}", response_model=TaskRead)
def update_task(
    project_id: int,
    task_id: int,
    data: TaskUpdate,
    token: str = Depends(get_bearer_token),
    service: TaskService = Depends(get_task_service),
):
    return service.update_task(project_id, task_id, data, token)


@router.delete("/{project_id}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    project_id: int,
    task_id: int,
    token: str = Depends(get_bearer_token),
    service: TaskService = Depends(get_task_service),
):
    service.delete_task(project_id, task_id, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================================================================
#  🤖 AI plan
# ==================================================================
@router.get("/{project_id}/tasks/{task_id}/ai-plan", response_model=AiTaskPlanRead)
def generate_ai_plan(
    project_id: int,
    task_id: int,
    token: str = Depends(get_bearer_token),
    service: TaskService = Depends(get_task_service),
):
    return service.generate_ai_plan(project_id, task_id, token)
