# routes/projects.py
from fastapi import APIRouter, Depends, Response, status
from typing import List

from core.dependencies import get_project_service
from core.security import get_bearer_token
from schemas.project_schema import ProjectCreate, ProjectRead, ProjectUpdate
from services.project_service import ProjectService

router = APIRouter(tags=["Projects"])


# ==================================================================
#  ✅ Create Project (caller becomes owner)
# ==================================================================
@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    token: str = Depends(get_bearer_token),
    service: ProjectService = Depends(get_project_service),
):
    return service.create_project(data, token)


# ==================================================================
#  ✅ Projects visible to the caller
# ==================================================================
@router.get("", response_model=List[ProjectRead])
def list_projects(
    token: str = Depends(get_bearer_token),
    service: ProjectService = Depends(get_project_service),
):
    return service.list_projects_for_user(token)


@router.get("/{project_id}", response_model=ProjectRead)
def get_project(
    project_id: int,
    token: str = Depends(get_bearer_token),
    service: ProjectService = Depends(get_project_service),
):
    return service.get_project(project_id, token)


@router.put("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    data: ProjectUpdate,
    token: str = Depends(get_bearer_token),
    service: ProjectService = Depends(get_project_service),
):
    return service.update_project(project_id, data, token)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    token: str = Depends(get_bearer_token),
    service: ProjectService = Depends(get_project_service),
):
    service.delete_project(project_id, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
