# routes/members.py
from fastapi import APIRouter, Depends, Query, Response, status
from typing import List

from core.dependencies import get_member_service
from core.security import get_bearer_token
from models.models import ProjectRole
from schemas.member_schema import MemberInvite, MemberRead
from services.member_service import MemberService

router = APIRouter(tags=["Project Members"])


@router.post("/{project_id}/members", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
def invite_member(
    project_id: int,
    data: MemberInvite,
    token: str = Depends(get_bearer_token),
    service: MemberService = Depends(get_member_service),
):
    """Create a pending invitation (owner or admin)."""
    return service.invite_member(project_id, data, token)


@router.get("/{project_id}/members", response_model=List[MemberRead])
def list_members(
    project_id: int,
    token: str = Depends(get_bearer_token),
    service: MemberService = Depends(get_member_service),
):
    return service.list_members(project_id, token)


@router.post("/{project_id}/members/accept-invitation", response_model=MemberRead)
def accept_invitation(
    project_id: int,
    token: str = Depends(get_bearer_token),
    service: MemberService = Depends(get_member_service),
):
    return service.accept_invitation(project_id, token)


# Declared before /{user_id} so "leave" is not parsed as a user id
@router.delete("/{project_id}/members/leave", status_code=status.HTTP_204_NO_CONTENT)
def leave_project(
    project_id: int,
    token: str = Depends(get_bearer_token),
    service: MemberService = Depends(get_member_service),
):
    service.leave_project(project_id, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{project_id}/members/{user_id}/role", response_model=MemberRead)
def update_member_role(
    project_id: int,
    user_id: int,
    role: ProjectRole = Query(...),
    token: str = Depends(get_bearer_token),
    service: MemberService = Depends(get_member_service),
):
    """Granting OWNER transfers ownership; the previous owner becomes ADMIN."""
    return service.update_member_role(project_id, user_id, role, token)


@router.delete("/{project_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    project_id: int,
    user_id: int,
    token: str = Depends(get_bearer_token),
    service: MemberService = Depends(get_member_service),
):
    service.remove_member(project_id, user_id, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
