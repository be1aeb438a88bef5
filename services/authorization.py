# services/authorization.py
"""
Project authorization rules.

Pure functions over a ProjectAccess snapshot: no I/O, no session. Services
build the snapshot after loading the project and the caller's member row,
then ask ensure_allowed() before mutating anything.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.exceptions import UnauthorizedError
from models.models import Project, ProjectMember, ProjectRole


class Action(str, Enum):
    PROJECT_READ = "PROJECT_READ"
    PROJECT_UPDATE = "PROJECT_UPDATE"
    PROJECT_DELETE = "PROJECT_DELETE"
    PROJECT_LEAVE = "PROJECT_LEAVE"
    MEMBER_INVITE = "MEMBER_INVITE"
    MEMBER_CHANGE_ROLE = "MEMBER_CHANGE_ROLE"
    MEMBER_REMOVE = "MEMBER_REMOVE"
    TASK_CREATE = "TASK_CREATE"
    TASK_UPDATE = "TASK_UPDATE"
    TASK_DELETE = "TASK_DELETE"
    AI_PLAN = "AI_PLAN"
    CALENDAR_CREATE = "CALENDAR_CREATE"
    CALENDAR_EVENT_CREATE = "CALENDAR_EVENT_CREATE"
    CALENDAR_EVENT_UPDATE = "CALENDAR_EVENT_UPDATE"
    CALENDAR_EVENT_DELETE = "CALENDAR_EVENT_DELETE"
    TIME_TRACKING_START = "TIME_TRACKING_START"
    TIME_TRACKING_STOP = "TIME_TRACKING_STOP"
    TIME_TRACKING_DELETE = "TIME_TRACKING_DELETE"


NOT_A_MEMBER = "User is not a member of this project"

DENIED_MESSAGES = {
    Action.PROJECT_READ: NOT_A_MEMBER,
    Action.PROJECT_UPDATE: "User is not authorized to update this project",
    Action.PROJECT_DELETE: "Only project owner can delete the project",
    Action.PROJECT_LEAVE: "User is not allowed to leave this project",
    Action.MEMBER_INVITE: "Only project owner or admin can invite members",
    Action.MEMBER_CHANGE_ROLE: "Only project owner or admin can update member roles",
    Action.MEMBER_REMOVE: "Only project owner or admin can remove members",
    Action.TASK_CREATE: NOT_A_MEMBER,
    Action.TASK_UPDATE: "User is not authorized to update this task",
    Action.TASK_DELETE: "User is not authorized to delete this task",
    Action.AI_PLAN: NOT_A_MEMBER,
    Action.CALENDAR_CREATE: "Only project owner or admin can create a calendar",
    Action.CALENDAR_EVENT_CREATE: NOT_A_MEMBER,
    Action.CALENDAR_EVENT_UPDATE: "User is not authorized to update this event",
    Action.CALENDAR_EVENT_DELETE: "User is not authorized to delete this event",
    Action.TIME_TRACKING_START: NOT_A_MEMBER,
    Action.TIME_TRACKING_STOP: "User is not authorized to stop this time tracking",
    Action.TIME_TRACKING_DELETE: "User is not authorized to delete this time tracking",
}

MEMBER_ACTIONS = {
    Action.PROJECT_READ,
    Action.TASK_CREATE,
    Action.AI_PLAN,
    Action.CALENDAR_EVENT_CREATE,
    Action.TIME_TRACKING_START,
}


@dataclass(frozen=True)
class ProjectAccess:
    """What the caller is, relative to one project."""

    actor_id: int
    owner_id: int
    member_role: Optional[ProjectRole] = None
    legacy_member: bool = False
    legacy_admin: bool = False

    @classmethod
    def for_project(
        cls, project: Project, actor_id: int, member: Optional[ProjectMember] = None
    ) -> "ProjectAccess":
        return cls(
            actor_id=actor_id,
            owner_id=project.owner_id,
            member_role=ProjectRole(member.role) if member is not None else None,
            legacy_member=actor_id in (project.member_ids or []),
            legacy_admin=actor_id in (project.admin_ids or []),
        )

    @property
    def is_owner(self) -> bool:
        return self.actor_id == self.owner_id

    @property
    def is_admin(self) -> bool:
        return self.member_role == ProjectRole.ADMIN or self.legacy_admin

    @property
    def is_member(self) -> bool:
        # Pending invitations count; role is irrelevant
        return (
            self.is_owner
            or self.member_role is not None
            or self.legacy_member
            or self.legacy_admin
        )

    @property
    def is_owner_or_admin(self) -> bool:
        return self.is_owner or self.is_admin


def is_allowed(
    access: ProjectAccess,
    action: Action,
    *,
    creator_id: Optional[int] = None,
    assignee_id: Optional[int] = None,
    starter_id: Optional[int] = None,
    target_role: Optional[ProjectRole] = None,
    new_role: Optional[ProjectRole] = None,
) -> bool:
    actor = access.actor_id

    if action in MEMBER_ACTIONS:
        return access.is_member

    if action in (Action.PROJECT_UPDATE, Action.PROJECT_DELETE):
        return access.is_owner

    if action in (Action.MEMBER_INVITE, Action.CALENDAR_CREATE):
        return access.is_owner_or_admin

    if action == Action.MEMBER_CHANGE_ROLE:
        if new_role == ProjectRole.OWNER:
            return access.is_owner
        if access.is_owner:
            return True
        return access.is_admin and target_role != ProjectRole.ADMIN

    if action == Action.MEMBER_REMOVE:
        if access.is_owner:
            return True
        return access.is_admin and target_role != ProjectRole.ADMIN

    if action in (Action.TASK_UPDATE, Action.TASK_DELETE):
        return (
            access.is_owner_or_admin
            or (creator_id is not None and creator_id == actor)
            or (assignee_id is not None and assignee_id == actor)
        )

    if action in (Action.CALENDAR_EVENT_UPDATE, Action.CALENDAR_EVENT_DELETE):
        return access.is_owner_or_admin or (creator_id is not None and creator_id == actor)

    if action in (Action.TIME_TRACKING_STOP, Action.TIME_TRACKING_DELETE):
        return access.is_owner_or_admin or (starter_id is not None and starter_id == actor)

    if action == Action.PROJECT_LEAVE:
        return access.is_member and not access.is_owner

    return False


def denied_message(
    access: ProjectAccess,
    action: Action,
    target_role: Optional[ProjectRole] = None,
    new_role: Optional[ProjectRole] = None,
) -> str:
    if action == Action.MEMBER_CHANGE_ROLE and new_role == ProjectRole.OWNER:
        return "Only the current owner can transfer ownership"
    if access.is_admin and target_role == ProjectRole.ADMIN:
        if action == Action.MEMBER_CHANGE_ROLE:
            return "Admins cannot change the role of another admin"
        if action == Action.MEMBER_REMOVE:
            return "Admins cannot remove another admin"
    return DENIED_MESSAGES[action]


def ensure_allowed(access: ProjectAccess, action: Action, **context) -> None:
    """Raise UnauthorizedError unless is_allowed() says yes."""
    if not is_allowed(access, action, **context):
        raise UnauthorizedError(
            denied_message(
                access,
                action,
                target_role=context.get("target_role"),
                new_role=context.get("new_role"),
            )
        )
