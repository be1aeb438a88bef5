import pytest

from core.exceptions import UnauthorizedError
from models.models import Project, ProjectMember, ProjectRole
from services.authorization import Action, ProjectAccess, ensure_allowed, is_allowed

OWNER, ACTOR, OTHER = 7, 9, 11


def access(role=None, actor=ACTOR, **legacy):
    return ProjectAccess(actor_id=actor, owner_id=OWNER, member_role=role, **legacy)


def test_owner_only_actions():
    for action in (Action.PROJECT_UPDATE, Action.PROJECT_DELETE):
        assert is_allowed(access(actor=OWNER), action)
        assert not is_allowed(access(ProjectRole.ADMIN), action)


@pytest.mark.parametrize("role", list(ProjectRole))
def test_any_member_can_read_and_create(role):
    for action in (Action.PROJECT_READ, Action.TASK_CREATE, Action.CALENDAR_EVENT_CREATE,
                   Action.TIME_TRACKING_START, Action.AI_PLAN):
        assert is_allowed(access(role), action)


def test_non_member_is_denied_reads():
    assert not is_allowed(access(None), Action.PROJECT_READ)
    with pytest.raises(UnauthorizedError, match="User is not a member of this project"):
        ensure_allowed(access(None), Action.TASK_CREATE)


def test_legacy_id_lists_grant_membership_and_admin():
    assert is_allowed(access(legacy_member=True), Action.PROJECT_READ)
    assert not is_allowed(access(legacy_member=True), Action.MEMBER_INVITE)
    assert is_allowed(access(legacy_admin=True), Action.MEMBER_INVITE)


def test_invite_and_calendar_create_need_owner_or_admin():
    for action in (Action.MEMBER_INVITE, Action.CALENDAR_CREATE):
        assert is_allowed(access(actor=OWNER), action)
        assert is_allowed(access(ProjectRole.ADMIN), action)
        assert not is_allowed(access(ProjectRole.MANAGER), action)


def test_admin_cannot_change_or_remove_another_admin():
    admin = access(ProjectRole.ADMIN)
    assert is_allowed(admin, Action.MEMBER_CHANGE_ROLE, target_role=ProjectRole.DEVELOPER, new_role=ProjectRole.QA)
    assert not is_allowed(admin, Action.MEMBER_CHANGE_ROLE, target_role=ProjectRole.ADMIN, new_role=ProjectRole.QA)
    assert not is_allowed(admin, Action.MEMBER_REMOVE, target_role=ProjectRole.ADMIN)
    assert is_allowed(access(actor=OWNER), Action.MEMBER_REMOVE, target_role=ProjectRole.ADMIN)

    with pytest.raises(UnauthorizedError, match="Admins cannot remove another admin"):
        ensure_allowed(admin, Action.MEMBER_REMOVE, target_role=ProjectRole.ADMIN)


def test_only_owner_grants_owner():
    assert is_allowed(access(actor=OWNER), Action.MEMBER_CHANGE_ROLE, new_role=ProjectRole.OWNER)
    with pytest.raises(UnauthorizedError, match="Only the current owner can transfer ownership"):
        ensure_allowed(access(ProjectRole.ADMIN), Action.MEMBER_CHANGE_ROLE, new_role=ProjectRole.OWNER)


def test_task_edit_rights():
    member = access(ProjectRole.DEVELOPER)
    assert is_allowed(member, Action.TASK_UPDATE, creator_id=ACTOR)
    assert is_allowed(member, Action.TASK_DELETE, creator_id=OTHER, assignee_id=ACTOR)
    assert not is_allowed(member, Action.TASK_UPDATE, creator_id=OTHER, assignee_id=None)
    assert is_allowed(access(ProjectRole.ADMIN), Action.TASK_DELETE, creator_id=OTHER)


def test_event_and_time_tracking_rights():
    member = access(ProjectRole.QA)
    assert is_allowed(member, Action.CALENDAR_EVENT_UPDATE, creator_id=ACTOR)
    assert not is_allowed(member, Action.CALENDAR_EVENT_DELETE, creator_id=OTHER)
    assert is_allowed(member, Action.TIME_TRACKING_STOP, starter_id=ACTOR)
    assert not is_allowed(member, Action.TIME_TRACKING_DELETE, starter_id=OTHER)
    assert is_allowed(access(actor=OWNER), Action.TIME_TRACKING_STOP, starter_id=OTHER)


def test_leave_excludes_owner():
    assert is_allowed(access(ProjectRole.MEMBER), Action.PROJECT_LEAVE)
    assert not is_allowed(access(actor=OWNER), Action.PROJECT_LEAVE)


def test_access_snapshot_from_rows():
    project = Project(id=1, name="Roadmap", owner_id=OWNER, member_ids=[OTHER], admin_ids=[])
    member = ProjectMember(project_id=1, user_id=ACTOR, role="ADMIN", invitation_accepted=False)

    snapshot = ProjectAccess.for_project(project, ACTOR, member)
    assert snapshot.member_role == ProjectRole.ADMIN
    assert snapshot.is_admin and snapshot.is_member and not snapshot.is_owner

    legacy = ProjectAccess.for_project(project, OTHER, None)
    assert legacy.legacy_member and legacy.is_member
