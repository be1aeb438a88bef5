import pytest
from sqlmodel import select

from core.exceptions import BadRequestError, UnauthorizedError
from models.models import Project, ProjectMember, ProjectRole
from schemas.member_schema import MemberInvite
from schemas.project_schema import ProjectCreate


@pytest.fixture
def project(svc, tokens):
    return svc.projects.create_project(ProjectCreate(name="Roadmap"), tokens[7])


def invite(svc, project, token, user_id, role=ProjectRole.MEMBER):
    return svc.members.invite_member(project.id, MemberInvite(user_id=user_id, role=role), token)


def test_duplicate_invite_is_rejected(svc, tokens, project, session):
    invite(svc, project, tokens[7], 9)
    with pytest.raises(BadRequestError, match="User is already a member of this project"):
        invite(svc, project, tokens[7], 9)
    rows = session.exec(
        select(ProjectMember).where(ProjectMember.project_id == project.id, ProjectMember.user_id == 9)
    ).all()
    assert len(rows) == 1


def test_concurrent_invite_is_settled_by_unique_constraint(svc, tokens, project, session, monkeypatch):
    # Another request inserted the row after this one passed its pre-check
    session.add(ProjectMember(project_id=project.id, user_id=9, role=ProjectRole.MEMBER.value, invited_by=7))
    session.commit()
    monkeypatch.setattr(svc.members.members, "exists_by_project_and_user", lambda project_id, user_id: False)

    with pytest.raises(BadRequestError, match="User is already a member of this project"):
        invite(svc, project, tokens[7], 9)

    rows = session.exec(
        select(ProjectMember).where(ProjectMember.project_id == project.id, ProjectMember.user_id == 9)
    ).all()
    assert len(rows) == 1


def test_invite_unknown_user_and_owner_role(svc, tokens, project):
    with pytest.raises(BadRequestError, match="User does not exist: 404"):
        invite(svc, project, tokens[7], 404)
    with pytest.raises(BadRequestError):
        invite(svc, project, tokens[7], 9, ProjectRole.OWNER)


def test_plain_member_cannot_invite(svc, tokens, project):
    invite(svc, project, tokens[7], 9, ProjectRole.DEVELOPER)
    with pytest.raises(UnauthorizedError):
        invite(svc, project, tokens[9], 11)


def test_admin_can_invite(svc, tokens, project):
    invite(svc, project, tokens[7], 9, ProjectRole.ADMIN)
    member = invite(svc, project, tokens[9], 11)
    assert member.invited_by == 9


def test_accept_invitation_errors(svc, tokens, project):
    with pytest.raises(BadRequestError, match="No invitation found for this project"):
        svc.members.accept_invitation(project.id, tokens[9])
    invite(svc, project, tokens[7], 9)
    svc.members.accept_invitation(project.id, tokens[9])
    with pytest.raises(BadRequestError, match="Invitation already accepted"):
        svc.members.accept_invitation(project.id, tokens[9])


def test_pending_member_can_list_members(svc, tokens, project):
    invite(svc, project, tokens[7], 9)
    members = svc.members.list_members(project.id, tokens[9])
    assert [(m.user_id, m.invitation_accepted) for m in members] == [(9, False)]


def test_ownership_transfer_is_atomic(svc, tokens, project, session):
    invite(svc, project, tokens[7], 9)

    result = svc.members.update_member_role(project.id, 9, ProjectRole.OWNER, tokens[7])

    assert result.role == ProjectRole.OWNER
    stored = session.get(Project, project.id)
    assert stored.owner_id == 9
    previous = session.exec(
        select(ProjectMember).where(ProjectMember.project_id == project.id, ProjectMember.user_id == 7)
    ).one()
    assert previous.role == ProjectRole.ADMIN.value
    assert previous.invitation_accepted is True

    # the previous owner is now an ADMIN and cannot delete the project
    with pytest.raises(UnauthorizedError):
        svc.projects.delete_project(project.id, tokens[7])


def test_admin_cannot_transfer_ownership(svc, tokens, project):
    invite(svc, project, tokens[7], 9, ProjectRole.ADMIN)
    invite(svc, project, tokens[7], 11)
    with pytest.raises(UnauthorizedError, match="Only the current owner can transfer ownership"):
        svc.members.update_member_role(project.id, 11, ProjectRole.OWNER, tokens[9])


def test_admin_cannot_demote_another_admin(svc, tokens, project):
    invite(svc, project, tokens[7], 9, ProjectRole.ADMIN)
    invite(svc, project, tokens[7], 11, ProjectRole.ADMIN)
    with pytest.raises(UnauthorizedError):
        svc.members.update_member_role(project.id, 11, ProjectRole.QA, tokens[9])
    with pytest.raises(UnauthorizedError):
        svc.members.remove_member(project.id, 11, tokens[9])


def test_role_change_for_non_member(svc, tokens, project):
    with pytest.raises(BadRequestError, match="User is not a member of this project"):
        svc.members.update_member_role(project.id, 13, ProjectRole.QA, tokens[7])


def test_remove_member_and_owner(svc, tokens, project, session):
    invite(svc, project, tokens[7], 9)
    svc.members.remove_member(project.id, 9, tokens[7])
    assert len(session.exec(select(ProjectMember)).all()) == 0

    with pytest.raises(BadRequestError, match="Cannot remove the project owner"):
        svc.members.remove_member(project.id, 7, tokens[7])


def test_owner_cannot_leave(svc, tokens, project):
    with pytest.raises(BadRequestError, match="Transfer ownership first"):
        svc.members.leave_project(project.id, tokens[7])


def test_leave_deletes_only_callers_row(svc, tokens, project, session):
    invite(svc, project, tokens[7], 9)
    invite(svc, project, tokens[7], 11)

    svc.members.leave_project(project.id, tokens[9])

    remaining = session.exec(select(ProjectMember).where(ProjectMember.project_id == project.id)).all()
    assert [m.user_id for m in remaining] == [11]
    with pytest.raises(BadRequestError, match="User is not a member of this project"):
        svc.members.leave_project(project.id, tokens[9])
