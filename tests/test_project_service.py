import pytest
from sqlalchemy.dialects import postgresql
from sqlmodel import select

from core.exceptions import BadRequestError, NotFoundError, UnauthorizedError
from models.models import ProjectMember, ProjectRole, Task
from repositories import ProjectRepository
from schemas.member_schema import MemberInvite
from schemas.project_schema import ProjectCreate, ProjectUpdate
from schemas.task_schema import TaskCreate


def create(svc, token, name="Roadmap", **kwargs):
    return svc.projects.create_project(ProjectCreate(name=name, **kwargs), token)


def test_create_project_makes_caller_owner(svc, tokens):
    project = create(svc, tokens[7], description="Q3 plans")
    assert project.owner_id == 7
    assert project.name == "Roadmap"
    assert project.member_ids == []


def test_blank_name_is_rejected():
    with pytest.raises(ValueError):
        ProjectCreate(name="   ")


def test_roadmap_scenario(svc, tokens):
    project = create(svc, tokens[7])

    invite = svc.members.invite_member(project.id, MemberInvite(user_id=9), tokens[7])
    assert invite.role == ProjectRole.MEMBER
    assert invite.invitation_accepted is False
    assert invite.invited_by == 7

    accepted = svc.members.accept_invitation(project.id, tokens[9])
    assert accepted.invitation_accepted is True

    with pytest.raises(UnauthorizedError, match="Only project owner can delete the project"):
        svc.projects.delete_project(project.id, tokens[9])


def test_list_projects_unions_owned_member_and_legacy(svc, tokens, session):
    owned = create(svc, tokens[9], name="Mine")
    invited = create(svc, tokens[7], name="Invited")
    legacy = create(svc, tokens[7], name="Legacy", member_ids=[9, 9])
    create(svc, tokens[7], name="Unrelated")
    svc.members.invite_member(invited.id, MemberInvite(user_id=9), tokens[7])

    listed = svc.projects.list_projects_for_user(tokens[9])

    assert sorted(p.name for p in listed) == ["Invited", "Legacy", "Mine"]
    assert [p.id for p in listed] == sorted({owned.id, invited.id, legacy.id}, reverse=True)
    assert svc.projects.get_project(legacy.id, tokens[9]).member_ids == [9]


def test_get_project_requires_membership(svc, tokens):
    project = create(svc, tokens[7])
    with pytest.raises(UnauthorizedError, match="User is not a member of this project"):
        svc.projects.get_project(project.id, tokens[11])
    with pytest.raises(NotFoundError, match="Project not found with id: 999"):
        svc.projects.get_project(999, tokens[7])


def test_update_is_owner_only(svc, tokens):
    project = create(svc, tokens[7])
    svc.members.invite_member(project.id, MemberInvite(user_id=9, role=ProjectRole.ADMIN), tokens[7])

    with pytest.raises(UnauthorizedError):
        svc.projects.update_project(project.id, ProjectUpdate(name="Hijack"), tokens[9])

    updated = svc.projects.update_project(project.id, ProjectUpdate(name="Roadmap 2", admin_ids=[11]), tokens[7])
    assert updated.name == "Roadmap 2"
    assert updated.admin_ids == [11]
    assert updated.updated_at is not None


def test_update_rejects_unknown_legacy_member(svc, tokens):
    project = create(svc, tokens[7])
    with pytest.raises(BadRequestError, match="Member does not exist: 404"):
        svc.projects.update_project(project.id, ProjectUpdate(member_ids=[404]), tokens[7])


def test_update_accepts_legacy_member_when_identity_service_is_down(svc, tokens, identity):
    project = create(svc, tokens[7])
    identity.unreachable = True
    updated = svc.projects.update_project(project.id, ProjectUpdate(member_ids=[404]), tokens[7])
    assert updated.member_ids == [404]


def test_delete_cascades_to_tasks_and_members(svc, tokens, session):
    project = create(svc, tokens[7])
    svc.members.invite_member(project.id, MemberInvite(user_id=9), tokens[7])
    svc.tasks.create_task(project.id, TaskCreate(title="Plan"), tokens[7])

    svc.projects.delete_project(project.id, tokens[7])

    assert len(session.exec(select(Task)).all()) == 0
    assert len(session.exec(select(ProjectMember)).all()) == 0
    with pytest.raises(NotFoundError):
        svc.projects.get_project(project.id, tokens[7])


def test_legacy_listing_uses_jsonb_containment_on_postgres():
    sql = str(ProjectRepository.legacy_listing_statement(9).compile(dialect=postgresql.dialect()))
    assert sql.count("@>") == 2
    assert "CAST(project.member_ids AS JSONB)" in sql
