from datetime import datetime

import pytest
from sqlmodel import select

from core.exceptions import BadRequestError, NotFoundError, UnauthorizedError
from models.models import CalendarEvent, ProjectMember, ProjectRole, Task, TaskPriority, TaskStatus, TimeTracking
from schemas.calendar_schema import CalendarEventCreate
from schemas.member_schema import MemberInvite
from schemas.project_schema import ProjectCreate
from schemas.task_schema import TaskCreate, TaskUpdate
from schemas.time_tracking_schema import TimeTrackingStart


@pytest.fixture
def project(svc, tokens):
    return svc.projects.create_project(ProjectCreate(name="Roadmap"), tokens[7])


def new_task(svc, project, token, title="Task", **kwargs):
    return svc.tasks.create_task(project.id, TaskCreate(title=title, **kwargs), token)


def test_create_task_defaults(svc, tokens, project):
    task = new_task(svc, project, tokens[7], "Write brief")
    assert task.status == TaskStatus.TODO
    assert task.priority == TaskPriority.MEDIUM
    assert task.creator_id == 7
    assert task.subtasks == []


def test_non_member_cannot_create(svc, tokens, project):
    with pytest.raises(UnauthorizedError):
        new_task(svc, project, tokens[11])


def test_assigning_non_member_enrolls_once(svc, tokens, project, session):
    new_task(svc, project, tokens[7], "A", assignee_id=9)
    new_task(svc, project, tokens[7], "B", assignee_id=9)

    rows = session.exec(select(ProjectMember).where(ProjectMember.user_id == 9)).all()
    assert len(rows) == 1
    assert rows[0].role == ProjectRole.MEMBER.value
    assert rows[0].invitation_accepted is True
    assert rows[0].invited_by == 7


def test_assigning_unknown_user_is_rejected(svc, tokens, project):
    with pytest.raises(BadRequestError, match="Assignee does not exist: 404"):
        new_task(svc, project, tokens[7], assignee_id=404)


def test_parent_from_another_project_is_rejected(svc, tokens, project):
    other = svc.projects.create_project(ProjectCreate(name="Other"), tokens[7])
    foreign = new_task(svc, other, tokens[7], "Foreign")

    with pytest.raises(BadRequestError, match="Parent task does not belong to this project"):
        new_task(svc, project, tokens[7], parent_task_id=foreign.id)
    with pytest.raises(NotFoundError, match="Parent task not found with id: 999"):
        new_task(svc, project, tokens[7], parent_task_id=999)


def test_list_tasks_nests_subtasks(svc, tokens, project):
    parent = new_task(svc, project, tokens[7], "Parent")
    child = new_task(svc, project, tokens[7], "Child", parent_task_id=parent.id)
    new_task(svc, project, tokens[7], "Grandchild", parent_task_id=child.id)

    listed = svc.tasks.list_tasks(project.id, tokens[7])

    assert [t.title for t in listed] == ["Parent"]
    assert listed[0].subtasks[0].title == "Child"
    assert listed[0].subtasks[0].subtasks[0].title == "Grandchild"


def test_get_task_from_wrong_project(svc, tokens, project):
    other = svc.projects.create_project(ProjectCreate(name="Other"), tokens[7])
    foreign = new_task(svc, other, tokens[7])
    with pytest.raises(BadRequestError, match="Task does not belong to this project"):
        svc.tasks.get_task(project.id, foreign.id, tokens[7])


def test_partial_update_keeps_other_fields(svc, tokens, project):
    task = new_task(svc, project, tokens[7], "Draft", description="keep me")
    updated = svc.tasks.update_task(project.id, task.id, TaskUpdate(status=TaskStatus.IN_PROGRESS), tokens[7])
    assert updated.status == TaskStatus.IN_PROGRESS
    assert updated.description == "keep me"
    assert updated.title == "Draft"


def test_update_permissions(svc, tokens, project):
    svc.members.invite_member(project.id, MemberInvite(user_id=9), tokens[7])
    svc.members.invite_member(project.id, MemberInvite(user_id=11), tokens[7])
    task = new_task(svc, project, tokens[7], assignee_id=9)

    svc.tasks.update_task(project.id, task.id, TaskUpdate(title="By assignee"), tokens[9])
    with pytest.raises(UnauthorizedError, match="User is not authorized to update this task"):
        svc.tasks.update_task(project.id, task.id, TaskUpdate(title="By bystander"), tokens[11])


def test_reparenting_rules(svc, tokens, project):
    a = new_task(svc, project, tokens[7], "A")
    b = new_task(svc, project, tokens[7], "B", parent_task_id=a.id)
    c = new_task(svc, project, tokens[7], "C", parent_task_id=b.id)

    with pytest.raises(BadRequestError, match="Task cannot be its own parent"):
        svc.tasks.update_task(project.id, a.id, TaskUpdate(parent_task_id=a.id), tokens[7])
    with pytest.raises(BadRequestError, match="Parent task would create a cycle"):
        svc.tasks.update_task(project.id, a.id, TaskUpdate(parent_task_id=c.id), tokens[7])

    detached = svc.tasks.update_task(project.id, c.id, TaskUpdate.model_validate({"parent_task_id": None}), tokens[7])
    assert detached.parent_task_id is None

    untouched = svc.tasks.update_task(project.id, b.id, TaskUpdate(title="B2"), tokens[7])
    assert untouched.parent_task_id == a.id


def test_delete_cascades_and_unlinks_events(svc, tokens, project, session):
    parent = new_task(svc, project, tokens[7], "Parent")
    child = new_task(svc, project, tokens[7], "Child", parent_task_id=parent.id)
    svc.time.start(project.id, child.id, TimeTrackingStart(), tokens[7])
    event = svc.calendar.add_event(
        project.id,
        CalendarEventCreate(title="Due", start_time="2030-01-01T09:00:00", task_id=parent.id),
        tokens[7],
    )

    svc.tasks.delete_task(project.id, parent.id, tokens[7])

    assert session.exec(select(Task)).all() == []
    assert session.exec(select(TimeTracking)).all() == []
    assert session.get(CalendarEvent, event.id).task_id is None


def test_ai_plan(svc, tokens, project, assistant):
    task = new_task(svc, project, tokens[7], "Launch")
    plan = svc.tasks.generate_ai_plan(project.id, task.id, tokens[7])
    assert plan.task_id == task.id
    assert plan.task_title == "Launch"
    assert plan.plan == "Plan for Launch"
    assert assistant.prompts == ["Launch"]


def test_reassigning_removed_member_enrolls_again(svc, tokens, project, session):
    task = new_task(svc, project, tokens[7], "Keep going", assignee_id=9)
    svc.members.remove_member(project.id, 9, tokens[7])
    assert session.exec(select(ProjectMember).where(ProjectMember.user_id == 9)).all() == []

    svc.tasks.update_task(project.id, task.id, TaskUpdate(assignee_id=9), tokens[7])
    svc.tasks.update_task(project.id, task.id, TaskUpdate(assignee_id=9), tokens[7])

    rows = session.exec(select(ProjectMember).where(ProjectMember.user_id == 9)).all()
    assert len(rows) == 1
    assert rows[0].role == ProjectRole.MEMBER.value
    assert rows[0].invitation_accepted is True


def test_offset_aware_deadline_is_stored_as_utc(svc, tokens, project):
    task = new_task(svc, project, tokens[7], deadline="2030-06-01T12:00:00+02:00")
    assert task.deadline == datetime(2030, 6, 1, 10, 0)
