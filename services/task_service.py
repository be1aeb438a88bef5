# services/task_service.py
import logging
from datetime import datetime
from typing import List, Optional

from core.exceptions import BadRequestError, NotFoundError
from models.models import Project, Task
from repositories import TaskRepository
from schemas.task_schema import AiTaskPlanRead, TaskCreate, TaskRead, TaskUpdate
from services.ai_task_assistant import AiTaskAssistant
from services.authorization import Action, ensure_allowed
from services.base_service import ProjectScopedService

logger = logging.getLogger(__name__)

WRONG_PROJECT = "Task does not belong to this project"


class TaskService(ProjectScopedService):

    def __init__(self, session, authenticator, identity_client, assistant: Optional[AiTaskAssistant] = None):
        super().__init__(session, authenticator, identity_client)
        self.tasks = TaskRepository(session)
        self.assistant = assistant

    # ------------------------
    # Helpers
    # ------------------------
    def load_task(self, project_id: int, task_id: int) -> Task:
        task = self.tasks.get_or_fail(task_id)
        if task.project_id != project_id:
            raise BadRequestError(WRONG_PROJECT)
        return task

    def _load_parent(self, project_id: int, parent_task_id: int) -> Task:
        parent = self.tasks.get(parent_task_id)
        if parent is None:
            raise NotFoundError(f"Parent task not found with id: {parent_task_id}")
        if parent.project_id != project_id:
            raise BadRequestError("Parent task does not belong to this project")
        return parent

    def _assign(self, project: Project, task: Task, assignee_id: int, actor_id: int, token: str) -> None:
        self.verify_user_exists(assignee_id, token, f"Assignee does not exist: {assignee_id}")
        task.assignee_id = assignee_id
        self.enroll_member(project, assignee_id, invited_by=actor_id)

    @staticmethod
    def _check_no_cycle(task: Task, parent: Task) -> None:
        if parent.id == task.id:
            raise BadRequestError("Task cannot be its own parent")
        ancestor = parent
        while ancestor is not None:
            if ancestor.id == task.id:
                raise BadRequestError("Parent task would create a cycle")
            ancestor = ancestor.parent_task

    # ------------------------
    # Operations
    # ------------------------
    def create_task(self, project_id: int, req: TaskCreate, token: str) -> TaskRead:
        user, project, _ = self.enter_project(project_id, token, Action.TASK_CREATE)
        logger.info("📝 User %s creating task '%s' in project %s", user.id, req.title, project_id)

        task = Task(
            title=req.title,
            description=req.description,
            project_id=project_id,
            creator_id=user.id,
            status=req.status.value,
            priority=req.priority.value,
            deadline=req.deadline,
            estimated_hours=req.estimated_hours,
            created_at=datetime.utcnow(),
        )
        if req.parent_task_id is not None:
            task.parent_task = self._load_parent(project_id, req.parent_task_id)
        if req.assignee_id is not None:
            self._assign(project, task, req.assignee_id, user.id, user.token)

        self.tasks.add(task)
        self.commit()
        self.session.refresh(task)

        logger.info("✅ Task %s created in project %s", task.id, project_id)
        return TaskRead.model_validate(task)

    def list_tasks(self, project_id: int, token: str) -> List[TaskRead]:
        """Top-level tasks; subtasks come nested under their parents."""
        user, _, _ = self.enter_project(project_id, token)
        logger.info("User %s listing tasks of project %s", user.id, project_id)
        return [TaskRead.model_validate(t) for t in self.tasks.find_top_level_by_project(project_id)]

    def get_task(self, project_id: int, task_id: int, token: str) -> TaskRead:
        user, _, _ = self.enter_project(project_id, token)
        logger.info("User %s reading task %s", user.id, task_id)
        return TaskRead.model_validate(self.load_task(project_id, task_id))

    def update_task(self, project_id: int, task_id: int, req: TaskUpdate, token: str) -> TaskRead:
        user, project, access = self.enter_project(project_id, token)
        logger.info("User %s updating task %s in project %s", user.id, task_id, project_id)

        task = self.load_task(project_id, task_id)
        ensure_allowed(access, Action.TASK_UPDATE, creator_id=task.creator_id, assignee_id=task.assignee_id)

        sent = req.model_fields_set
        if req.title is not None:
            task.title = req.title
        if req.description is not None:
            task.description = req.description
        if req.status is not None:
            task.status = req.status.value
        if req.priority is not None:
            task.priority = req.priority.value
        if req.deadline is not None:
            task.deadline = req.deadline
        if req.estimated_hours is not None:
            task.estimated_hours = req.estimated_hours
        if req.assignee_id is not None:
            self._assign(project, task, req.assignee_id, user.id, user.token)

        if "parent_task_id" in sent:
            if req.parent_task_id is None:
                task.parent_task = None
            else:
                parent = self._load_parent(project_id, req.parent_task_id)
                self._check_no_cycle(task, parent)
                task.parent_task = parent

        task.updated_at = datetime.utcnow()
        self.tasks.add(task)
        self.commit()
        self.session.refresh(task)

        logger.info("✅ Task %s updated", task_id)
        return TaskRead.model_validate(task)

    def delete_task(self, project_id: int, task_id: int, token: str) -> None:
        user, _, access = self.enter_project(project_id, token)
        logger.info("User %s deleting task %s in project %s", user.id, task_id, project_id)

        task = self.load_task(project_id, task_id)
        ensure_allowed(access, Action.TASK_DELETE, creator_id=task.creator_id, assignee_id=task.assignee_id)

        self.tasks.delete(task)
        self.commit()
        logger.info("🗑️ Task %s deleted with its subtasks and time entries", task_id)

    def generate_ai_plan(self, project_id: int, task_id: int, token: str) -> AiTaskPlanRead:
        user, _, _ = self.enter_project(project_id, token, Action.AI_PLAN)
        logger.info("🤖 User %s requesting AI plan for task %s", user.id, task_id)

        task = self.load_task(project_id, task_id)
        plan = self.assistant.generate_task_plan(task)
        return AiTaskPlanRead(task_id=task.id, task_title=task.title, plan=plan)
