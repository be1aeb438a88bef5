# services/time_tracking_service.py
import logging
from datetime import datetime
from typing import List

from core.exceptions import BadRequestError
from models.models import Task, TimeTracking
from repositories import TaskRepository, TimeTrackingRepository
from schemas.time_tracking_schema import TimeTrackingRead, TimeTrackingStart, TimeTrackingStop
from services.authorization import Action, ensure_allowed
from services.base_service import ProjectScopedService

logger = logging.getLogger(__name__)


class TimeTrackingService(ProjectScopedService):
    """Time entries move STARTED -> STOPPED exactly once."""

    def __init__(self, session, authenticator, identity_client):
        super().__init__(session, authenticator, identity_client)
        self.tasks = TaskRepository(session)
        self.entries = TimeTrackingRepository(session)

    def _load_task(self, project_id: int, task_id: int) -> Task:
        task = self.tasks.get_or_fail(task_id)
        if task.project_id != project_id:
            raise BadRequestError("Task does not belong to this project")
        return task

    def _load_entry(self, task_id: int, entry_id: int) -> TimeTracking:
        entry = self.entries.get_or_fail(entry_id)
        if entry.task_id != task_id:
            raise BadRequestError("Time tracking does not belong to this task")
        return entry

    def start(self, project_id: int, task_id: int, req: TimeTrackingStart, token: str) -> TimeTrackingRead:
        user, _, _ = self.enter_project(project_id, token, Action.TIME_TRACKING_START)
        logger.info("⏱️ User %s starting time tracking on task %s", user.id, task_id)

        task = self._load_task(project_id, task_id)
        now = datetime.utcnow()
        entry = TimeTracking(
            task_id=task.id,
            user_id=user.id,
            start_time=req.start_time or now,
            description=req.description,
            created_at=now,
        )
        self.entries.add(entry)
        self.commit()
        self.session.refresh(entry)
        return TimeTrackingRead.model_validate(entry)

    def stop(
        self, project_id: int, task_id: int, entry_id: int, req: TimeTrackingStop, token: str
    ) -> TimeTrackingRead:
        user, _, access = self.enter_project(project_id, token)
        logger.info("⏱️ User %s stopping time tracking %s", user.id, entry_id)

        self._load_task(project_id, task_id)
        entry = self._load_entry(task_id, entry_id)
        ensure_allowed(access, Action.TIME_TRACKING_STOP, starter_id=entry.user_id)

        if entry.is_stopped:
            raise BadRequestError("Time tracking is already stopped")
        end_time = req.end_time or datetime.utcnow()
        if end_time < entry.start_time:
            raise BadRequestError("End time must not be before start time")

        entry.stop(end_time)
        if req.description is not None:
            entry.description = req.description
        self.entries.add(entry)
        self.commit()
        self.session.refresh(entry)

        logger.info("✅ Time tracking %s stopped after %s minutes", entry_id, entry.duration_minutes)
        return TimeTrackingRead.model_validate(entry)

    def list_for_task(self, project_id: int, task_id: int, token: str) -> List[TimeTrackingRead]:
        user, _, _ = self.enter_project(project_id, token)
        logger.info("User %s listing time tracking for task %s", user.id, task_id)
        self._load_task(project_id, task_id)
        return [TimeTrackingRead.model_validate(e) for e in self.entries.find_by_task(task_id)]

    def list_mine(self, project_id: int, token: str) -> List[TimeTrackingRead]:
        user, _, _ = self.enter_project(project_id, token)
        logger.info("User %s listing own time tracking in project %s", user.id, project_id)
        entries = self.entries.find_by_project_and_user(project_id, user.id)
        return [TimeTrackingRead.model_validate(e) for e in entries]

    def delete(self, project_id: int, task_id: int, entry_id: int, token: str) -> None:
        user, _, access = self.enter_project(project_id, token)
        logger.info("User %s deleting time tracking %s", user.id, entry_id)

        self._load_task(project_id, task_id)
        entry = self._load_entry(task_id, entry_id)
        ensure_allowed(access, Action.TIME_TRACKING_DELETE, starter_id=entry.user_id)

        self.entries.delete(entry)
        self.commit()
