# services/calendar_service.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from core.exceptions import BadRequestError, NotFoundError
from models.models import CalendarEvent, Project, ProjectCalendar
from repositories import CalendarEventRepository, ProjectCalendarRepository, TaskRepository
from schemas.calendar_schema import (
    CalendarEventCreate,
    CalendarEventRead,
    CalendarEventUpdate,
    CalendarRead,
)
from schemas.common import to_naive_utc
from services.authorization import Action, ensure_allowed
from services.base_service import ProjectScopedService

logger = logging.getLogger(__name__)

CALENDAR_NOT_FOUND = "Calendar not found for this project"


class CalendarService(ProjectScopedService):

    def __init__(self, session, authenticator, identity_client):
        super().__init__(session, authenticator, identity_client)
        self.calendars = ProjectCalendarRepository(session)
        self.events = CalendarEventRepository(session)
        self.tasks = TaskRepository(session)

    # ------------------------
    # Helpers
    # ------------------------
    def _get_or_create_calendar(self, project: Project) -> ProjectCalendar:
        """Conditional insert inside a SAVEPOINT; a lost race re-reads the winner's row."""
        calendar = self.calendars.find_by_project(project.id)
        if calendar is not None:
            return calendar

        try:
            with self.session.begin_nested():
                calendar = ProjectCalendar(
                    project_id=project.id,
                    name=f"{project.name} Calendar",
                    description=f"Calendar for project {project.name}",
                )
                self.calendars.add(calendar)
        except IntegrityError:
            logger.info("Calendar for project %s created concurrently, re-reading", project.id)
            calendar = self.calendars.find_by_project(project.id)
        return calendar

    def _check_linked_task(self, project_id: int, task_id: int) -> None:
        task = self.tasks.get_or_fail(task_id)
        if task.project_id != project_id:
            raise BadRequestError("Task does not belong to this project")

    def _load_event(self, project_id: int, event_id: int) -> CalendarEvent:
        event = self.events.get(event_id)
        if event is None:
            raise NotFoundError(f"Event not found with id: {event_id}")
        calendar = self.calendars.find_by_project(project_id)
        if calendar is None or event.calendar_id != calendar.id:
            raise BadRequestError("Event does not belong to this project calendar")
        return event

    # ------------------------
    # Operations
    # ------------------------
    def create_calendar(self, project_id: int, name: str, description: Optional[str], token: str) -> CalendarRead:
        user, project, access = self.enter_project(project_id, token)
        logger.info("📅 User %s creating calendar for project %s", user.id, project_id)
        ensure_allowed(access, Action.CALENDAR_CREATE)

        if self.calendars.find_by_project(project_id) is not None:
            raise BadRequestError("Calendar already exists for this project")

        calendar = ProjectCalendar(project_id=project.id, name=name, description=description)
        self.calendars.add(calendar)
        self.commit(conflict_message="Calendar already exists for this project")
        self.session.refresh(calendar)
        return CalendarRead.model_validate(calendar)

    def add_event(self, project_id: int, req: CalendarEventCreate, token: str) -> CalendarEventRead:
        user, project, _ = self.enter_project(project_id, token, Action.CALENDAR_EVENT_CREATE)
        logger.info("📅 User %s adding event '%s' to project %s", user.id, req.title, project_id)

        if req.end_time is not None and req.end_time < req.start_time:
            raise BadRequestError("Event end time must not be before its start time")
        if req.task_id is not None:
            self._check_linked_task(project_id, req.task_id)

        calendar = self._get_or_create_calendar(project)
        event = CalendarEvent(
            calendar_id=calendar.id,
            title=req.title,
            description=req.description,
            event_type=req.event_type.value,
            start_time=req.start_time,
            end_time=req.end_time,
            all_day=req.all_day,
            location=req.location,
            task_id=req.task_id,
            created_by=user.id,
            created_at=datetime.utcnow(),
        )
        self.events.add(event)
        self.commit()
        self.session.refresh(event)

        logger.info("✅ Event %s added to calendar %s", event.id, calendar.id)
        return CalendarEventRead.model_validate(event)

    def list_events(
        self,
        project_id: int,
        token: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[CalendarEventRead]:
        user, _, _ = self.enter_project(project_id, token)
        logger.info("User %s listing events of project %s", user.id, project_id)

        calendar = self.calendars.find_by_project(project_id)
        if calendar is None:
            raise NotFoundError(CALENDAR_NOT_FOUND)

        if start is not None and end is not None:
            events = self.events.find_by_calendar_between(calendar.id, to_naive_utc(start), to_naive_utc(end))
        else:
            events = self.events.find_by_calendar(calendar.id)
        return [CalendarEventRead.model_validate(e) for e in events]

    def update_event(
        self, project_id: int, event_id: int, req: CalendarEventUpdate, token: str
    ) -> CalendarEventRead:
        user, _, access = self.enter_project(project_id, token)
        logger.info("User %s updating event %s in project %s", user.id, event_id, project_id)

        event = self._load_event(project_id, event_id)
        ensure_allowed(access, Action.CALENDAR_EVENT_UPDATE, creator_id=event.created_by)

        for field in ("title", "description", "location", "start_time", "end_time", "all_day"):
            value = getattr(req, field)
            if value is not None:
                setattr(event, field, value)
        if req.event_type is not None:
            event.event_type = req.event_type.value
        if "task_id" in req.model_fields_set:
            if req.task_id is not None:
                self._check_linked_task(project_id, req.task_id)
            event.task_id = req.task_id

        if event.end_time is not None and event.end_time < event.start_time:
            raise BadRequestError("Event end time must not be before its start time")

        event.updated_at = datetime.utcnow()
        self.events.add(event)
        self.commit()
        self.session.refresh(event)
        return CalendarEventRead.model_validate(event)

    def delete_event(self, project_id: int, event_id: int, token: str) -> None:
        user, _, access = self.enter_project(project_id, token)
        logger.info("User %s deleting event %s in project %s", user.id, event_id, project_id)

        event = self._load_event(project_id, event_id)
        ensure_allowed(access, Action.CALENDAR_EVENT_DELETE, creator_id=event.created_by)

        self.events.delete(event)
        self.commit()
