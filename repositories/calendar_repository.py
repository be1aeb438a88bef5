from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from models.models import CalendarEvent, ProjectCalendar
from repositories.base import BaseRepository


class ProjectCalendarRepository(BaseRepository[ProjectCalendar]):
    def __init__(self, session: Session):
        super().__init__(ProjectCalendar, session)

    def find_by_project(self, project_id: int) -> Optional[ProjectCalendar]:
        statement = select(ProjectCalendar).where(ProjectCalendar.project_id == project_id)
        return self.session.exec(statement).first()


class CalendarEventRepository(BaseRepository[CalendarEvent]):
    not_found_label = "Calendar event"

    def __init__(self, session: Session):
        super().__init__(CalendarEvent, session)

    def find_by_calendar(self, calendar_id: int) -> List[CalendarEvent]:
        return self.list_by(order_by=CalendarEvent.start_time, calendar_id=calendar_id)

    def find_by_calendar_between(
        self, calendar_id: int, start: datetime, end: datetime
    ) -> List[CalendarEvent]:
        statement = (
            select(CalendarEvent)
            .where(
                CalendarEvent.calendar_id == calendar_id,
                CalendarEvent.start_time >= start,
                CalendarEvent.start_time <= end,
            )
            .order_by(CalendarEvent.start_time)
        )
        return list(self.session.exec(statement).all())
