from repositories.base import BaseRepository
from repositories.project_repository import ProjectRepository, ProjectMemberRepository
from repositories.task_repository import TaskRepository, TimeTrackingRepository
from repositories.calendar_repository import ProjectCalendarRepository, CalendarEventRepository

__all__ = [
    "BaseRepository",
    "ProjectRepository",
    "ProjectMemberRepository",
    "TaskRepository",
    "TimeTrackingRepository",
    "ProjectCalendarRepository",
    "CalendarEventRepository",
]
