from typing import List

from sqlmodel import Session, select

from models.models import Task, TimeTracking
from repositories.base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    not_found_label = "Task"

    def __init__(self, session: Session):
        super().__init__(Task, session)

    def find_top_level_by_project(self, project_id: int) -> List[Task]:
        statement = (
            select(Task)
            .where(Task.project_id == project_id, Task.parent_task_id == None)  # noqa: E711
            .order_by(Task.id)
        )
        return list(self.session.exec(statement).all())


class TimeTrackingRepository(BaseRepository[TimeTracking]):
    not_found_label = "Time tracking"

    def __init__(self, session: Session):
        super().__init__(TimeTracking, session)

    def find_by_task(self, task_id: int) -> List[TimeTracking]:
        return self.list_by(order_by=TimeTracking.start_time, task_id=task_id)

    def find_by_project_and_user(self, project_id: int, user_id: int) -> List[TimeTracking]:
        statement = (
            select(TimeTracking)
            .join(Task, Task.id == TimeTracking.task_id)
            .where(Task.project_id == project_id, TimeTracking.user_id == user_id)
            .order_by(TimeTracking.start_time)
        )
        return list(self.session.exec(statement).all())
