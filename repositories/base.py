"""
Generic repository over a SQLModel session.

Repositories add and delete but never commit: the calling service
owns the transaction and commits once per operation.
"""
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlmodel import Session, SQLModel, select

from core.exceptions import NotFoundError

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Example:
        class TaskRepository(BaseRepository[Task]):
            def __init__(self, session: Session):
                super().__init__(Task, session)
    """

    not_found_label: Optional[str] = None

    def __init__(self, model: Type[ModelType], session: Session):
        self.model = model
        self.session = session

    def get(self, id: int) -> Optional[ModelType]:
        return self.session.get(self.model, id)

    def get_or_fail(self, id: int) -> ModelType:
        """Get a record by primary key or raise NotFoundError."""
        obj = self.get(id)
        if obj is None:
            label = self.not_found_label or self.model.__name__
            raise NotFoundError(f"{label} not found with id: {id}")
        return obj

    def list_by(self, order_by: Any = None, **filters: Any) -> List[ModelType]:
        statement = select(self.model)
        for key, value in filters.items():
            statement = statement.where(getattr(self.model, key) == value)
        if order_by is not None:
            statement = statement.order_by(order_by)
        return list(self.session.exec(statement).all())

    def add(self, obj: ModelType) -> ModelType:
        self.session.add(obj)
        return obj

    def delete(self, obj: ModelType) -> None:
        self.session.delete(obj)
