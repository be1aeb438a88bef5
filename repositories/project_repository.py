from typing import List, Optional

from sqlalchemy import cast, or_
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Session, select

from models.models import Project, ProjectMember
from repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    not_found_label = "Project"

    def __init__(self, session: Session):
        super().__init__(Project, session)

    def find_owned_by(self, user_id: int) -> List[Project]:
        return self.list_by(owner_id=user_id)

    def find_with_member_rows(self, user_id: int) -> List[Project]:
        statement = (
            select(Project)
            .join(ProjectMember, ProjectMember.project_id == Project.id)
            .where(ProjectMember.user_id == user_id)
        )
        return list(self.session.exec(statement).all())

    @staticmethod
    def legacy_listing_statement(user_id: int):
        return select(Project).where(
            or_(
                cast(Project.member_ids, JSONB).contains([user_id]),
                cast(Project.admin_ids, JSONB).contains([user_id]),
            )
        )

    def find_listing_legacy(self, user_id: int) -> List[Project]:
        """
        Projects whose legacy member/admin id lists contain the user.

        On PostgreSQL the lists are matched in SQL with JSONB containment.
        Other backends scan every project and filter in Python; that cost
        grows with the project table and is accepted for SQLite dev setups.
        """
        if self.session.get_bind().dialect.name == "postgresql":
            return list(self.session.exec(self.legacy_listing_statement(user_id)).all())

        projects = self.session.exec(select(Project)).all()
        return [
            project for project in projects
            if user_id in (project.member_ids or []) or user_id in (project.admin_ids or [])
        ]


class ProjectMemberRepository(BaseRepository[ProjectMember]):
    not_found_label = "Project member"

    def __init__(self, session: Session):
        super().__init__(ProjectMember, session)

    def find_by_project_and_user(self, project_id: int, user_id: int) -> Optional[ProjectMember]:
        statement = select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
        )
        return self.session.exec(statement).first()

    def find_by_project(self, project_id: int) -> List[ProjectMember]:
        return self.list_by(order_by=ProjectMember.id, project_id=project_id)

    def exists_by_project_and_user(self, project_id: int, user_id: int) -> bool:
        return self.find_by_project_and_user(project_id, user_id) is not None
