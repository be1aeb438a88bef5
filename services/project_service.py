# services/project_service.py
import logging
from datetime import datetime
from typing import Dict, List, Optional

from models.models import Project
from schemas.project_schema import ProjectCreate, ProjectRead, ProjectUpdate
from services.authorization import Action, ensure_allowed
from services.base_service import ProjectScopedService

logger = logging.getLogger(__name__)


def _unique_ids(ids: Optional[List[int]]) -> List[int]:
    return sorted(set(ids or []))


class ProjectService(ProjectScopedService):

    def create_project(self, req: ProjectCreate, token: str) -> ProjectRead:
        user = self.authenticate(token)
        logger.info("📁 Creating project '%s' for user %s", req.name, user.id)

        project = Project(
            name=req.name,
            description=req.description,
            owner_id=user.id,
            member_ids=_unique_ids(req.member_ids),
            admin_ids=_unique_ids(req.admin_ids),
            created_at=datetime.utcnow(),
        )
        self.projects.add(project)
        self.commit()
        self.session.refresh(project)

        logger.info("✅ Project %s created by user %s", project.id, user.id)
        return ProjectRead.model_validate(project)

    def list_projects_for_user(self, token: str) -> List[ProjectRead]:
        """Owned, legacy-listed and member-row projects, newest first."""
        user = self.authenticate(token)
        logger.info("Listing projects for user %s", user.id)

        found: Dict[int, Project] = {}
        for source in (
            self.projects.find_owned_by(user.id),
            self.projects.find_listing_legacy(user.id),
            self.projects.find_with_member_rows(user.id),
        ):
            for project in source:
                found[project.id] = project

        ordered = sorted(found.values(), key=lambda p: (p.created_at, p.id), reverse=True)
        return [ProjectRead.model_validate(p) for p in ordered]

    def get_project(self, project_id: int, token: str) -> ProjectRead:
        user, project, _ = self.enter_project(project_id, token)
        logger.info("User %s reading project %s", user.id, project_id)
        return ProjectRead.model_validate(project)

    def update_project(self, project_id: int, req: ProjectUpdate, token: str) -> ProjectRead:
        user = self.authenticate(token)
        logger.info("User %s updating project %s", user.id, project_id)

        project = self.load_project(project_id)
        ensure_allowed(self.access_for(project, user.id), Action.PROJECT_UPDATE)

        if req.name is not None:
            project.name = req.name
        if req.description is not None:
            project.description = req.description
        if req.member_ids is not None:
            for member_id in req.member_ids:
                self.verify_user_exists(member_id, user.token, f"Member does not exist: {member_id}")
            project.member_ids = _unique_ids(req.member_ids)
        if req.admin_ids is not None:
            for admin_id in req.admin_ids:
                self.verify_user_exists(admin_id, user.token, f"Admin does not exist: {admin_id}")
            project.admin_ids = _unique_ids(req.admin_ids)

        project.updated_at = datetime.utcnow()
        self.projects.add(project)
        self.commit()
        self.session.refresh(project)

        logger.info("✅ Project %s updated", project_id)
        return ProjectRead.model_validate(project)

    def delete_project(self, project_id: int, token: str) -> None:
        user = self.authenticate(token)
        logger.info("User %s deleting project %s", user.id, project_id)

        project = self.load_project(project_id)
        ensure_allowed(self.access_for(project, user.id), Action.PROJECT_DELETE)

        self.projects.delete(project)
        self.commit()
        logger.info("🗑️ Project %s deleted with its tasks, members and calendar", project_id)
