# services/base_service.py
import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from core.exceptions import BadRequestError, InternalError
from core.security import AuthenticatedUser, RequestAuthenticator
from models.models import Project, ProjectMember, ProjectRole
from repositories import ProjectMemberRepository, ProjectRepository
from services.authorization import Action, ProjectAccess, ensure_allowed
from services.user_client import UserServiceClient

logger = logging.getLogger(__name__)


class ProjectScopedService:
    """
    Shared plumbing for services whose operations act inside one project:
    authenticate, load the project, build the caller's access snapshot,
    and commit exactly once.
    """

    def __init__(
        self,
        session: Session,
        authenticator: RequestAuthenticator,
        identity_client: UserServiceClient,
    ):
        self.session = session
        self.authenticator = authenticator
        self.identity_client = identity_client
        self.projects = ProjectRepository(session)
        self.members = ProjectMemberRepository(session)

    # ------------------------
    # Authentication + loading
    # ------------------------
    def authenticate(self, token: str) -> AuthenticatedUser:
        return self.authenticator.authenticate(token)

    def load_project(self, project_id: int) -> Project:
        return self.projects.get_or_fail(project_id)

    def access_for(self, project: Project, actor_id: int) -> ProjectAccess:
        member = self.members.find_by_project_and_user(project.id, actor_id)
        return ProjectAccess.for_project(project, actor_id, member)

    def enter_project(
        self, project_id: int, token: str, action: Action = Action.PROJECT_READ
    ) -> Tuple[AuthenticatedUser, Project, ProjectAccess]:
        """Authenticate, load the project and pass the membership gate."""
        user = self.authenticate(token)
        project = self.load_project(project_id)
        access = self.access_for(project, user.id)
        ensure_allowed(access, Action.PROJECT_READ)
        if action != Action.PROJECT_READ:
            ensure_allowed(access, action)
        return user, project, access

    # ------------------------
    # Remote checks
    # ------------------------
    def verify_user_exists(self, user_id: int, token: str, message: str) -> None:
        """The fallback policy decides when the identity service is down."""
        if not self.identity_client.user_exists(user_id, token):
            raise BadRequestError(message)

    def enroll_member(self, project: Project, user_id: int, invited_by: int) -> Optional[ProjectMember]:
        """Add user_id as an accepted MEMBER unless they already belong to the project."""
        if user_id == project.owner_id:
            return None
        if self.members.find_by_project_and_user(project.id, user_id) is not None:
            return None
        member = ProjectMember(
            project_id=project.id,
            user_id=user_id,
            role=ProjectRole.MEMBER.value,
            invited_by=invited_by,
            invitation_accepted=True,
        )
        self.members.add(member)
        logger.info("👥 Auto-enrolled user %s in project %s as MEMBER", user_id, project.id)
        return member

    # ------------------------
    # Transaction
    # ------------------------
    def commit(self, conflict_message: str = "Request conflicts with existing data") -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.info("Integrity conflict: %s", e.orig)
            raise BadRequestError(conflict_message) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("❌ Database error during commit")
            raise InternalError("A database error occurred. Please try again later.") from e
