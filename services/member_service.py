# services/member_service.py
import logging
from datetime import datetime
from typing import List

from core.exceptions import BadRequestError
from models.models import ProjectMember, ProjectRole
from schemas.member_schema import MemberInvite, MemberRead
from services.authorization import Action, ensure_allowed
from services.base_service import ProjectScopedService

logger = logging.getLogger(__name__)

ALREADY_MEMBER = "User is already a member of this project"
NOT_A_MEMBER = "User is not a member of this project"


class MemberService(ProjectScopedService):

    def invite_member(self, project_id: int, req: MemberInvite, token: str) -> MemberRead:
        user = self.authenticate(token)
        logger.info("User %s inviting user %s to project %s as %s", user.id, req.user_id, project_id, req.role.value)

        project = self.load_project(project_id)
        ensure_allowed(self.access_for(project, user.id), Action.MEMBER_INVITE)

        if req.role == ProjectRole.OWNER:
            raise BadRequestError("Ownership can only be transferred by changing a member's role")
        self.verify_user_exists(req.user_id, user.token, f"User does not exist: {req.user_id}")
        if req.user_id == project.owner_id or self.members.exists_by_project_and_user(project_id, req.user_id):
            raise BadRequestError(ALREADY_MEMBER)

        member = ProjectMember(
            project_id=project_id,
            user_id=req.user_id,
            role=req.role.value,
            invited_by=user.id,
            invitation_accepted=False,
            joined_at=datetime.utcnow(),
        )
        self.members.add(member)
        # unique (project_id, user_id) settles concurrent invites
        self.commit(conflict_message=ALREADY_MEMBER)
        self.session.refresh(member)

        logger.info("✅ Invitation %s created for user %s", member.id, req.user_id)
        return MemberRead.model_validate(member)

    def accept_invitation(self, project_id: int, token: str) -> MemberRead:
        user = self.authenticate(token)
        logger.info("User %s accepting invitation to project %s", user.id, project_id)

        self.load_project(project_id)
        member = self.members.find_by_project_and_user(project_id, user.id)
        if member is None:
            raise BadRequestError("No invitation found for this project")
        if member.invitation_accepted:
            raise BadRequestError("Invitation already accepted")

        member.invitation_accepted = True
        self.members.add(member)
        self.commit()
        self.session.refresh(member)
        return MemberRead.model_validate(member)

    def list_members(self, project_id: int, token: str) -> List[MemberRead]:
        user, _, _ = self.enter_project(project_id, token)
        logger.info("User %s listing members of project %s", user.id, project_id)
        return [MemberRead.model_validate(m) for m in self.members.find_by_project(project_id)]

    def update_member_role(self, project_id: int, user_id: int, role: ProjectRole, token: str) -> MemberRead:
        """Change a member's role; granting OWNER transfers ownership."""
        user = self.authenticate(token)
        logger.info("User %s changing role of user %s in project %s to %s", user.id, user_id, project_id, role.value)

        project = self.load_project(project_id)
        access = self.access_for(project, user.id)
        target = self.members.find_by_project_and_user(project_id, user_id)
        target_role = ProjectRole(target.role) if target is not None else None

        ensure_allowed(access, Action.MEMBER_CHANGE_ROLE, target_role=target_role, new_role=role)

        if user_id == project.owner_id:
            raise BadRequestError("Cannot change the project owner's role. Transfer ownership first.")
        if target is None:
            raise BadRequestError(NOT_A_MEMBER)

        if role == ProjectRole.OWNER:
            self._transfer_ownership(project, target)
        else:
            target.role = role.value
            self.members.add(target)

        self.commit()
        self.session.refresh(target)
        logger.info("✅ User %s is now %s in project %s", user_id, target.role, project_id)
        return MemberRead.model_validate(target)

    def _transfer_ownership(self, project, target: ProjectMember) -> None:
        previous_owner_id = project.owner_id
        previous = self.members.find_by_project_and_user(project.id, previous_owner_id)
        if previous is None:
            previous = ProjectMember(
                project_id=project.id,
                user_id=previous_owner_id,
                invited_by=previous_owner_id,
                invitation_accepted=True,
            )
        previous.role = ProjectRole.ADMIN.value
        self.members.add(previous)

        target.role = ProjectRole.OWNER.value
        target.invitation_accepted = True
        self.members.add(target)

        project.owner_id = target.user_id
        project.updated_at = datetime.utcnow()
        self.projects.add(project)
        logger.info("👑 Ownership of project %s moving from %s to %s", project.id, previous_owner_id, target.user_id)

    def remove_member(self, project_id: int, user_id: int, token: str) -> None:
        user = self.authenticate(token)
        logger.info("User %s removing user %s from project %s", user.id, user_id, project_id)

        project = self.load_project(project_id)
        access = self.access_for(project, user.id)
        target = self.members.find_by_project_and_user(project_id, user_id)
        target_role = ProjectRole(target.role) if target is not None else None

        ensure_allowed(access, Action.MEMBER_REMOVE, target_role=target_role)

        if user_id == project.owner_id:
            raise BadRequestError("Cannot remove the project owner")
        if target is None:
            raise BadRequestError(NOT_A_MEMBER)

        self.members.delete(target)
        self.commit()
        logger.info("✅ User %s removed from project %s", user_id, project_id)

    def leave_project(self, project_id: int, token: str) -> None:
        user = self.authenticate(token)
        logger.info("User %s leaving project %s", user.id, project_id)

        project = self.load_project(project_id)
        if user.id == project.owner_id:
            raise BadRequestError("Project owner cannot leave the project. Transfer ownership first.")
        member = self.members.find_by_project_and_user(project_id, user.id)
        if member is None:
            raise BadRequestError(NOT_A_MEMBER)
        ensure_allowed(self.access_for(project, user.id), Action.PROJECT_LEAVE)

        self.members.delete(member)
        self.commit()
        logger.info("✅ User %s left project %s", user.id, project_id)
