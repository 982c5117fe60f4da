# =============================================================================
# app/services/member_service.py
# =============================================================================
from datetime import datetime
from typing import List
from uuid import UUID
from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from app.core.security import generate_invite_code
from app.core.tiers import Feature
from app.core.logger import get_module_logger
from app.models.user import User
from app.models.project import Project
from app.models.member import ProjectMember, ProjectInvite, ProjectRole, INVITE_TTL
from app.schemas.member import MemberResponse, InvitePreview
from app.services.project_service import ProjectService
from app.services.subscription_service import SubscriptionService
from app.services.user_service import UserService

logger = get_module_logger(__name__, "member_service.log")

class MemberService:
    """Project members and email invites"""

    @staticmethod
    def to_member_response(member: ProjectMember) -> MemberResponse:
        return MemberResponse(
            id=member.id,
            user_id=member.user_id,
            name=member.user.name,
            email=member.user.email,
            role=member.role,
            created_at=member.created_at,
        )

    @staticmethod
    def list_members(project: Project) -> List[ProjectMember]:
        return sorted(project.members, key=lambda m: m.created_at)

    @staticmethod
    def _get_member(project: Project, member_id: UUID) -> ProjectMember:
        member = next((m for m in project.members if m.id == member_id), None)
        if member is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
        return member

    @staticmethod
    def _get_invite(project: Project, invite_id: UUID) -> ProjectInvite:
        invite = next((i for i in project.invites if i.id == invite_id and i.accepted_at is None), None)
        if invite is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite not found")
        return invite

    @staticmethod
    def _unique_code(db: Session) -> str:
        while True:
            code = generate_invite_code()
            if not db.query(ProjectInvite).filter(ProjectInvite.code == code).first():
                return code

    @staticmethod
    def add_member(db: Session, project: Project, user: User, email: str, role: ProjectRole):
        """Add an existing user directly, or invite an unknown email.

        Returns ``(member, None)`` or ``(None, invite)``.
        """
        ProjectService.require_manager(project, user)
        SubscriptionService.require_feature(user, Feature.INVITE_MEMBERS)

        email = email.strip().lower()
        existing_user = UserService.get_user_by_email(db, email)

        if existing_user is not None:
            if project.user_is_owner(existing_user.id):
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User is the project owner")
            if project.membership_for(existing_user.id):
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User is already a member")

            member = ProjectMember(project_id=project.id, user_id=existing_user.id, role=role)
            db.add(member)
            db.commit()
            db.refresh(member)
            logger.info(f"👥 {email} added to project {project.id} as {role.value}")
            return member, None

        pending = [i for i in project.invites if i.email == email and i.accepted_at is None]
        for invite in pending:
            if not invite.is_expired:
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="An invite is already pending for this email")
            db.delete(invite)

        invite = ProjectInvite(
            project_id=project.id,
            invited_by_id=user.id,
            email=email,
            role=role,
            code=MemberService._unique_code(db),
            expires_at=datetime.utcnow() + INVITE_TTL,
        )
        db.add(invite)
        db.commit()
        db.refresh(invite)
        logger.info(f"✉️ Invite {invite.code} created for {email} on project {project.id}")
        return None, invite

    @staticmethod
    def update_role(db: Session, project: Project, user: User, member_id: UUID, role: ProjectRole) -> ProjectMember:
        ProjectService.require_manager(project, user)
        member = MemberService._get_member(project, member_id)
        member.role = role
        db.commit()
        db.refresh(member)
        logger.info(f"Member {member.user_id} on project {project.id} is now {role.value}")
        return member

    @staticmethod
    def remove_member(db: Session, project: Project, user: User, member_id: UUID) -> None:
        member = MemberService._get_member(project, member_id)
        # members may always leave on their own
        if member.user_id != user.id:
            ProjectService.require_manager(project, user)
        project.members.remove(member)
        db.commit()
        logger.info(f"Member {member.user_id} removed from project {project.id}")

    @staticmethod
    def list_invites(project: Project) -> List[ProjectInvite]:
        return sorted(
            (i for i in project.invites if i.accepted_at is None and not i.is_expired),
            key=lambda i: i.created_at,
        )

    @staticmethod
    def cancel_invite(db: Session, project: Project, user: User, invite_id: UUID) -> None:
        ProjectService.require_manager(project, user)
        invite = MemberService._get_invite(project, invite_id)
        project.invites.remove(invite)
        db.commit()
        logger.info(f"Invite {invite.code} cancelled on project {project.id}")

    @staticmethod
    def resend_invite(db: Session, project: Project, user: User, invite_id: UUID) -> ProjectInvite:
        ProjectService.require_manager(project, user)
        invite = MemberService._get_invite(project, invite_id)
        invite.code = MemberService._unique_code(db)
        invite.expires_at = datetime.utcnow() + INVITE_TTL
        db.commit()
        db.refresh(invite)
        logger.info(f"✉️ Invite for {invite.email} re-issued as {invite.code}")
        return invite

    # -------------------------------------------------------------------------
    # Invitee side
    # -------------------------------------------------------------------------

    @staticmethod
    def _find_open_invite(db: Session, code: str) -> ProjectInvite:
        invite = (
            db.query(ProjectInvite)
            .filter(ProjectInvite.code == code.strip().upper(), ProjectInvite.accepted_at.is_(None))
            .first()
        )
        if invite is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite not found")
        if invite.is_expired:
            raise HTTPException(status_code=status.HTTP_410_GONE, detail="Invite has expired")
        return invite

    @staticmethod
    def preview_invite(db: Session, code: str, user: User) -> InvitePreview:
        invite = MemberService._find_open_invite(db, code)
        return InvitePreview(
            project_id=invite.project_id,
            project_name=invite.project.name,
            project_description=invite.project.description,
            invited_by_name=invite.invited_by.name,
            email=invite.email,
            role=invite.role,
            expires_at=invite.expires_at,
            email_matches=invite.email == user.email.lower(),
        )

    @staticmethod
    def accept_invite(db: Session, code: str, user: User) -> ProjectMember:
        invite = MemberService._find_open_invite(db, code)
        if invite.email != user.email.lower():
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="This invite was sent to a different email address"
            )

        project = invite.project
        if project.user_has_access(user.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="You already have access to this project")

        member = ProjectMember(project_id=project.id, user_id=user.id, role=invite.role)
        invite.accepted_at = datetime.utcnow()
        db.add(member)
        db.commit()
        db.refresh(member)
        logger.info(f"🎉 {user.email} joined project {project.id} via invite {invite.code}")
        return member
