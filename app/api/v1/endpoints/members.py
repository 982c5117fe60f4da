# =============================================================================
# app/api/v1/endpoints/members.py
# =============================================================================
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.dependencies import get_current_user, get_project
from app.models.user import User
from app.models.project import Project
from app.services.member_service import MemberService
from app.schemas.member import (
    AddMemberRequest,
    AddMemberResponse,
    UpdateMemberRoleRequest,
    MemberResponse,
    InviteResponse,
    InvitePreview,
    AcceptInviteRequest,
    AcceptInviteResponse,
)
from app.core.logger import get_module_logger

logger = get_module_logger(__name__, "members.log")

router = APIRouter()

# -----------------------------------------------------------------------------
# /projects/{project_id}/members and /invites
# -----------------------------------------------------------------------------

@router.get("/projects/{project_id}/members", response_model=List[MemberResponse])
async def list_members(project: Project = Depends(get_project)):
    return [MemberService.to_member_response(m) for m in MemberService.list_members(project)]

@router.post("/projects/{project_id}/members", response_model=AddMemberResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    member_in: AddMemberRequest,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add an existing user, or create an invite for an unknown email (team plan)"""
    member, invite = MemberService.add_member(db, project, current_user, member_in.email, member_in.role)
    return AddMemberResponse(
        member=MemberService.to_member_response(member) if member else None,
        invite=InviteResponse.model_validate(invite) if invite else None,
    )

@router.patch("/projects/{project_id}/members/{member_id}", response_model=MemberResponse)
async def update_member_role(
    member_id: UUID,
    role_in: UpdateMemberRoleRequest,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    member = MemberService.update_role(db, project, current_user, member_id, role_in.role)
    return MemberService.to_member_response(member)

@router.delete("/projects/{project_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    member_id: UUID,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    MemberService.remove_member(db, project, current_user, member_id)

@router.get("/projects/{project_id}/invites", response_model=List[InviteResponse])
async def list_invites(project: Project = Depends(get_project)):
    """Pending, unexpired invites"""
    return [InviteResponse.model_validate(i) for i in MemberService.list_invites(project)]

@router.delete("/projects/{project_id}/invites/{invite_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_invite(
    invite_id: UUID,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    MemberService.cancel_invite(db, project, current_user, invite_id)

@router.post("/projects/{project_id}/invites/{invite_id}/resend", response_model=InviteResponse)
async def resend_invite(
    invite_id: UUID,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    invite = MemberService.resend_invite(db, project, current_user, invite_id)
    return InviteResponse.model_validate(invite)

# -----------------------------------------------------------------------------
# Invitee side
# -----------------------------------------------------------------------------

@router.get("/invites/preview/{code}", response_model=InvitePreview)
async def preview_invite(
    code: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Project and inviter details for an invite code (404 unknown, 410 expired)"""
    return MemberService.preview_invite(db, code, current_user)

@router.post("/invites/accept", response_model=AcceptInviteResponse)
async def accept_invite(
    accept_in: AcceptInviteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    member = MemberService.accept_invite(db, accept_in.code, current_user)
    return AcceptInviteResponse(project_id=member.project_id, project_name=member.project.name, role=member.role)
