# =============================================================================
# app/schemas/member.py
# =============================================================================
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, ConfigDict
from app.models.member import ProjectRole

class AddMemberRequest(BaseModel):
    email: EmailStr
    role: ProjectRole = ProjectRole.MEMBER

class UpdateMemberRoleRequest(BaseModel):
    role: ProjectRole

class MemberResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    email: str
    role: ProjectRole
    created_at: datetime

class InviteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    role: ProjectRole
    code: str
    expires_at: datetime
    created_at: datetime

class AddMemberResponse(BaseModel):
    """Either the user joined directly or an invite was created for them"""
    member: Optional[MemberResponse] = None
    invite: Optional[InviteResponse] = None

class InvitePreview(BaseModel):
    project_id: UUID
    project_name: str
    project_description: Optional[str] = None
    invited_by_name: str
    email: str
    role: ProjectRole
    expires_at: datetime
    email_matches: bool = False

class AcceptInviteRequest(BaseModel):
    code: str

class AcceptInviteResponse(BaseModel):
    project_id: UUID
    project_name: str
    role: ProjectRole
