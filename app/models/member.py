# =============================================================================
# app/models/member.py
# =============================================================================
import enum
from datetime import datetime, timedelta
from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

INVITE_TTL = timedelta(days=7)

class ProjectRole(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"

def _role_column():
    return Column(
        Enum(ProjectRole, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        default=ProjectRole.MEMBER,
    )

class ProjectMember(BaseModel):
    __tablename__ = "project_members"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_member"),)

    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = _role_column()

    project = relationship("Project", back_populates="members")
    user = relationship("User", back_populates="memberships")

class ProjectInvite(BaseModel):
    __tablename__ = "project_invites"

    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    invited_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    email = Column(String, nullable=False, index=True)
    role = _role_column()
    code = Column(String, nullable=False, unique=True, index=True)
    expires_at = Column(DateTime, nullable=False, default=lambda: datetime.utcnow() + INVITE_TTL)
    accepted_at = Column(DateTime, nullable=True)

    project = relationship("Project", back_populates="invites")
    invited_by = relationship("User")

    @property
    def is_expired(self) -> bool:
        return self.expires_at < datetime.utcnow()
