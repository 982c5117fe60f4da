# =============================================================================
# app/db/init_db.py
# =============================================================================
from app.db.base import Base
from app.db.session import engine
# Imported so every table is registered on Base.metadata
from app.models.user import User  # noqa: F401
from app.models.project import Project  # noqa: F401
from app.models.member import ProjectMember, ProjectInvite  # noqa: F401
from app.models.feedback import Feedback, Comment, Vote, IntegrationLink  # noqa: F401

def init_db(bind=None):
    """Create any missing tables"""
    Base.metadata.create_all(bind=bind or engine)
