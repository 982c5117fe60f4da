# =============================================================================
# app/core/dependencies.py
# =============================================================================
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.models.user import User
from app.models.project import Project
from app.core.security import verify_token
from app.core.logger import get_module_logger
from app.services.project_service import ProjectService

logger = get_module_logger(__name__, "dependencies.log")

security = HTTPBearer(auto_error=False)  # Don't auto-error, handle manually

def get_current_user_email(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Get current user email from the bearer token"""
    if credentials is None:
        logger.error("No token provided in Authorization header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authentication token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return verify_token(credentials.credentials)

def get_current_user(
    email: str = Depends(get_current_user_email),
    db: Session = Depends(get_db)
) -> User:
    """Get current user from database"""
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        logger.error(f"User not found: {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

def get_project(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Project:
    """Project from the path, visible to the current user"""
    return ProjectService.get_project_for_user(db, project_id, current_user)
