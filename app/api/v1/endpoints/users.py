# =============================================================================
# app/api/v1/endpoints/users.py
# =============================================================================
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.schemas.user import UserResponse, UserUpdate
from app.core.dependencies import get_current_user
from app.models.user import User
from app.services.user_service import UserService
from app.db.session import get_db
from app.core.logger import get_module_logger

logger = get_module_logger(__name__, "users.log")

router = APIRouter()

@router.get("/me", response_model=UserResponse, status_code=200)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    logger.info(f"Fetching information for user: {current_user.email}")
    return UserResponse.model_validate(current_user)

@router.patch("/me", response_model=UserResponse, status_code=200)
async def update_current_user(
    user_update: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update name / profile image"""
    user = UserService.update_user(db, current_user, user_update)
    return UserResponse.model_validate(user)
