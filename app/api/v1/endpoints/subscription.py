# =============================================================================
# app/api/v1/endpoints/subscription.py
# =============================================================================
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.services.subscription_service import SubscriptionService
from app.schemas.subscription import SubscriptionInfo

router = APIRouter()

@router.get("", response_model=SubscriptionInfo)
async def get_subscription(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Tier, limits and unlocked features (``environment_override`` outside production)"""
    return SubscriptionService.get_info(db, current_user)
