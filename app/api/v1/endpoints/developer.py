# =============================================================================
# app/api/v1/endpoints/developer.py
# =============================================================================
"""
Developer commands. Every route answers 404 in production.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.config import settings
from app.core.dependencies import get_current_user
from app.integrations.registry import PROVIDERS
from app.models.user import User
from app.services.feedback_service import FeedbackService
from app.services.subscription_service import SubscriptionService
from app.services.cleanup_scheduler import get_scheduler_status
from app.schemas.subscription import SubscriptionInfo, SetSubscriptionTier, DeveloperConfig, CleanupResult
from app.core.logger import get_module_logger

logger = get_module_logger(__name__, "developer.log")

def require_non_production():
    if settings.is_production:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

router = APIRouter(dependencies=[Depends(require_non_production)])

@router.get("/config", response_model=DeveloperConfig)
async def get_config(current_user: User = Depends(get_current_user)):
    return DeveloperConfig(
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
        tier_override_active=settings.tier_override_active,
        scheduler_enabled=get_scheduler_status()["running"],
        feedback_retention_days=settings.FEEDBACK_RETENTION_DAYS,
        providers={name: spec.display_name for name, spec in PROVIDERS.items()},
    )

@router.post("/subscription-tier", response_model=SubscriptionInfo)
async def set_subscription_tier(
    tier_in: SetSubscriptionTier,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Overwrite the current user's stored tier"""
    user = SubscriptionService.set_tier(db, current_user, tier_in.tier, tier_in.status)
    return SubscriptionService.get_info(db, user)

@router.post("/cleanup", response_model=CleanupResult)
async def run_cleanup(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Run the feedback cleanup job now"""
    logger.info(f"🧹 Manual cleanup requested by {current_user.email}")
    deleted, cutoff = FeedbackService.cleanup_old_feedback(db)
    return CleanupResult(deleted_feedback=deleted, cutoff=cutoff)
