# =============================================================================
# app/schemas/subscription.py
# =============================================================================
from datetime import datetime
from typing import Optional, Dict
from pydantic import BaseModel
from app.core.tiers import SubscriptionTier, SubscriptionStatus

class SubscriptionLimits(BaseModel):
    max_projects: Optional[int] = None
    max_feedback_per_project: Optional[int] = None
    current_projects: int = 0

class SubscriptionInfo(BaseModel):
    tier: SubscriptionTier
    status: Optional[SubscriptionStatus] = None
    expires_at: Optional[datetime] = None
    effective_tier: SubscriptionTier
    environment: str
    environment_override: bool
    limits: SubscriptionLimits
    features: Dict[str, bool]

class SetSubscriptionTier(BaseModel):
    tier: SubscriptionTier
    status: Optional[SubscriptionStatus] = SubscriptionStatus.ACTIVE

class DeveloperConfig(BaseModel):
    environment: str
    debug: bool
    tier_override_active: bool
    scheduler_enabled: bool
    feedback_retention_days: int
    providers: Dict[str, str]

class CleanupResult(BaseModel):
    deleted_feedback: int
    cutoff: datetime
