# =============================================================================
# app/core/tiers.py
# =============================================================================
"""
Subscription tiers, their limits and the features each one unlocks.

free < pro < team: a higher tier meets every requirement of a lower one.
"""
import enum
from typing import Optional


class SubscriptionTier(str, enum.Enum):
    FREE = "free"
    PRO = "pro"
    TEAM = "team"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]

    @property
    def max_projects(self) -> Optional[int]:
        """None means unlimited"""
        return {SubscriptionTier.FREE: 1, SubscriptionTier.PRO: 2}.get(self)

    @property
    def max_feedback_per_project(self) -> Optional[int]:
        return 10 if self is SubscriptionTier.FREE else None

    def meets_requirement(self, required: "SubscriptionTier") -> bool:
        return self.rank >= SubscriptionTier(required).rank


_TIER_RANK = {
    SubscriptionTier.FREE: 0,
    SubscriptionTier.PRO: 1,
    SubscriptionTier.TEAM: 2,
}


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    GRACE_PERIOD = "grace_period"
    PAUSED = "paused"

    @property
    def is_active(self) -> bool:
        return self in (SubscriptionStatus.ACTIVE, SubscriptionStatus.GRACE_PERIOD)


class Feature(str, enum.Enum):
    INTEGRATIONS = "integrations"
    CONFIGURABLE_STATUSES = "configurable_statuses"
    INVITE_MEMBERS = "invite_members"
    ADVANCED_ANALYTICS = "advanced_analytics"


FEATURE_REQUIREMENTS = {
    Feature.INTEGRATIONS: SubscriptionTier.PRO,
    Feature.CONFIGURABLE_STATUSES: SubscriptionTier.PRO,
    Feature.INVITE_MEMBERS: SubscriptionTier.TEAM,
    Feature.ADVANCED_ANALYTICS: SubscriptionTier.PRO,
}

FEATURE_LABELS = {
    Feature.INTEGRATIONS: "Integrations",
    Feature.CONFIGURABLE_STATUSES: "Configurable statuses",
    Feature.INVITE_MEMBERS: "Team members",
    Feature.ADVANCED_ANALYTICS: "Advanced analytics",
}
