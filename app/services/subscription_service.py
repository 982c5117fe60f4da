# =============================================================================
# app/services/subscription_service.py
# =============================================================================
"""
Tier resolution and gating.

Outside production (``settings.TIER_OVERRIDE_ENVIRONMENTS``) every requirement is
met regardless of the stored tier, so features can be exercised without a paid
subscription. The override is reported back to clients as
``environment_override``.
"""
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import PaymentRequiredError
from app.core.tiers import SubscriptionTier, Feature, FEATURE_REQUIREMENTS, FEATURE_LABELS
from app.core.logger import get_module_logger
from app.models.user import User
from app.models.project import Project
from app.models.feedback import Feedback
from app.schemas.subscription import SubscriptionInfo, SubscriptionLimits

logger = get_module_logger(__name__, "subscription_service.log")

class SubscriptionService:

    @staticmethod
    def current_tier(user: User) -> SubscriptionTier:
        """Stored tier, downgraded to free when the subscription lapsed"""
        tier = user.subscription_tier or SubscriptionTier.FREE
        if user.subscription_status is not None and not user.subscription_status.is_active:
            return SubscriptionTier.FREE
        return tier

    @staticmethod
    def effective_tier(user: User) -> SubscriptionTier:
        if settings.tier_override_active:
            return SubscriptionTier.TEAM
        return SubscriptionService.current_tier(user)

    @staticmethod
    def meets_requirement(user: User, required: SubscriptionTier) -> bool:
        return SubscriptionService.effective_tier(user).meets_requirement(required)

    @staticmethod
    def require_tier(user: User, required: SubscriptionTier, reason: str) -> None:
        current = SubscriptionService.current_tier(user)
        if current.meets_requirement(required):
            return
        if settings.tier_override_active:
            logger.info(f"🔓 {settings.ENVIRONMENT} override: {user.email} allowed ({reason})")
            return
        logger.warning(f"💳 Payment required for {user.email}: {reason} ({current.value} < {required.value})")
        raise PaymentRequiredError(reason=reason, current_tier=current.value, required_tier=required.value)

    @staticmethod
    def require_feature(user: User, feature: Feature) -> None:
        required = FEATURE_REQUIREMENTS[feature]
        SubscriptionService.require_tier(
            user, required,
            reason=f"{FEATURE_LABELS[feature]}: {required.display_name} plan required",
        )

    @staticmethod
    def _next_tier_for_projects(current: SubscriptionTier) -> SubscriptionTier:
        return SubscriptionTier.PRO if current is SubscriptionTier.FREE else SubscriptionTier.TEAM

    @staticmethod
    def require_project_slot(db: Session, user: User) -> None:
        """Raise 402 when ``user`` already owns as many projects as their tier allows"""
        current = SubscriptionService.current_tier(user)
        limit = current.max_projects
        if limit is None:
            return
        owned = db.query(Project).filter(Project.owner_id == user.id).count()
        if owned < limit:
            return
        if settings.tier_override_active:
            logger.info(f"🔓 {settings.ENVIRONMENT} override: project limit ({limit}) ignored for {user.email}")
            return
        logger.warning(f"💳 Project limit reached for {user.email}: {owned}/{limit}")
        raise PaymentRequiredError(
            reason=f"The {current.display_name} plan is limited to {limit} project{'s' if limit != 1 else ''}",
            current_tier=current.value,
            required_tier=SubscriptionService._next_tier_for_projects(current).value,
            limit=limit,
            current=owned,
        )

    @staticmethod
    def require_feedback_slot(db: Session, project: Project) -> None:
        """Feedback limits follow the project owner's tier"""
        current = SubscriptionService.current_tier(project.owner)
        limit = current.max_feedback_per_project
        if limit is None:
            return
        count = db.query(Feedback).filter(Feedback.project_id == project.id).count()
        if count < limit:
            return
        if settings.tier_override_active:
            return
        logger.warning(f"💳 Feedback limit reached on project {project.id}: {count}/{limit}")
        raise PaymentRequiredError(
            reason=f"The {current.display_name} plan is limited to {limit} feedback items per project",
            current_tier=current.value,
            required_tier=SubscriptionTier.PRO.value,
            limit=limit,
            current=count,
        )

    @staticmethod
    def get_info(db: Session, user: User) -> SubscriptionInfo:
        current = SubscriptionService.current_tier(user)
        effective = SubscriptionService.effective_tier(user)
        owned = db.query(Project).filter(Project.owner_id == user.id).count()
        return SubscriptionInfo(
            tier=current,
            status=user.subscription_status,
            expires_at=user.subscription_expires_at,
            effective_tier=effective,
            environment=settings.ENVIRONMENT,
            environment_override=settings.tier_override_active,
            limits=SubscriptionLimits(
                max_projects=effective.max_projects,
                max_feedback_per_project=effective.max_feedback_per_project,
                current_projects=owned,
            ),
            features={
                feature.value: effective.meets_requirement(required)
                for feature, required in FEATURE_REQUIREMENTS.items()
            },
        )

    @staticmethod
    def set_tier(db: Session, user: User, tier: SubscriptionTier, status=None) -> User:
        """Developer tooling: overwrite the stored subscription"""
        user.subscription_tier = tier
        user.subscription_status = status
        db.commit()
        db.refresh(user)
        logger.info(f"🧪 Subscription for {user.email} set to {tier.value} ({status.value if status else 'none'})")
        return user
