# =============================================================================
# app/services/dashboard_service.py
# =============================================================================
"""
Feedback counters across the projects a user can see.

Totals are available on every plan. The per-project breakdown is the
advanced analytics feature: the home dashboard leaves it out below that tier
and the project dashboard answers 402.
"""
from collections import Counter
from typing import List
from sqlalchemy.orm import Session
from app.core.logger import get_module_logger
from app.core.tiers import Feature, FEATURE_REQUIREMENTS
from app.models.user import User
from app.models.project import Project
from app.models.feedback import FEEDBACK_STATUSES, FEEDBACK_CATEGORIES
from app.schemas.dashboard import HomeDashboard, ProjectStats
from app.services.project_service import ProjectService
from app.services.subscription_service import SubscriptionService

logger = get_module_logger(__name__, "dashboard_service.log")

class DashboardService:

    @staticmethod
    def project_stats(project: Project) -> ProjectStats:
        feedbacks = project.feedbacks
        by_status = Counter(f.status for f in feedbacks)
        by_category = Counter(f.category for f in feedbacks)
        # end users are identified by the id they vote with
        voters = {vote.user_id for f in feedbacks for vote in f.votes}
        return ProjectStats(
            id=project.id,
            name=project.name,
            is_archived=project.is_archived,
            color_index=project.color_index,
            feedback_count=len(feedbacks),
            feedback_by_status={s: by_status.get(s, 0) for s in FEEDBACK_STATUSES},
            feedback_by_category={c: by_category.get(c, 0) for c in FEEDBACK_CATEGORIES},
            user_count=len(voters),
            comment_count=sum(len(f.comments) for f in feedbacks),
            vote_count=sum(f.vote_count or 0 for f in feedbacks),
        )

    @staticmethod
    def home(db: Session, user: User) -> HomeDashboard:
        stats: List[ProjectStats] = [DashboardService.project_stats(p) for p in ProjectService.list_projects(db, user)]

        by_status = {s: sum(p.feedback_by_status[s] for p in stats) for s in FEEDBACK_STATUSES}
        by_category = {c: sum(p.feedback_by_category[c] for p in stats) for c in FEEDBACK_CATEGORIES}
        advanced = SubscriptionService.meets_requirement(user, FEATURE_REQUIREMENTS[Feature.ADVANCED_ANALYTICS])

        logger.info(f"📊 Home dashboard for {user.email}: {len(stats)} project(s), advanced={advanced}")
        return HomeDashboard(
            total_projects=len(stats),
            total_feedback=sum(p.feedback_count for p in stats),
            feedback_by_status=by_status,
            feedback_by_category=by_category,
            total_users=sum(p.user_count for p in stats),
            total_comments=sum(p.comment_count for p in stats),
            total_votes=sum(p.vote_count for p in stats),
            advanced_analytics=advanced,
            projects=sorted(stats, key=lambda p: p.feedback_count, reverse=True) if advanced else [],
        )

    @staticmethod
    def project(project: Project, user: User) -> ProjectStats:
        SubscriptionService.require_feature(user, Feature.ADVANCED_ANALYTICS)
        return DashboardService.project_stats(project)
