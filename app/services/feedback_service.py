# =============================================================================
# app/services/feedback_service.py
# =============================================================================
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from uuid import UUID
from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.logger import get_module_logger
from app.core.tiers import SubscriptionTier
from app.models.user import User
from app.models.project import Project
from app.models.feedback import Feedback, Comment, Vote
from app.schemas.feedback import (
    FeedbackCreate,
    FeedbackResponse,
    VoteCreate,
    VoteResponse,
    MergeFeedbackRequest,
    MergeFeedbackResponse,
)
from app.services.project_service import ProjectService
from app.services.slack_service import SlackService
from app.services.subscription_service import SubscriptionService

logger = get_module_logger(__name__, "feedback_service.log")

class FeedbackService:

    @staticmethod
    def to_response(feedback: Feedback) -> FeedbackResponse:
        return FeedbackResponse.model_validate(feedback).model_copy(
            update={
                "comment_count": len(feedback.comments),
                "merged_feedback_ids": [f.id for f in feedback.merged_feedbacks],
            }
        )

    @staticmethod
    def _check_status(project: Project, value: str) -> None:
        if value not in (project.allowed_statuses or []):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Status '{value}' is not allowed for this project. Allowed: {', '.join(project.allowed_statuses or [])}"
            )

    @staticmethod
    def _require_not_archived(project: Project) -> None:
        if project.is_archived:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Archived projects are read-only"
            )

    @staticmethod
    def get_feedback(db: Session, project: Project, feedback_id: UUID) -> Feedback:
        feedback = db.query(Feedback).filter(
            Feedback.id == feedback_id,
            Feedback.project_id == project.id,
        ).first()
        if feedback is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback not found")
        return feedback

    @staticmethod
    def list_feedback(db: Session, project: Project, status_filter: Optional[str] = None) -> List[Feedback]:
        query = db.query(Feedback).filter(Feedback.project_id == project.id)
        if status_filter:
            query = query.filter(Feedback.status == status_filter)
        return query.order_by(Feedback.created_at.desc()).all()

    @staticmethod
    async def create_feedback(db: Session, project: Project, data: FeedbackCreate) -> Feedback:
        if project.is_archived:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Archived projects do not accept new feedback"
            )
        SubscriptionService.require_feedback_slot(db, project)

        initial_status = data.status or "pending"
        FeedbackService._check_status(project, initial_status)

        feedback = Feedback(
            project_id=project.id,
            title=data.title.strip(),
            description=data.description,
            category=data.category,
            status=initial_status,
            user_email=data.user_email,
        )
        db.add(feedback)
        db.commit()
        db.refresh(feedback)
        logger.info(f"📝 Feedback {feedback.id} created on project {project.id}")

        await SlackService.notify_new_feedback(project, feedback)
        return feedback

    @staticmethod
    async def update_status(db: Session, project: Project, feedback: Feedback, new_status: str) -> Feedback:
        FeedbackService._check_status(project, new_status)
        old_status = feedback.status
        if old_status == new_status:
            return feedback

        feedback.status = new_status
        db.commit()
        db.refresh(feedback)
        logger.info(f"Feedback {feedback.id} status: {old_status} -> {new_status}")

        await SlackService.notify_status_change(project, feedback, old_status)
        return feedback

    @staticmethod
    def delete_feedback(db: Session, project: Project, feedback: Feedback, user: User) -> None:
        """Owner or admin only; comments, votes and links go with it"""
        ProjectService.require_manager(project, user)
        logger.info(f"🗑️ Feedback {feedback.id} deleted from project {project.id} by {user.email}")
        db.delete(feedback)
        db.commit()

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    @staticmethod
    def list_comments(feedback: Feedback) -> List[Comment]:
        return sorted(feedback.comments, key=lambda c: c.created_at)

    @staticmethod
    async def add_comment(db: Session, project: Project, feedback: Feedback, user: User, content: str) -> Comment:
        FeedbackService._require_not_archived(project)
        comment = Comment(
            feedback_id=feedback.id,
            content=content.strip(),
            author_name=user.name,
            author_email=user.email,
        )
        db.add(comment)
        db.commit()
        db.refresh(comment)
        logger.info(f"💬 Comment added to feedback {feedback.id} by {user.email}")

        await SlackService.notify_new_comment(project, feedback, comment)
        return comment

    @staticmethod
    def delete_comment(db: Session, project: Project, feedback: Feedback, comment_id: UUID, user: User) -> None:
        """The comment's author, the owner or an admin may delete it"""
        FeedbackService._require_not_archived(project)
        comment = db.query(Comment).filter(
            Comment.id == comment_id,
            Comment.feedback_id == feedback.id,
        ).first()
        if comment is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
        if comment.author_email != user.email:
            ProjectService.require_manager(project, user)

        db.delete(comment)
        db.commit()
        logger.info(f"🗑️ Comment {comment_id} deleted from feedback {feedback.id} by {user.email}")

    # -------------------------------------------------------------------------
    # Votes
    # -------------------------------------------------------------------------

    @staticmethod
    def add_vote(db: Session, project: Project, feedback: Feedback, data: VoteCreate) -> VoteResponse:
        FeedbackService._require_not_archived(project)
        if feedback.is_closed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Voting is closed for {feedback.status} feedback"
            )
        if feedback.vote_by(data.user_id) is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User has already voted for this feedback")

        # status-change emails are a Team feature of the project owner
        notify = (
            data.notify_status_change
            and bool(data.email)
            and SubscriptionService.meets_requirement(project.owner, SubscriptionTier.TEAM)
        )
        db.add(Vote(feedback_id=feedback.id, user_id=data.user_id, email=data.email, notify_status_change=notify))
        feedback.vote_count = (feedback.vote_count or 0) + 1
        db.commit()
        db.refresh(feedback)
        logger.info(f"👍 Vote on feedback {feedback.id} by {data.user_id} ({feedback.vote_count} total)")
        return VoteResponse(feedback_id=feedback.id, vote_count=feedback.vote_count, has_voted=True)

    @staticmethod
    def remove_vote(db: Session, project: Project, feedback: Feedback, user_id: str) -> VoteResponse:
        FeedbackService._require_not_archived(project)
        vote = feedback.vote_by(user_id)
        if vote is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vote not found")

        db.delete(vote)
        feedback.vote_count = max(0, (feedback.vote_count or 0) - 1)
        db.commit()
        db.refresh(feedback)
        logger.info(f"👎 Vote on feedback {feedback.id} removed for {user_id}")
        return VoteResponse(feedback_id=feedback.id, vote_count=feedback.vote_count, has_voted=False)

    # -------------------------------------------------------------------------
    # Merge
    # -------------------------------------------------------------------------

    @staticmethod
    def merge_feedback(db: Session, project: Project, user: User, request: MergeFeedbackRequest) -> MergeFeedbackResponse:
        """Fold duplicates into a primary feedback.

        Comments move to the primary, votes move unless the same end user
        already voted on the primary, and the primary's vote count becomes the
        number of distinct voters. Secondaries are kept, marked as merged.
        """
        ProjectService.require_manager(project, user)
        FeedbackService._require_not_archived(project)

        primary = FeedbackService.get_feedback(db, project, request.primary_feedback_id)
        if primary.merged_into_id is not None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The primary feedback was itself merged")

        secondary_ids = list(dict.fromkeys(request.secondary_feedback_ids))
        if primary.id in secondary_ids:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Feedback cannot be merged into itself")

        secondaries = [FeedbackService.get_feedback(db, project, fid) for fid in secondary_ids]
        already = [str(s.id) for s in secondaries if s.merged_into_id is not None]
        if already:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Feedback already merged: {', '.join(already)}"
            )

        voters = {vote.user_id for vote in primary.votes}
        merged_at = datetime.utcnow()
        for secondary in secondaries:
            for comment in list(secondary.comments):
                comment.feedback_id = primary.id
            for vote in list(secondary.votes):
                if vote.user_id in voters:
                    db.delete(vote)
                else:
                    vote.feedback_id = primary.id
                    voters.add(vote.user_id)
            secondary.vote_count = 0
            secondary.merged_into_id = primary.id
            secondary.merged_at = merged_at

        primary.vote_count = len(voters)
        db.commit()
        db.refresh(primary)

        logger.info(
            f"🔀 Merged {len(secondaries)} feedback item(s) into {primary.id} on project {project.id} by {user.email}"
        )
        return MergeFeedbackResponse(
            primary_feedback=FeedbackService.to_response(primary),
            merged_count=len(secondaries),
            total_votes=primary.vote_count,
            total_comments=len(primary.comments),
        )

    # -------------------------------------------------------------------------
    # Retention
    # -------------------------------------------------------------------------

    @staticmethod
    def cleanup_old_feedback(db: Session, retention_days: Optional[int] = None) -> Tuple[int, datetime]:
        """Delete feedback (with comments, votes and links) older than the retention window"""
        days = retention_days if retention_days is not None else settings.FEEDBACK_RETENTION_DAYS
        cutoff = datetime.utcnow() - timedelta(days=days)

        stale = db.query(Feedback).filter(Feedback.created_at < cutoff).all()
        for feedback in stale:
            db.delete(feedback)
        db.commit()

        logger.info(f"🧹 Deleted {len(stale)} feedback item(s) created before {cutoff.isoformat()}")
        return len(stale), cutoff
