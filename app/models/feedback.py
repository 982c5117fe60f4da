# =============================================================================
# app/models/feedback.py
# =============================================================================
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

FEEDBACK_STATUSES = ["pending", "approved", "in_progress", "testflight", "completed", "rejected"]
FEEDBACK_CATEGORIES = ["feature_request", "bug_report", "improvement", "other"]

# feedback in these states no longer takes votes
CLOSED_STATUSES = ("completed", "rejected")

class Feedback(BaseModel):
    __tablename__ = "feedbacks"

    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String, nullable=False, default="feature_request")
    status = Column(String, nullable=False, default="pending", index=True)
    user_email = Column(String, nullable=True)
    vote_count = Column(Integer, nullable=False, default=0)
    merged_into_id = Column(Uuid(as_uuid=True), ForeignKey("feedbacks.id", ondelete="SET NULL"), nullable=True, index=True)
    merged_at = Column(DateTime, nullable=True)

    project = relationship("Project", back_populates="feedbacks")
    comments = relationship("Comment", back_populates="feedback", cascade="all, delete-orphan", order_by="Comment.created_at")
    votes = relationship("Vote", back_populates="feedback", cascade="all, delete-orphan")
    integration_links = relationship("IntegrationLink", back_populates="feedback", cascade="all, delete-orphan")
    merged_feedbacks = relationship("Feedback", foreign_keys=[merged_into_id])

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_STATUSES

    def link_for(self, provider: str):
        return next((link for link in self.integration_links if link.provider == provider), None)

    def vote_by(self, user_id: str):
        return next((vote for vote in self.votes if vote.user_id == user_id), None)

    def __repr__(self):
        return f"<Feedback {self.title[:50]} [{self.status}]>"

class Comment(BaseModel):
    __tablename__ = "comments"

    feedback_id = Column(Uuid(as_uuid=True), ForeignKey("feedbacks.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    author_name = Column(String, nullable=False)
    author_email = Column(String, nullable=True)

    feedback = relationship("Feedback", back_populates="comments")

class Vote(BaseModel):
    """One vote per end user (the app's own user id, not an admin account)"""
    __tablename__ = "votes"
    __table_args__ = (UniqueConstraint("feedback_id", "user_id", name="uq_feedback_voter"),)

    feedback_id = Column(Uuid(as_uuid=True), ForeignKey("feedbacks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True)
    notify_status_change = Column(Boolean, nullable=False, default=False)

    feedback = relationship("Feedback", back_populates="votes")

class IntegrationLink(BaseModel):
    """External item (issue, task, page, card...) created for a feedback in a provider"""
    __tablename__ = "integration_links"
    __table_args__ = (UniqueConstraint("feedback_id", "provider", name="uq_feedback_provider"),)

    feedback_id = Column(Uuid(as_uuid=True), ForeignKey("feedbacks.id", ondelete="CASCADE"), nullable=False, index=True)
    provider = Column(String, nullable=False)
    external_id = Column(String, nullable=False)
    external_url = Column(String, nullable=True)

    feedback = relationship("Feedback", back_populates="integration_links")
