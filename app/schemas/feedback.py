# =============================================================================
# app/schemas/feedback.py
# =============================================================================
from datetime import datetime
from typing import Optional, List, Literal
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict

FeedbackCategory = Literal["feature_request", "bug_report", "improvement", "other"]

class FeedbackCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    category: FeedbackCategory = "feature_request"
    status: Optional[str] = None
    user_email: Optional[str] = None

class FeedbackStatusUpdate(BaseModel):
    status: str

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content: str
    author_name: str
    author_email: Optional[str] = None
    created_at: datetime

class IntegrationLinkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    provider: str
    external_id: str
    external_url: Optional[str] = None

class FeedbackResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    title: str
    description: str
    category: str
    status: str
    user_email: Optional[str] = None
    vote_count: int
    comment_count: int = 0
    integration_links: List[IntegrationLinkResponse] = []
    merged_into_id: Optional[UUID] = None
    merged_at: Optional[datetime] = None
    merged_feedback_ids: List[UUID] = []
    created_at: datetime
    updated_at: datetime

# -----------------------------------------------------------------------------
# Votes
# -----------------------------------------------------------------------------

class VoteCreate(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = None
    notify_status_change: bool = False

class VoteResponse(BaseModel):
    feedback_id: UUID
    vote_count: int
    has_voted: bool

# -----------------------------------------------------------------------------
# Merge
# -----------------------------------------------------------------------------

class MergeFeedbackRequest(BaseModel):
    primary_feedback_id: UUID
    secondary_feedback_ids: List[UUID] = Field(..., min_length=1)

class MergeFeedbackResponse(BaseModel):
    primary_feedback: FeedbackResponse
    merged_count: int
    total_votes: int
    total_comments: int
