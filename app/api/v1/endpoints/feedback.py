# =============================================================================
# app/api/v1/endpoints/feedback.py
# =============================================================================
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.dependencies import get_current_user, get_project
from app.models.user import User
from app.models.project import Project
from app.services.feedback_service import FeedbackService
from app.schemas.feedback import (
    FeedbackCreate,
    FeedbackResponse,
    FeedbackStatusUpdate,
    CommentCreate,
    CommentResponse,
    VoteCreate,
    VoteResponse,
    MergeFeedbackRequest,
    MergeFeedbackResponse,
)

router = APIRouter()

@router.get("/projects/{project_id}/feedback", response_model=List[FeedbackResponse])
async def list_feedback(
    status_filter: Optional[str] = Query(None, alias="status", description="Only feedback with this status"),
    project: Project = Depends(get_project),
    db: Session = Depends(get_db)
):
    return [FeedbackService.to_response(f) for f in FeedbackService.list_feedback(db, project, status_filter)]

@router.post("/projects/{project_id}/feedback", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
async def create_feedback(
    feedback_in: FeedbackCreate,
    project: Project = Depends(get_project),
    db: Session = Depends(get_db)
):
    """Create feedback (402 once the owner's plan limit is reached)"""
    feedback = await FeedbackService.create_feedback(db, project, feedback_in)
    return FeedbackService.to_response(feedback)

@router.post("/projects/{project_id}/feedback/merge", response_model=MergeFeedbackResponse)
async def merge_feedback(
    merge_in: MergeFeedbackRequest,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Merge duplicate feedback into a primary one (owner or admin)"""
    return FeedbackService.merge_feedback(db, project, current_user, merge_in)

@router.get("/projects/{project_id}/feedback/{feedback_id}", response_model=FeedbackResponse)
async def get_feedback(
    feedback_id: UUID,
    project: Project = Depends(get_project),
    db: Session = Depends(get_db)
):
    return FeedbackService.to_response(FeedbackService.get_feedback(db, project, feedback_id))

@router.delete("/projects/{project_id}/feedback/{feedback_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feedback(
    feedback_id: UUID,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    feedback = FeedbackService.get_feedback(db, project, feedback_id)
    FeedbackService.delete_feedback(db, project, feedback, current_user)

@router.patch("/projects/{project_id}/feedback/{feedback_id}/status", response_model=FeedbackResponse)
async def update_feedback_status(
    feedback_id: UUID,
    status_in: FeedbackStatusUpdate,
    project: Project = Depends(get_project),
    db: Session = Depends(get_db)
):
    feedback = FeedbackService.get_feedback(db, project, feedback_id)
    feedback = await FeedbackService.update_status(db, project, feedback, status_in.status)
    return FeedbackService.to_response(feedback)

# -----------------------------------------------------------------------------
# Comments
# -----------------------------------------------------------------------------

@router.get("/projects/{project_id}/feedback/{feedback_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    feedback_id: UUID,
    project: Project = Depends(get_project),
    db: Session = Depends(get_db)
):
    """Oldest first"""
    feedback = FeedbackService.get_feedback(db, project, feedback_id)
    return FeedbackService.list_comments(feedback)

@router.post(
    "/projects/{project_id}/feedback/{feedback_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    feedback_id: UUID,
    comment_in: CommentCreate,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    feedback = FeedbackService.get_feedback(db, project, feedback_id)
    return await FeedbackService.add_comment(db, project, feedback, current_user, comment_in.content)

@router.delete(
    "/projects/{project_id}/feedback/{feedback_id}/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_comment(
    feedback_id: UUID,
    comment_id: UUID,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    feedback = FeedbackService.get_feedback(db, project, feedback_id)
    FeedbackService.delete_comment(db, project, feedback, comment_id, current_user)

# -----------------------------------------------------------------------------
# Votes
# -----------------------------------------------------------------------------

@router.post(
    "/projects/{project_id}/feedback/{feedback_id}/votes",
    response_model=VoteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_vote(
    feedback_id: UUID,
    vote_in: VoteCreate,
    project: Project = Depends(get_project),
    db: Session = Depends(get_db)
):
    """Record an end user's vote (409 if that user already voted)"""
    feedback = FeedbackService.get_feedback(db, project, feedback_id)
    return FeedbackService.add_vote(db, project, feedback, vote_in)

@router.delete("/projects/{project_id}/feedback/{feedback_id}/votes/{user_id}", response_model=VoteResponse)
async def remove_vote(
    feedback_id: UUID,
    user_id: str,
    project: Project = Depends(get_project),
    db: Session = Depends(get_db)
):
    feedback = FeedbackService.get_feedback(db, project, feedback_id)
    return FeedbackService.remove_vote(db, project, feedback, user_id)
