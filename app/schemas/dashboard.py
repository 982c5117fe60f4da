# =============================================================================
# app/schemas/dashboard.py
# =============================================================================
from typing import Dict, List
from uuid import UUID
from pydantic import BaseModel

class ProjectStats(BaseModel):
    id: UUID
    name: str
    is_archived: bool
    color_index: int
    feedback_count: int
    feedback_by_status: Dict[str, int]
    feedback_by_category: Dict[str, int]
    user_count: int
    comment_count: int
    vote_count: int

class HomeDashboard(BaseModel):
    total_projects: int
    total_feedback: int
    feedback_by_status: Dict[str, int]
    feedback_by_category: Dict[str, int]
    total_users: int
    total_comments: int
    total_votes: int
    advanced_analytics: bool
    projects: List[ProjectStats]
