# =============================================================================
# app/schemas/project.py
# =============================================================================
from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict, field_validator

def _strip_name(value):
    # length limits apply to the stripped name
    if isinstance(value, str):
        return value.strip()
    return value

class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip_name(v)

class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    color_index: Optional[int] = Field(None, ge=0, le=7)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip_name(v)

class UpdateAllowedStatuses(BaseModel):
    allowed_statuses: List[str] = Field(..., min_length=1)

class ProjectListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    color_index: int
    is_archived: bool
    is_owner: bool
    role: Optional[str] = None
    feedback_count: int
    created_at: datetime

class ProjectResponse(BaseModel):
    """Full project, including every integration's settings and derived state"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    api_key: str
    color_index: int
    is_archived: bool
    archived_at: Optional[datetime] = None
    allowed_statuses: List[str]
    owner_id: UUID
    owner_email: Optional[str] = None
    feedback_count: int = 0
    member_count: int = 0
    created_at: datetime
    updated_at: datetime

    # Slack
    slack_webhook_url: Optional[str] = None
    slack_notify_new_feedback: bool = True
    slack_notify_new_comments: bool = True
    slack_notify_status_changes: bool = True
    slack_is_active: bool = True

    # GitHub
    github_token: Optional[str] = None
    github_owner: Optional[str] = None
    github_repo: Optional[str] = None
    github_default_labels: Optional[List[str]] = None
    github_sync_status: bool = False
    github_is_active: bool = True

    # ClickUp
    clickup_token: Optional[str] = None
    clickup_workspace_name: Optional[str] = None
    clickup_list_id: Optional[str] = None
    clickup_list_name: Optional[str] = None
    clickup_default_tags: Optional[List[str]] = None
    clickup_sync_status: bool = False
    clickup_sync_comments: bool = False
    clickup_votes_field_id: Optional[str] = None
    clickup_is_active: bool = True

    # Notion
    notion_token: Optional[str] = None
    notion_database_id: Optional[str] = None
    notion_database_name: Optional[str] = None
    notion_sync_status: bool = False
    notion_sync_comments: bool = False
    notion_status_property: Optional[str] = None
    notion_votes_property: Optional[str] = None
    notion_is_active: bool = True

    # Monday.com
    monday_token: Optional[str] = None
    monday_board_id: Optional[str] = None
    monday_board_name: Optional[str] = None
    monday_group_id: Optional[str] = None
    monday_group_name: Optional[str] = None
    monday_sync_status: bool = False
    monday_sync_comments: bool = False
    monday_status_column_id: Optional[str] = None
    monday_votes_column_id: Optional[str] = None
    monday_is_active: bool = True

    # Trello
    trello_token: Optional[str] = None
    trello_board_id: Optional[str] = None
    trello_board_name: Optional[str] = None
    trello_list_id: Optional[str] = None
    trello_list_name: Optional[str] = None
    trello_sync_status: bool = False
    trello_sync_comments: bool = False
    trello_is_active: bool = True

    # Linear
    linear_token: Optional[str] = None
    linear_team_id: Optional[str] = None
    linear_team_name: Optional[str] = None
    linear_project_id: Optional[str] = None
    linear_project_name: Optional[str] = None
    linear_default_label_ids: Optional[List[str]] = None
    linear_sync_status: bool = False
    linear_sync_comments: bool = False
    linear_is_active: bool = True

    # Derived integration state
    slack_configured: bool = False
    slack_active: bool = False
    github_configured: bool = False
    github_active: bool = False
    clickup_configured: bool = False
    clickup_active: bool = False
    notion_configured: bool = False
    notion_active: bool = False
    monday_configured: bool = False
    monday_active: bool = False
    trello_configured: bool = False
    trello_active: bool = False
    linear_configured: bool = False
    linear_active: bool = False
    has_any_integration: bool = False
    has_any_active_integration: bool = False
