# =============================================================================
# app/schemas/integration.py
# =============================================================================
from typing import Optional, List, Dict, Any
from uuid import UUID
from pydantic import BaseModel, Field

class HierarchyItem(BaseModel):
    """A workspace, board, list, team... as returned by a provider"""
    id: str
    name: str
    extra: Dict[str, Any] = Field(default_factory=dict)

# -----------------------------------------------------------------------------
# Settings updates
#
# PATCH semantics: a field left out (None) is unchanged, an empty string or
# empty list clears it, anything else is stored.
# -----------------------------------------------------------------------------

class UpdateSlackSettings(BaseModel):
    slack_webhook_url: Optional[str] = None
    slack_notify_new_feedback: Optional[bool] = None
    slack_notify_new_comments: Optional[bool] = None
    slack_notify_status_changes: Optional[bool] = None
    slack_is_active: Optional[bool] = None

class UpdateGitHubSettings(BaseModel):
    github_token: Optional[str] = None
    github_owner: Optional[str] = None
    github_repo: Optional[str] = None
    github_default_labels: Optional[List[str]] = None
    github_sync_status: Optional[bool] = None
    github_is_active: Optional[bool] = None

class UpdateClickUpSettings(BaseModel):
    clickup_token: Optional[str] = None
    clickup_workspace_name: Optional[str] = None
    clickup_list_id: Optional[str] = None
    clickup_list_name: Optional[str] = None
    clickup_default_tags: Optional[List[str]] = None
    clickup_sync_status: Optional[bool] = None
    clickup_sync_comments: Optional[bool] = None
    clickup_votes_field_id: Optional[str] = None
    clickup_is_active: Optional[bool] = None

class UpdateNotionSettings(BaseModel):
    notion_token: Optional[str] = None
    notion_database_id: Optional[str] = None
    notion_database_name: Optional[str] = None
    notion_sync_status: Optional[bool] = None
    notion_sync_comments: Optional[bool] = None
    notion_status_property: Optional[str] = None
    notion_votes_property: Optional[str] = None
    notion_is_active: Optional[bool] = None

class UpdateMondaySettings(BaseModel):
    monday_token: Optional[str] = None
    monday_board_id: Optional[str] = None
    monday_board_name: Optional[str] = None
    monday_group_id: Optional[str] = None
    monday_group_name: Optional[str] = None
    monday_sync_status: Optional[bool] = None
    monday_sync_comments: Optional[bool] = None
    monday_status_column_id: Optional[str] = None
    monday_votes_column_id: Optional[str] = None
    monday_is_active: Optional[bool] = None

class UpdateTrelloSettings(BaseModel):
    trello_token: Optional[str] = None
    trello_board_id: Optional[str] = None
    trello_board_name: Optional[str] = None
    trello_list_id: Optional[str] = None
    trello_list_name: Optional[str] = None
    trello_sync_status: Optional[bool] = None
    trello_sync_comments: Optional[bool] = None
    trello_is_active: Optional[bool] = None

class UpdateLinearSettings(BaseModel):
    linear_token: Optional[str] = None
    linear_team_id: Optional[str] = None
    linear_team_name: Optional[str] = None
    linear_project_id: Optional[str] = None
    linear_project_name: Optional[str] = None
    linear_default_label_ids: Optional[List[str]] = None
    linear_sync_status: Optional[bool] = None
    linear_sync_comments: Optional[bool] = None
    linear_is_active: Optional[bool] = None

SETTINGS_SCHEMAS = {
    "slack": UpdateSlackSettings,
    "github": UpdateGitHubSettings,
    "clickup": UpdateClickUpSettings,
    "notion": UpdateNotionSettings,
    "monday": UpdateMondaySettings,
    "trello": UpdateTrelloSettings,
    "linear": UpdateLinearSettings,
}

# -----------------------------------------------------------------------------
# Pushing feedback to a provider
# -----------------------------------------------------------------------------

class PushFeedbackRequest(BaseModel):
    feedback_ids: List[UUID] = Field(..., min_length=1)
    additional_labels: Optional[List[str]] = None

class PushedItem(BaseModel):
    feedback_id: UUID
    external_id: str
    external_url: Optional[str] = None

class PushFeedbackResponse(BaseModel):
    created: List[PushedItem]
    skipped: List[UUID] = Field(default_factory=list, description="Already linked to this provider")
    failed: List[UUID]

class CreatedExternalItem(BaseModel):
    external_id: str
    external_url: Optional[str] = None

class SlackTestMessageRequest(BaseModel):
    message: str = "Test notification from FeedbackKit! 🚀"
