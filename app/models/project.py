# =============================================================================
# app/models/project.py
# =============================================================================
from sqlalchemy import Column, String, Text, Boolean, Integer, DateTime, ForeignKey, Uuid, JSON
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

DEFAULT_ALLOWED_STATUSES = ["pending", "approved", "in_progress", "completed", "rejected"]

class Project(BaseModel):
    __tablename__ = "projects"

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    api_key = Column(String, nullable=False, unique=True, index=True)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    color_index = Column(Integer, nullable=False, default=0)
    is_archived = Column(Boolean, nullable=False, default=False)
    archived_at = Column(DateTime, nullable=True)
    allowed_statuses = Column(JSON, nullable=False, default=lambda: list(DEFAULT_ALLOWED_STATUSES))

    # Slack (incoming webhook)
    slack_webhook_url = Column(String, nullable=True)
    slack_notify_new_feedback = Column(Boolean, nullable=False, default=True)
    slack_notify_new_comments = Column(Boolean, nullable=False, default=True)
    slack_notify_status_changes = Column(Boolean, nullable=False, default=True)
    slack_is_active = Column(Boolean, nullable=False, default=True)

    # GitHub
    github_token = Column(String, nullable=True)
    github_owner = Column(String, nullable=True)
    github_repo = Column(String, nullable=True)
    github_default_labels = Column(JSON, nullable=True)
    github_sync_status = Column(Boolean, nullable=False, default=False)
    github_is_active = Column(Boolean, nullable=False, default=True)

    # ClickUp
    clickup_token = Column(String, nullable=True)
    clickup_workspace_name = Column(String, nullable=True)
    clickup_list_id = Column(String, nullable=True)
    clickup_list_name = Column(String, nullable=True)
    clickup_default_tags = Column(JSON, nullable=True)
    clickup_sync_status = Column(Boolean, nullable=False, default=False)
    clickup_sync_comments = Column(Boolean, nullable=False, default=False)
    clickup_votes_field_id = Column(String, nullable=True)
    clickup_is_active = Column(Boolean, nullable=False, default=True)

    # Notion
    notion_token = Column(String, nullable=True)
    notion_database_id = Column(String, nullable=True)
    notion_database_name = Column(String, nullable=True)
    notion_sync_status = Column(Boolean, nullable=False, default=False)
    notion_sync_comments = Column(Boolean, nullable=False, default=False)
    notion_status_property = Column(String, nullable=True)
    notion_votes_property = Column(String, nullable=True)
    notion_is_active = Column(Boolean, nullable=False, default=True)

    # Monday.com
    monday_token = Column(String, nullable=True)
    monday_board_id = Column(String, nullable=True)
    monday_board_name = Column(String, nullable=True)
    monday_group_id = Column(String, nullable=True)
    monday_group_name = Column(String, nullable=True)
    monday_sync_status = Column(Boolean, nullable=False, default=False)
    monday_sync_comments = Column(Boolean, nullable=False, default=False)
    monday_status_column_id = Column(String, nullable=True)
    monday_votes_column_id = Column(String, nullable=True)
    monday_is_active = Column(Boolean, nullable=False, default=True)

    # Trello
    trello_token = Column(String, nullable=True)
    trello_board_id = Column(String, nullable=True)
    trello_board_name = Column(String, nullable=True)
    trello_list_id = Column(String, nullable=True)
    trello_list_name = Column(String, nullable=True)
    trello_sync_status = Column(Boolean, nullable=False, default=False)
    trello_sync_comments = Column(Boolean, nullable=False, default=False)
    trello_is_active = Column(Boolean, nullable=False, default=True)

    # Linear
    linear_token = Column(String, nullable=True)
    linear_team_id = Column(String, nullable=True)
    linear_team_name = Column(String, nullable=True)
    linear_project_id = Column(String, nullable=True)
    linear_project_name = Column(String, nullable=True)
    linear_default_label_ids = Column(JSON, nullable=True)
    linear_sync_status = Column(Boolean, nullable=False, default=False)
    linear_sync_comments = Column(Boolean, nullable=False, default=False)
    linear_is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    owner = relationship("User", back_populates="owned_projects")
    members = relationship("ProjectMember", back_populates="project", cascade="all, delete-orphan")
    invites = relationship("ProjectInvite", back_populates="project", cascade="all, delete-orphan")
    feedbacks = relationship("Feedback", back_populates="project", cascade="all, delete-orphan")

    def user_is_owner(self, user_id) -> bool:
        return self.owner_id == user_id

    def membership_for(self, user_id):
        return next((m for m in self.members if m.user_id == user_id), None)

    def user_has_access(self, user_id) -> bool:
        return self.user_is_owner(user_id) or self.membership_for(user_id) is not None

    def __repr__(self):
        return f"<Project {self.name} ({self.id})>"
