# =============================================================================
# app/integrations/registry.py
# =============================================================================
"""
Static description of every supported provider: which Project columns belong to
it, which of them make it "configured", and the shape of its resource hierarchy.

Both the API (validation, PATCH semantics, discovery routes) and the admin client
(drafts and the hierarchy wizard) are driven from this table.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from app.core.tiers import SubscriptionTier


@dataclass(frozen=True)
class LevelSpec:
    """One level of a provider's resource hierarchy.

    ``fields`` maps Project columns to the attribute of the selected item that
    fills them: ``"id"``, ``"name"`` or ``"extra.<key>"``.
    """
    name: str
    parents: Tuple[str, ...] = ()
    fields: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderSpec:
    name: str
    display_name: str
    token_field: str
    required_fields: Tuple[str, ...]
    target_fields: Tuple[str, ...]
    is_active_field: str
    string_fields: Tuple[str, ...]
    bool_fields: Tuple[str, ...]
    list_fields: Tuple[str, ...] = ()
    levels: Tuple[LevelSpec, ...] = ()
    required_tier: SubscriptionTier = SubscriptionTier.PRO

    @property
    def fields(self) -> Tuple[str, ...]:
        return self.string_fields + self.list_fields + self.bool_fields + (self.is_active_field,)

    @property
    def top_level(self) -> Optional[LevelSpec]:
        return next((level for level in self.levels if not level.parents), None)

    def level(self, name: str) -> Optional[LevelSpec]:
        return next((level for level in self.levels if level.name == name), None)

    def children(self, name: str) -> List[LevelSpec]:
        return [level for level in self.levels if name in level.parents]

    def descendants(self, name: str) -> List[LevelSpec]:
        """Every level below ``name``, nearest first"""
        found: List[LevelSpec] = []
        frontier = self.children(name)
        while frontier:
            frontier = [level for level in frontier if level not in found]
            found.extend(frontier)
            frontier = [child for level in frontier for child in self.children(level.name)]
        return found


PROVIDERS: Dict[str, ProviderSpec] = {
    "slack": ProviderSpec(
        name="slack",
        display_name="Slack",
        token_field="slack_webhook_url",
        required_fields=("slack_webhook_url",),
        target_fields=(),
        is_active_field="slack_is_active",
        string_fields=("slack_webhook_url",),
        bool_fields=("slack_notify_new_feedback", "slack_notify_new_comments", "slack_notify_status_changes"),
    ),
    "github": ProviderSpec(
        name="github",
        display_name="GitHub",
        token_field="github_token",
        required_fields=("github_token", "github_owner", "github_repo"),
        target_fields=("github_owner", "github_repo"),
        is_active_field="github_is_active",
        string_fields=("github_token", "github_owner", "github_repo"),
        list_fields=("github_default_labels",),
        bool_fields=("github_sync_status",),
        levels=(
            LevelSpec("repositories", fields={"github_owner": "extra.owner", "github_repo": "name"}),
        ),
    ),
    "clickup": ProviderSpec(
        name="clickup",
        display_name="ClickUp",
        token_field="clickup_token",
        required_fields=("clickup_token", "clickup_list_id"),
        target_fields=("clickup_list_id",),
        is_active_field="clickup_is_active",
        string_fields=("clickup_token", "clickup_workspace_name", "clickup_list_id", "clickup_list_name", "clickup_votes_field_id"),
        list_fields=("clickup_default_tags",),
        bool_fields=("clickup_sync_status", "clickup_sync_comments"),
        levels=(
            LevelSpec("workspaces", fields={"clickup_workspace_name": "name"}),
            LevelSpec("spaces", parents=("workspaces",)),
            LevelSpec("folders", parents=("spaces",)),
            LevelSpec("folderless_lists", parents=("spaces",), fields={"clickup_list_id": "id", "clickup_list_name": "name"}),
            LevelSpec("lists", parents=("folders",), fields={"clickup_list_id": "id", "clickup_list_name": "name"}),
            LevelSpec("custom_fields", parents=("lists", "folderless_lists"), fields={"clickup_votes_field_id": "id"}),
        ),
    ),
    "notion": ProviderSpec(
        name="notion",
        display_name="Notion",
        token_field="notion_token",
        required_fields=("notion_token", "notion_database_id"),
        target_fields=("notion_database_id",),
        is_active_field="notion_is_active",
        string_fields=("notion_token", "notion_database_id", "notion_database_name", "notion_status_property", "notion_votes_property"),
        bool_fields=("notion_sync_status", "notion_sync_comments"),
        levels=(
            LevelSpec("databases", fields={"notion_database_id": "id", "notion_database_name": "name"}),
            LevelSpec("properties", parents=("databases",)),
        ),
    ),
    "monday": ProviderSpec(
        name="monday",
        display_name="Monday.com",
        token_field="monday_token",
        required_fields=("monday_token", "monday_board_id"),
        target_fields=("monday_board_id", "monday_group_id"),
        is_active_field="monday_is_active",
        string_fields=(
            "monday_token", "monday_board_id", "monday_board_name", "monday_group_id", "monday_group_name",
            "monday_status_column_id", "monday_votes_column_id",
        ),
        bool_fields=("monday_sync_status", "monday_sync_comments"),
        levels=(
            LevelSpec("boards", fields={"monday_board_id": "id", "monday_board_name": "name"}),
            LevelSpec("groups", parents=("boards",), fields={"monday_group_id": "id", "monday_group_name": "name"}),
            LevelSpec("columns", parents=("boards",)),
        ),
    ),
    "trello": ProviderSpec(
        name="trello",
        display_name="Trello",
        token_field="trello_token",
        required_fields=("trello_token", "trello_board_id", "trello_list_id"),
        target_fields=("trello_board_id", "trello_list_id"),
        is_active_field="trello_is_active",
        string_fields=("trello_token", "trello_board_id", "trello_board_name", "trello_list_id", "trello_list_name"),
        bool_fields=("trello_sync_status", "trello_sync_comments"),
        levels=(
            LevelSpec("boards", fields={"trello_board_id": "id", "trello_board_name": "name"}),
            LevelSpec("lists", parents=("boards",), fields={"trello_list_id": "id", "trello_list_name": "name"}),
        ),
    ),
    "linear": ProviderSpec(
        name="linear",
        display_name="Linear",
        token_field="linear_token",
        required_fields=("linear_token", "linear_team_id"),
        target_fields=("linear_team_id", "linear_project_id"),
        is_active_field="linear_is_active",
        string_fields=("linear_token", "linear_team_id", "linear_team_name", "linear_project_id", "linear_project_name"),
        list_fields=("linear_default_label_ids",),
        bool_fields=("linear_sync_status", "linear_sync_comments"),
        levels=(
            LevelSpec("teams", fields={"linear_team_id": "id", "linear_team_name": "name"}),
            LevelSpec("projects", parents=("teams",), fields={"linear_project_id": "id", "linear_project_name": "name"}),
            LevelSpec("labels", parents=("teams",)),
            LevelSpec("states", parents=("teams",)),
        ),
    ),
}


def get_provider(name: str) -> Optional[ProviderSpec]:
    return PROVIDERS.get(name)


def get_client(name: str):
    """Instantiate the HTTP client for a provider (patched in tests)"""
    from app.integrations.clients import CLIENT_CLASSES
    return CLIENT_CLASSES[name]()


def is_configured(project, spec: ProviderSpec) -> bool:
    return all(getattr(project, f) for f in spec.required_fields)


def is_active(project, spec: ProviderSpec) -> bool:
    return is_configured(project, spec) and bool(getattr(project, spec.is_active_field))
