# =============================================================================
# app/integrations/clients.py
# =============================================================================
"""
HTTP clients for the third-party trackers a project can push feedback to.

Every client exposes the same two entry points:

* ``list_level(level, token, parent_id)``: one level of the provider's resource
  hierarchy (see ``registry.PROVIDERS``) as a list of ``HierarchyItem``.
* ``create_item(project, feedback, labels)``: create the external issue / task /
  page / item / card for a feedback and return its id and url.

Failures are raised as ``IntegrationAPIError`` and rendered as 502 by the app.
"""
from typing import Optional, List, Dict, Any
import httpx
import requests
from app.core.config import settings
from app.core.exceptions import IntegrationAPIError, IntegrationNotConfiguredError
from app.core.logger import get_module_logger
from app.schemas.integration import HierarchyItem, CreatedExternalItem

logger = get_module_logger(__name__, "integrations.log")

CATEGORY_TITLES = {
    "feature_request": "Feature Request",
    "bug_report": "Bug Report",
    "improvement": "Improvement",
    "other": "Other",
}


def build_description(feedback, project_name: str) -> str:
    """Markdown body shared by every provider"""
    category = CATEGORY_TITLES.get(feedback.category, feedback.category.replace("_", " ").title())
    description = (
        f"## {category}\n\n"
        f"{feedback.description}\n\n"
        f"---\n\n"
        f"**Source:** FeedbackKit\n"
        f"**Project:** {project_name}\n"
        f"**Status:** {feedback.status.replace('_', ' ').title()}\n"
        f"**Votes:** {feedback.vote_count}"
    )
    if feedback.user_email:
        description += f"\n**Submitted by:** {feedback.user_email}"
    return description


class ProviderClient:
    """Base class: request plumbing and level dispatch"""

    provider: str = ""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        # transport is injectable so tests can use httpx.MockTransport
        self.transport = transport

    @property
    def base_url(self) -> str:
        raise NotImplementedError

    def headers(self, token: str) -> Dict[str, str]:
        return {"Authorization": token, "Content-Type": "application/json"}

    async def request(self, method: str, path: str, token: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS, transport=self.transport) as client:
            try:
                response = await client.request(method, url, headers=self.headers(token), **kwargs)
            except httpx.HTTPError as e:
                logger.error(f"❌ {self.provider} request failed: {method} {path}: {str(e)}")
                raise IntegrationAPIError(self.provider, str(e))

        if response.status_code >= 400:
            logger.error(f"❌ {self.provider} API error ({response.status_code}) on {method} {path}: {response.text[:500]}")
            raise IntegrationAPIError(self.provider, self.error_message(response), response.status_code)

        if not response.content:
            return {}
        return response.json()

    def error_message(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            for key in ("err", "message", "error", "error_message"):
                if body.get(key):
                    return str(body[key])
        return f"HTTP {response.status_code}"

    async def list_level(self, level: str, token: str, parent_id: Optional[str] = None) -> List[HierarchyItem]:
        handler = getattr(self, f"list_{level}", None)
        if handler is None:
            raise IntegrationAPIError(self.provider, f"Unknown resource level: {level}")
        logger.info(f"🔎 Listing {self.provider} {level} (parent={parent_id})")
        if parent_id is None:
            return await handler(token)
        return await handler(token, parent_id)

    async def create_item(self, project, feedback, labels: Optional[List[str]] = None) -> CreatedExternalItem:
        raise NotImplementedError


class GraphQLClient(ProviderClient):
    """Monday.com and Linear both speak GraphQL over a single POST endpoint"""

    async def query(self, token: str, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        body = await self.request("POST", "", token, json={"query": query, "variables": variables or {}})
        if body.get("errors"):
            message = body["errors"][0].get("message", "GraphQL error")
            logger.error(f"❌ {self.provider} GraphQL error: {message}")
            raise IntegrationAPIError(self.provider, message)
        return body.get("data") or {}


# -----------------------------------------------------------------------------
# GitHub
# -----------------------------------------------------------------------------

class GitHubClient(ProviderClient):
    provider = "github"

    @property
    def base_url(self) -> str:
        return settings.GITHUB_API_URL

    def headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
        }

    async def list_repositories(self, token: str) -> List[HierarchyItem]:
        repos = await self.request("GET", "/user/repos", token, params={"per_page": 100, "sort": "updated"})
        return [
            HierarchyItem(
                id=repo["full_name"],
                name=repo["name"],
                extra={"owner": repo["owner"]["login"], "private": repo.get("private", False)},
            )
            for repo in repos
        ]

    async def create_item(self, project, feedback, labels: Optional[List[str]] = None) -> CreatedExternalItem:
        payload = {
            "title": feedback.title,
            "body": build_description(feedback, project.name),
            "labels": list(project.github_default_labels or []) + list(labels or []),
        }
        issue = await self.request("POST", f"/repos/{project.github_owner}/{project.github_repo}/issues", token=project.github_token, json=payload)
        return CreatedExternalItem(external_id=str(issue["number"]), external_url=issue.get("html_url"))


# -----------------------------------------------------------------------------
# ClickUp
# -----------------------------------------------------------------------------

class ClickUpClient(ProviderClient):
    provider = "clickup"

    @property
    def base_url(self) -> str:
        return settings.CLICKUP_API_URL

    async def list_workspaces(self, token: str) -> List[HierarchyItem]:
        body = await self.request("GET", "/team", token)
        return [HierarchyItem(id=str(t["id"]), name=t["name"]) for t in body.get("teams", [])]

    async def list_spaces(self, token: str, workspace_id: str) -> List[HierarchyItem]:
        body = await self.request("GET", f"/team/{workspace_id}/space", token)
        return [HierarchyItem(id=str(s["id"]), name=s["name"]) for s in body.get("spaces", [])]

    async def list_folders(self, token: str, space_id: str) -> List[HierarchyItem]:
        body = await self.request("GET", f"/space/{space_id}/folder", token)
        return [HierarchyItem(id=str(f["id"]), name=f["name"]) for f in body.get("folders", [])]

    async def list_lists(self, token: str, folder_id: str) -> List[HierarchyItem]:
        body = await self.request("GET", f"/folder/{folder_id}/list", token)
        return [HierarchyItem(id=str(l["id"]), name=l["name"]) for l in body.get("lists", [])]

    async def list_folderless_lists(self, token: str, space_id: str) -> List[HierarchyItem]:
        body = await self.request("GET", f"/space/{space_id}/list", token)
        return [HierarchyItem(id=str(l["id"]), name=l["name"]) for l in body.get("lists", [])]

    async def list_custom_fields(self, token: str, list_id: str) -> List[HierarchyItem]:
        body = await self.request("GET", f"/list/{list_id}/field", token)
        return [
            HierarchyItem(id=str(f["id"]), name=f["name"], extra={"type": f.get("type")})
            for f in body.get("fields", [])
        ]

    async def create_item(self, project, feedback, labels: Optional[List[str]] = None) -> CreatedExternalItem:
        payload = {
            "name": feedback.title,
            "markdown_description": build_description(feedback, project.name),
            "tags": list(project.clickup_default_tags or []) + list(labels or []),
        }
        task = await self.request("POST", f"/list/{project.clickup_list_id}/task", token=project.clickup_token, json=payload)

        # the task exists from here on: a failed follow-up must not hide it
        if project.clickup_votes_field_id:
            try:
                await self.request(
                    "POST",
                    f"/task/{task['id']}/field/{project.clickup_votes_field_id}",
                    token=project.clickup_token,
                    json={"value": feedback.vote_count},
                )
            except IntegrationAPIError as e:
                logger.warning(f"⚠️ ClickUp task {task['id']} created but votes field was not set: {e.message}")
        return CreatedExternalItem(external_id=str(task["id"]), external_url=task.get("url"))


# -----------------------------------------------------------------------------
# Notion
# -----------------------------------------------------------------------------

class NotionClient(ProviderClient):
    provider = "notion"

    @property
    def base_url(self) -> str:
        return settings.NOTION_API_URL

    def headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Notion-Version": settings.NOTION_API_VERSION,
            "Content-Type": "application/json",
        }

    @staticmethod
    def _plain_text(rich_text: List[Dict[str, Any]]) -> str:
        return "".join(part.get("plain_text", "") for part in rich_text or [])

    async def list_databases(self, token: str) -> List[HierarchyItem]:
        body = await self.request(
            "POST", "/search", token,
            json={"filter": {"value": "database", "property": "object"}, "page_size": 100},
        )
        return [
            HierarchyItem(id=db["id"], name=self._plain_text(db.get("title")) or "Untitled")
            for db in body.get("results", [])
        ]

    async def list_properties(self, token: str, database_id: str) -> List[HierarchyItem]:
        database = await self.request("GET", f"/databases/{database_id}", token)
        return [
            HierarchyItem(id=prop.get("id", name), name=name, extra={"type": prop.get("type")})
            for name, prop in database.get("properties", {}).items()
        ]

    async def create_item(self, project, feedback, labels: Optional[List[str]] = None) -> CreatedExternalItem:
        token = project.notion_token
        properties = await self.list_properties(token, project.notion_database_id)
        title_property = next((p.name for p in properties if p.extra.get("type") == "title"), "Name")

        page_properties: Dict[str, Any] = {
            title_property: {"title": [{"text": {"content": feedback.title}}]},
        }
        if project.notion_votes_property:
            page_properties[project.notion_votes_property] = {"number": feedback.vote_count}

        payload = {
            "parent": {"database_id": project.notion_database_id},
            "properties": page_properties,
            "children": [
                {
                    "object": "block",
                    "type": "paragraph",
                    "paragraph": {"rich_text": [{"type": "text", "text": {"content": build_description(feedback, project.name)[:2000]}}]},
                }
            ],
        }
        page = await self.request("POST", "/pages", token, json=payload)
        return CreatedExternalItem(external_id=page["id"], external_url=page.get("url"))


# -----------------------------------------------------------------------------
# Monday.com
# -----------------------------------------------------------------------------

class MondayClient(GraphQLClient):
    provider = "monday"

    @property
    def base_url(self) -> str:
        return settings.MONDAY_API_URL

    async def list_boards(self, token: str) -> List[HierarchyItem]:
        data = await self.query(token, "query { boards(limit: 100) { id name } }")
        return [HierarchyItem(id=str(b["id"]), name=b["name"]) for b in data.get("boards", [])]

    async def _board(self, token: str, board_id: str, selection: str) -> Dict[str, Any]:
        data = await self.query(
            token,
            f"query ($ids: [ID!]) {{ boards(ids: $ids) {{ {selection} }} }}",
            {"ids": [board_id]},
        )
        boards = data.get("boards") or []
        if not boards:
            raise IntegrationAPIError(self.provider, f"Board {board_id} not found")
        return boards[0]

    async def list_groups(self, token: str, board_id: str) -> List[HierarchyItem]:
        board = await self._board(token, board_id, "groups { id title }")
        return [HierarchyItem(id=g["id"], name=g["title"]) for g in board.get("groups", [])]

    async def list_columns(self, token: str, board_id: str) -> List[HierarchyItem]:
        board = await self._board(token, board_id, "columns { id title type }")
        return [
            HierarchyItem(id=c["id"], name=c["title"], extra={"type": c.get("type")})
            for c in board.get("columns", [])
        ]

    async def create_item(self, project, feedback, labels: Optional[List[str]] = None) -> CreatedExternalItem:
        token = project.monday_token
        data = await self.query(
            token,
            "mutation ($board: ID!, $group: String, $name: String!) "
            "{ create_item(board_id: $board, group_id: $group, item_name: $name) { id } }",
            {"board": project.monday_board_id, "group": project.monday_group_id, "name": feedback.title},
        )
        item_id = str(data["create_item"]["id"])
        try:
            await self.query(
                token,
                "mutation ($item: ID!, $body: String!) { create_update(item_id: $item, body: $body) { id } }",
                {"item": item_id, "body": build_description(feedback, project.name)},
            )
        except IntegrationAPIError as e:
            logger.warning(f"⚠️ Monday item {item_id} created but description update failed: {e.message}")
        return CreatedExternalItem(external_id=item_id)


# -----------------------------------------------------------------------------
# Trello
# -----------------------------------------------------------------------------

class TrelloClient(ProviderClient):
    provider = "trello"

    @property
    def base_url(self) -> str:
        return settings.TRELLO_API_URL

    def headers(self, token: str) -> Dict[str, str]:
        return {"Accept": "application/json"}

    def auth_params(self, token: str) -> Dict[str, str]:
        if not settings.TRELLO_API_KEY:
            raise IntegrationNotConfiguredError(self.provider, "TRELLO_API_KEY is not configured on the server")
        return {"key": settings.TRELLO_API_KEY, "token": token}

    async def list_boards(self, token: str) -> List[HierarchyItem]:
        boards = await self.request("GET", "/members/me/boards", token, params={**self.auth_params(token), "filter": "open"})
        return [HierarchyItem(id=b["id"], name=b["name"], extra={"url": b.get("url")}) for b in boards]

    async def list_lists(self, token: str, board_id: str) -> List[HierarchyItem]:
        lists = await self.request("GET", f"/boards/{board_id}/lists", token, params={**self.auth_params(token), "filter": "open"})
        return [HierarchyItem(id=l["id"], name=l["name"]) for l in lists]

    async def create_item(self, project, feedback, labels: Optional[List[str]] = None) -> CreatedExternalItem:
        token = project.trello_token
        description = build_description(feedback, project.name) + "\n\n---\n*Synced from FeedbackKit*"
        card = await self.request(
            "POST", "/cards", token,
            params=self.auth_params(token),
            json={"idList": project.trello_list_id, "name": feedback.title, "desc": description, "pos": "bottom"},
        )
        return CreatedExternalItem(external_id=card["id"], external_url=card.get("shortUrl") or card.get("url"))


# -----------------------------------------------------------------------------
# Linear
# -----------------------------------------------------------------------------

class LinearClient(GraphQLClient):
    provider = "linear"

    @property
    def base_url(self) -> str:
        return settings.LINEAR_API_URL

    async def list_teams(self, token: str) -> List[HierarchyItem]:
        data = await self.query(token, "query { teams { nodes { id name key } } }")
        return [
            HierarchyItem(id=t["id"], name=t["name"], extra={"key": t.get("key")})
            for t in data.get("teams", {}).get("nodes", [])
        ]

    async def _team(self, token: str, team_id: str, selection: str) -> Dict[str, Any]:
        data = await self.query(token, f"query ($id: String!) {{ team(id: $id) {{ {selection} }} }}", {"id": team_id})
        if not data.get("team"):
            raise IntegrationAPIError(self.provider, f"Team {team_id} not found")
        return data["team"]

    async def list_projects(self, token: str, team_id: str) -> List[HierarchyItem]:
        team = await self._team(token, team_id, "projects { nodes { id name } }")
        return [HierarchyItem(id=p["id"], name=p["name"]) for p in team["projects"]["nodes"]]

    async def list_labels(self, token: str, team_id: str) -> List[HierarchyItem]:
        team = await self._team(token, team_id, "labels { nodes { id name color } }")
        return [
            HierarchyItem(id=l["id"], name=l["name"], extra={"color": l.get("color")})
            for l in team["labels"]["nodes"]
        ]

    async def list_states(self, token: str, team_id: str) -> List[HierarchyItem]:
        team = await self._team(token, team_id, "states { nodes { id name type } }")
        return [
            HierarchyItem(id=s["id"], name=s["name"], extra={"type": s.get("type")})
            for s in team["states"]["nodes"]
        ]

    async def create_item(self, project, feedback, labels: Optional[List[str]] = None) -> CreatedExternalItem:
        issue_input: Dict[str, Any] = {
            "teamId": project.linear_team_id,
            "title": feedback.title,
            "description": build_description(feedback, project.name),
        }
        if project.linear_project_id:
            issue_input["projectId"] = project.linear_project_id
        label_ids = list(project.linear_default_label_ids or []) + list(labels or [])
        if label_ids:
            issue_input["labelIds"] = label_ids

        data = await self.query(
            project.linear_token,
            "mutation ($input: IssueCreateInput!) { issueCreate(input: $input) { success issue { id identifier url } } }",
            {"input": issue_input},
        )
        result = data.get("issueCreate") or {}
        if not result.get("success"):
            raise IntegrationAPIError(self.provider, "Issue was not created")
        issue = result["issue"]
        return CreatedExternalItem(external_id=issue["id"], external_url=issue.get("url"))


# -----------------------------------------------------------------------------
# Slack (incoming webhook)
# -----------------------------------------------------------------------------

SLACK_WEBHOOK_PREFIX = "https://hooks.slack.com/"


class SlackWebhookClient:
    """Posts messages to a project's incoming webhook. There is no hierarchy to walk."""

    provider = "slack"

    def send_message(self, webhook_url: str, text: str, blocks: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"text": text}
        if blocks:
            payload["blocks"] = blocks

        try:
            response = requests.post(webhook_url, json=payload, timeout=settings.HTTP_TIMEOUT_SECONDS)
        except requests.RequestException as e:
            logger.error(f"❌ Slack webhook request failed: {str(e)}")
            return {"success": False, "error": str(e)}

        if response.status_code == 200:
            logger.info("✅ Slack webhook message delivered")
            return {"success": True}

        logger.error(f"❌ Slack webhook rejected message ({response.status_code}): {response.text}")
        return {"success": False, "error": response.text or f"HTTP {response.status_code}"}

    async def list_level(self, level: str, token: str, parent_id: Optional[str] = None) -> List[HierarchyItem]:
        raise IntegrationAPIError(self.provider, "Slack has no resource hierarchy")


CLIENT_CLASSES = {
    "slack": SlackWebhookClient,
    "github": GitHubClient,
    "clickup": ClickUpClient,
    "notion": NotionClient,
    "monday": MondayClient,
    "trello": TrelloClient,
    "linear": LinearClient,
}
