"""Provider HTTP clients against httpx.MockTransport."""

import json
from types import SimpleNamespace

import httpx
import pytest

from app.core.config import settings
from app.core.exceptions import IntegrationAPIError, IntegrationNotConfiguredError
from app.integrations.clients import (
    ClickUpClient,
    GitHubClient,
    LinearClient,
    MondayClient,
    NotionClient,
    TrelloClient,
    build_description,
)


def recording_transport(handler):
    """MockTransport that keeps every request it served"""
    seen = []

    def _handle(request):
        seen.append(request)
        return handler(request)

    transport = httpx.MockTransport(_handle)
    transport.seen = seen
    return transport


@pytest.fixture()
def feedback():
    return SimpleNamespace(
        title="Dark mode",
        description="Please add a dark theme",
        category="feature_request",
        status="in_progress",
        vote_count=12,
        user_email="fan@example.com",
    )


def test_build_description(feedback):
    text = build_description(feedback, "My App")
    assert text.startswith("## Feature Request\n\nPlease add a dark theme\n\n---\n\n")
    assert "**Project:** My App" in text
    assert "**Status:** In Progress" in text
    assert "**Votes:** 12" in text
    assert text.endswith("**Submitted by:** fan@example.com")

    feedback.user_email = None
    assert "Submitted by" not in build_description(feedback, "My App")


async def test_clickup_uses_raw_token_and_parses_workspaces():
    transport = recording_transport(
        lambda request: httpx.Response(200, json={"teams": [{"id": 901, "name": "Acme"}]})
    )
    items = await ClickUpClient(transport=transport).list_level("workspaces", "pk_123")

    assert [(i.id, i.name) for i in items] == [("901", "Acme")]
    request = transport.seen[0]
    assert request.headers["Authorization"] == "pk_123"
    assert request.url.path == "/api/v2/team"


async def test_clickup_child_level_uses_parent():
    transport = recording_transport(lambda request: httpx.Response(200, json={"lists": [{"id": "55", "name": "Inbox"}]}))
    items = await ClickUpClient(transport=transport).list_level("folderless_lists", "pk_123", "space-1")
    assert items[0].name == "Inbox"
    assert transport.seen[0].url.path == "/api/v2/space/space-1/list"


async def test_clickup_create_task_sets_votes(feedback):
    def handler(request):
        if request.url.path.endswith("/task"):
            return httpx.Response(200, json={"id": "abc", "url": "https://app.clickup.com/t/abc"})
        return httpx.Response(200, json={})

    transport = recording_transport(handler)
    project = SimpleNamespace(
        name="My App", clickup_token="pk_1", clickup_list_id="L1",
        clickup_default_tags=["feedback"], clickup_votes_field_id="votes-field",
    )
    item = await ClickUpClient(transport=transport).create_item(project, feedback, ["ios"])

    assert item.external_id == "abc"
    create, votes = transport.seen
    assert json.loads(create.content)["tags"] == ["feedback", "ios"]
    assert votes.url.path == "/api/v2/task/abc/field/votes-field"
    assert json.loads(votes.content) == {"value": 12}


async def test_github_lists_repositories_and_creates_issue(feedback):
    def handler(request):
        if request.method == "GET":
            return httpx.Response(200, json=[{"full_name": "acme/app", "name": "app", "owner": {"login": "acme"}}])
        return httpx.Response(201, json={"number": 42, "html_url": "https://github.com/acme/app/issues/42"})

    transport = recording_transport(handler)
    client = GitHubClient(transport=transport)

    repos = await client.list_level("repositories", "ghp_1")
    assert repos[0].id == "acme/app"
    assert repos[0].extra["owner"] == "acme"
    assert transport.seen[0].headers["Authorization"] == "Bearer ghp_1"

    project = SimpleNamespace(name="My App", github_token="ghp_1", github_owner="acme", github_repo="app", github_default_labels=None)
    item = await client.create_item(project, feedback)
    assert item.external_id == "42"
    assert transport.seen[1].url.path == "/repos/acme/app/issues"
    assert json.loads(transport.seen[1].content)["title"] == "Dark mode"


async def test_http_error_raises_integration_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"message": "Bad credentials"}))
    with pytest.raises(IntegrationAPIError) as exc_info:
        await GitHubClient(transport=transport).list_level("repositories", "nope")
    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Bad credentials"


async def test_unknown_level_raises():
    with pytest.raises(IntegrationAPIError):
        await GitHubClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[]))).list_level("gists", "t")


async def test_notion_sends_version_header():
    transport = recording_transport(lambda request: httpx.Response(200, json={
        "results": [{"id": "db-1", "title": [{"plain_text": "Road"}, {"plain_text": "map"}]}, {"id": "db-2", "title": []}]
    }))
    items = await NotionClient(transport=transport).list_level("databases", "secret")
    assert [(i.id, i.name) for i in items] == [("db-1", "Roadmap"), ("db-2", "Untitled")]
    assert transport.seen[0].headers["Notion-Version"] == settings.NOTION_API_VERSION
    assert transport.seen[0].method == "POST"


async def test_trello_passes_key_and_token(monkeypatch):
    monkeypatch.setattr(settings, "TRELLO_API_KEY", "trello-key")
    transport = recording_transport(lambda request: httpx.Response(200, json=[{"id": "b1", "name": "Roadmap", "url": "u"}]))
    items = await TrelloClient(transport=transport).list_level("boards", "user-token")

    assert items[0].extra == {"url": "u"}
    params = transport.seen[0].url.params
    assert params["key"] == "trello-key"
    assert params["token"] == "user-token"
    assert params["filter"] == "open"


async def test_trello_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "TRELLO_API_KEY", None)
    with pytest.raises(IntegrationNotConfiguredError):
        await TrelloClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[]))).list_level("boards", "t")


async def test_monday_groups_query_board():
    transport = recording_transport(lambda request: httpx.Response(200, json={
        "data": {"boards": [{"groups": [{"id": "topics", "title": "Topics"}]}]}
    }))
    items = await MondayClient(transport=transport).list_level("groups", "mon", "123")
    assert [(i.id, i.name) for i in items] == [("topics", "Topics")]
    assert json.loads(transport.seen[0].content)["variables"] == {"ids": ["123"]}


async def test_linear_graphql_errors_raise():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"errors": [{"message": "Authentication required"}]}))
    with pytest.raises(IntegrationAPIError) as exc_info:
        await LinearClient(transport=transport).list_level("teams", "lin")
    assert exc_info.value.message == "Authentication required"


async def test_linear_create_issue(feedback):
    transport = recording_transport(lambda request: httpx.Response(200, json={
        "data": {"issueCreate": {"success": True, "issue": {"id": "iss-1", "identifier": "APP-1", "url": "https://linear.app/i/1"}}}
    }))
    project = SimpleNamespace(
        name="My App", linear_token="lin", linear_team_id="team-1",
        linear_project_id=None, linear_default_label_ids=["lbl-1"],
    )
    item = await LinearClient(transport=transport).create_item(project, feedback)
    assert item.external_url == "https://linear.app/i/1"
    issue_input = json.loads(transport.seen[0].content)["variables"]["input"]
    assert issue_input["teamId"] == "team-1"
    assert issue_input["labelIds"] == ["lbl-1"]
    assert "projectId" not in issue_input


async def test_clickup_task_kept_when_votes_field_rejected(feedback):
    def handler(request):
        if request.url.path.endswith("/task"):
            return httpx.Response(200, json={"id": "abc", "url": "https://app.clickup.com/t/abc"})
        return httpx.Response(400, json={"err": "Custom field value invalid"})

    transport = recording_transport(handler)
    project = SimpleNamespace(
        name="My App", clickup_token="pk_1", clickup_list_id="L1",
        clickup_default_tags=None, clickup_votes_field_id="vf",
    )
    item = await ClickUpClient(transport=transport).create_item(project, feedback)

    assert item.external_id == "abc"
    assert item.external_url == "https://app.clickup.com/t/abc"
    assert len(transport.seen) == 2


async def test_monday_item_kept_when_update_fails(feedback):
    def handler(request):
        query = json.loads(request.content)["query"]
        if "create_item" in query:
            return httpx.Response(200, json={"data": {"create_item": {"id": 987}}})
        return httpx.Response(200, json={"errors": [{"message": "Rate limit exceeded"}]})

    transport = recording_transport(handler)
    project = SimpleNamespace(name="My App", monday_token="mon", monday_board_id="b1", monday_group_id="topics")
    item = await MondayClient(transport=transport).create_item(project, feedback)

    assert item.external_id == "987"
    assert len(transport.seen) == 2
