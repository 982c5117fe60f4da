"""Admin API client, integration drafts and the hierarchy wizard."""

import pytest
import pytest_asyncio
import httpx
from httpx import ASGITransport

from app.client.api_client import AdminAPIClient, Conflict, NotFound, PaymentRequired, SaveResult
from app.client.drafts import IntegrationDraft
from app.client.wizard import HierarchyWizard
from app.main import app
from app.schemas.integration import HierarchyItem


@pytest_asyncio.fixture()
async def client_for(test_client, auth_headers):
    """``await client_for(user)`` -> AdminAPIClient talking to the app in-process"""
    clients = []

    async def _make(user):
        token = auth_headers(user)["Authorization"].split(" ", 1)[1]
        client = AdminAPIClient("http://test", token=token, transport=ASGITransport(app=app))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()


# ---------------------------------------------------------------------------
# AdminAPIClient
# ---------------------------------------------------------------------------

async def test_client_round_trip(client_for, pro_user):
    client = await client_for(pro_user)
    me = await client.get_me()
    assert me["email"] == pro_user.email

    project = await client.create_project("Client App", "from the client")
    assert project["name"] == "Client App"
    projects = await client.list_projects()
    assert [p["id"] for p in projects] == [project["id"]]

    updated = await client.update_project(project["id"], color_index=3)
    assert updated["color_index"] == 3

    await client.delete_project(project["id"])
    with pytest.raises(NotFound):
        await client.get_project(project["id"])


async def test_payment_required_carries_paywall_details(client_for, free_user, make_project):
    make_project(free_user)
    client = await client_for(free_user)
    with pytest.raises(PaymentRequired) as exc_info:
        await client.create_project("Second")
    error = exc_info.value
    assert error.status_code == 402
    assert error.current_tier == "free"
    assert error.required_tier == "pro"
    assert error.limit == 1
    assert error.current == 1


async def test_conflict_is_mapped(client_for, team_user, pro_user, make_project):
    project = make_project(team_user)
    client = await client_for(team_user)
    await client.add_member(project.id, pro_user.email)
    with pytest.raises(Conflict):
        await client.add_member(project.id, pro_user.email)


# ---------------------------------------------------------------------------
# IntegrationDraft
# ---------------------------------------------------------------------------

def test_draft_changes_and_payload():
    draft = IntegrationDraft.from_project("github", {"github_token": "ghp", "github_owner": None, "github_repo": None})
    assert not draft.has_changes
    assert draft.token == "ghp"
    assert not draft.is_configured

    draft["github_owner"] = "  "
    assert not draft.has_changes

    draft["github_owner"] = "acme"
    draft["github_repo"] = "app"
    assert draft.has_changes
    assert draft.is_configured

    payload = draft.to_payload()
    assert payload["github_owner"] == "acme"
    assert payload["github_default_labels"] == []
    assert "github_sync_status" not in payload

    with pytest.raises(KeyError):
        draft["trello_token"] = "nope"


def test_draft_clear_and_mark_saved():
    saved = {"linear_token": "lin", "linear_team_id": "t1", "linear_team_name": "Core", "linear_sync_status": True}
    draft = IntegrationDraft.from_project("linear", saved)
    draft.clear()
    assert draft.has_changes
    payload = draft.to_payload()
    assert payload["linear_token"] == ""
    assert payload["linear_team_id"] == ""
    assert payload["linear_default_label_ids"] == []
    assert payload["linear_sync_status"] is True

    draft["linear_token"] = "new"
    draft.mark_saved({"linear_token": "lin", "linear_team_id": None}, fields=["linear_team_id"])
    assert draft["linear_token"] == "new"
    assert draft["linear_team_id"] is None


def test_unknown_provider_draft():
    with pytest.raises(ValueError):
        IntegrationDraft.from_project("jira", {})


# ---------------------------------------------------------------------------
# HierarchyWizard
# ---------------------------------------------------------------------------

CLICKUP_TREE = {
    "workspaces": [HierarchyItem(id="w1", name="Acme"), HierarchyItem(id="w2", name="Side")],
    "spaces": [HierarchyItem(id="s1", name="Product")],
    "folders": [HierarchyItem(id="f1", name="Mobile")],
    "folderless_lists": [HierarchyItem(id="fl1", name="Backlog")],
    "lists": [HierarchyItem(id="l1", name="Feedback")],
    "custom_fields": [HierarchyItem(id="cf1", name="Votes", extra={"type": "number"})],
}


@pytest.fixture()
def clickup_tree(provider_client):
    calls = []

    async def list_level(level, token, parent_id):
        calls.append((level, token, parent_id))
        return CLICKUP_TREE[level]

    provider_client.list_level.side_effect = list_level
    return calls


async def test_wizard_walks_hierarchy_and_saves(client_for, pro_user, make_project, clickup_tree):
    project = make_project(pro_user)
    client = await client_for(pro_user)
    wizard = HierarchyWizard(client, await client.get_project(project.id), "clickup")

    result = await wizard.enter_token(" pk_live ")
    assert result is SaveResult.SUCCESS
    assert wizard.error is None
    assert wizard.collections["workspaces"] == CLICKUP_TREE["workspaces"]
    assert clickup_tree == [("workspaces", "pk_live", None)]
    assert wizard.draft.saved["clickup_token"] == "pk_live"

    await wizard.select("workspaces", CLICKUP_TREE["workspaces"][0])
    await wizard.select("spaces", CLICKUP_TREE["spaces"][0])
    assert set(wizard.collections) == {"workspaces", "spaces", "folders", "folderless_lists"}
    await wizard.select("folders", CLICKUP_TREE["folders"][0])
    await wizard.select("lists", CLICKUP_TREE["lists"][0])
    await wizard.select("custom_fields", CLICKUP_TREE["custom_fields"][0])

    assert ("spaces", "pk_live", "w1") in clickup_tree
    assert ("custom_fields", "pk_live", "l1") in clickup_tree
    assert wizard.draft["clickup_workspace_name"] == "Acme"
    assert wizard.draft["clickup_list_id"] == "l1"
    assert wizard.draft["clickup_votes_field_id"] == "cf1"
    assert wizard.draft.has_changes

    assert await wizard.save() is SaveResult.SUCCESS
    assert not wizard.draft.has_changes
    saved = await client.get_project(project.id)
    assert saved["clickup_configured"] is True
    assert saved["clickup_list_name"] == "Feedback"


async def test_reselecting_clears_deeper_levels(client_for, pro_user, make_project, clickup_tree):
    project = make_project(pro_user)
    client = await client_for(pro_user)
    wizard = HierarchyWizard(client, await client.get_project(project.id), "clickup")
    await wizard.enter_token("pk_live")
    await wizard.select("workspaces", CLICKUP_TREE["workspaces"][0])
    await wizard.select("spaces", CLICKUP_TREE["spaces"][0])
    await wizard.select("folderless_lists", CLICKUP_TREE["folderless_lists"][0])
    assert wizard.draft["clickup_list_id"] == "fl1"

    await wizard.select("workspaces", CLICKUP_TREE["workspaces"][1])

    assert wizard.draft["clickup_workspace_name"] == "Side"
    assert wizard.draft["clickup_list_id"] is None
    assert wizard.draft["clickup_list_name"] is None
    assert set(wizard.selections) == {"workspaces"}
    assert set(wizard.collections) == {"workspaces", "spaces"}
    assert clickup_tree[-1] == ("spaces", "pk_live", "w2")


async def test_select_unknown_level(client_for, pro_user, make_project, clickup_tree):
    project = make_project(pro_user)
    client = await client_for(pro_user)
    wizard = HierarchyWizard(client, await client.get_project(project.id), "clickup")
    with pytest.raises(ValueError):
        await wizard.select("boards", HierarchyItem(id="x", name="x"))


async def test_wizard_paywall(client_for, free_user, make_project, provider_client):
    project = make_project(free_user)
    client = await client_for(free_user)
    wizard = HierarchyWizard(client, await client.get_project(project.id), "trello")

    result = await wizard.enter_token("trello-token")

    assert result is SaveResult.PAYMENT_REQUIRED
    assert wizard.paywall_required is True
    assert wizard.error is None
    provider_client.list_level.assert_not_awaited()


async def test_wizard_empty_top_level(client_for, pro_user, make_project, provider_client):
    project = make_project(pro_user)
    client = await client_for(pro_user)
    wizard = HierarchyWizard(client, await client.get_project(project.id), "trello")

    result = await wizard.enter_token("trello-token")

    assert result is SaveResult.SUCCESS
    assert wizard.error == "No boards found for this Trello token"
    assert wizard.collections["boards"] == []
    wizard.dismiss_error()
    assert wizard.error is None


async def test_wizard_requires_token(client_for, pro_user, make_project):
    project = make_project(pro_user)
    client = await client_for(pro_user)
    wizard = HierarchyWizard(client, await client.get_project(project.id), "linear")
    assert await wizard.enter_token("   ") is SaveResult.OTHER_ERROR
    assert wizard.error == "Enter a Linear token"


LINEAR_TREE = {
    "teams": [HierarchyItem(id="t1", name="Core", extra={"key": "CORE"}), HierarchyItem(id="t2", name="Growth")],
    "projects": [HierarchyItem(id="p1", name="Mobile")],
    "labels": [HierarchyItem(id="lb1", name="feedback", extra={"color": "#ff0"})],
    "states": [HierarchyItem(id="st1", name="Todo", extra={"type": "unstarted"})],
}


@pytest.fixture()
def linear_tree(provider_client):
    calls = []

    async def list_level(level, token, parent_id):
        calls.append((level, token, parent_id))
        return LINEAR_TREE[level]

    provider_client.list_level.side_effect = list_level
    return calls


async def test_linear_team_loads_every_child_level(client_for, pro_user, make_project, linear_tree):
    project = make_project(pro_user)
    client = await client_for(pro_user)
    wizard = HierarchyWizard(client, await client.get_project(project.id), "linear")

    assert await wizard.enter_token("lin_api") is SaveResult.SUCCESS
    await wizard.select("teams", LINEAR_TREE["teams"][0])

    assert set(wizard.collections) == {"teams", "projects", "labels", "states"}
    assert {call for call in linear_tree if call[2]} == {
        ("projects", "lin_api", "t1"), ("labels", "lin_api", "t1"), ("states", "lin_api", "t1"),
    }
    assert wizard.draft["linear_team_id"] == "t1"
    assert wizard.draft["linear_team_name"] == "Core"

    await wizard.select("projects", LINEAR_TREE["projects"][0])
    assert wizard.draft["linear_project_id"] == "p1"

    # a different team drops the project picked under the first one
    await wizard.select("teams", LINEAR_TREE["teams"][1])
    assert wizard.draft["linear_team_id"] == "t2"
    assert wizard.draft["linear_project_id"] is None
    assert wizard.draft["linear_project_name"] is None
    assert set(wizard.selections) == {"teams"}
    assert ("states", "lin_api", "t2") in linear_tree

    assert await wizard.save() is SaveResult.SUCCESS
    saved = await client.get_project(project.id)
    assert saved["linear_configured"] is True
    assert saved["linear_team_name"] == "Growth"
    assert saved["linear_project_id"] is None


async def test_hierarchy_parent_id_is_path_quoted():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[{"id": "1", "name": "Inbox"}])

    async with AdminAPIClient("http://test", token="t", transport=httpx.MockTransport(handler)) as client:
        items = await client.list_hierarchy("proj-1", "github", "repositories", "acme/app?x=1")

    assert items[0].name == "Inbox"
    assert seen[0].url.raw_path == b"/api/v1/projects/proj-1/github/repositories/acme%2Fapp%3Fx%3D1"


async def test_client_feedback_votes_comments_and_dashboards(client_for, pro_user):
    client = await client_for(pro_user)
    project = await client.create_project("Votes App")
    first = await client.create_feedback(project["id"], "Dark mode")
    second = await client.create_feedback(project["id"], "Night theme")

    vote = await client.vote(project["id"], first["id"], "end-user-1", email="fan@example.com")
    assert vote["vote_count"] == 1
    await client.vote(project["id"], second["id"], "end-user-2")
    with pytest.raises(Conflict):
        await client.vote(project["id"], first["id"], "end-user-1")
    assert (await client.unvote(project["id"], first["id"], "end-user-1"))["has_voted"] is False

    comment = await client.add_comment(project["id"], second["id"], "Same as dark mode")
    assert [c["id"] for c in await client.list_comments(project["id"], second["id"])] == [comment["id"]]

    merged = await client.merge_feedback(project["id"], first["id"], [second["id"]])
    assert merged["merged_count"] == 1
    assert merged["total_votes"] == 1
    assert merged["total_comments"] == 1

    await client.delete_comment(project["id"], first["id"], comment["id"])
    assert (await client.get_feedback(project["id"], first["id"]))["comment_count"] == 0

    home = await client.get_home_dashboard()
    assert home["total_feedback"] == 2
    stats = await client.get_project_dashboard(project["id"])
    assert stats["vote_count"] == 1

    await client.delete_feedback(project["id"], second["id"])
    with pytest.raises(NotFound):
        await client.get_feedback(project["id"], second["id"])
