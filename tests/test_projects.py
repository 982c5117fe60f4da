"""Project CRUD, archival, API keys and allowed statuses."""

from uuid import uuid4

from app.models.feedback import Feedback, Comment
from app.models.member import ProjectMember, ProjectRole
from app.models.project import Project, DEFAULT_ALLOWED_STATUSES


async def test_create_project(test_client, free_user, auth_headers):
    resp = await test_client.post(
        "/api/v1/projects",
        headers=auth_headers(free_user),
        json={"name": "  My App ", "description": "Feedback for my app"},
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["name"] == "My App"
    assert data["api_key"].startswith("sf_") and len(data["api_key"]) == 35
    assert 0 <= data["color_index"] <= 7
    assert data["allowed_statuses"] == DEFAULT_ALLOWED_STATUSES
    assert data["owner_email"] == free_user.email
    assert data["has_any_integration"] is False


async def test_free_tier_project_limit(test_client, free_user, auth_headers, make_project):
    make_project(free_user)
    resp = await test_client.post("/api/v1/projects", headers=auth_headers(free_user), json={"name": "Second"})
    assert resp.status_code == 402
    body = resp.json()
    assert body["current_tier"] == "free"
    assert body["required_tier"] == "pro"
    assert body["limit"] == 1
    assert body["current"] == 1


async def test_project_limit_ignored_in_development(test_client, free_user, auth_headers, make_project, dev_environment):
    make_project(free_user)
    resp = await test_client.post("/api/v1/projects", headers=auth_headers(free_user), json={"name": "Second"})
    assert resp.status_code == 201


async def test_list_projects_includes_memberships(test_client, db_session, free_user, pro_user, auth_headers, make_project):
    own = make_project(free_user, name="Mine")
    shared = make_project(pro_user, name="Shared")
    make_project(pro_user, name="Private")
    db_session.add(ProjectMember(project_id=shared.id, user_id=free_user.id, role=ProjectRole.VIEWER))
    db_session.commit()

    resp = await test_client.get("/api/v1/projects", headers=auth_headers(free_user))
    assert resp.status_code == 200
    by_name = {p["name"]: p for p in resp.json()}
    assert set(by_name) == {"Mine", "Shared"}
    assert by_name["Mine"]["is_owner"] is True
    assert by_name["Shared"]["role"] == "viewer"
    assert str(own.id) == by_name["Mine"]["id"]


async def test_project_not_visible_to_outsiders(test_client, free_user, pro_user, auth_headers, make_project):
    project = make_project(pro_user)
    resp = await test_client.get(f"/api/v1/projects/{project.id}", headers=auth_headers(free_user))
    assert resp.status_code == 404
    resp = await test_client.get(f"/api/v1/projects/{uuid4()}", headers=auth_headers(pro_user))
    assert resp.status_code == 404


async def test_requires_authentication(test_client):
    resp = await test_client.get("/api/v1/projects")
    assert resp.status_code == 401


async def test_update_project(test_client, pro_user, auth_headers, make_project):
    project = make_project(pro_user)
    resp = await test_client.patch(
        f"/api/v1/projects/{project.id}",
        headers=auth_headers(pro_user),
        json={"name": "Renamed", "color_index": 5},
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"
    assert resp.json()["color_index"] == 5

    resp = await test_client.patch(
        f"/api/v1/projects/{project.id}", headers=auth_headers(pro_user), json={"color_index": 8}
    )
    assert resp.status_code == 422


async def test_blank_project_name_rejected(test_client, db_session, pro_user, auth_headers, make_project):
    project = make_project(pro_user, name="Keep")
    resp = await test_client.patch(
        f"/api/v1/projects/{project.id}", headers=auth_headers(pro_user), json={"name": "   "}
    )
    assert resp.status_code == 422
    db_session.refresh(project)
    assert project.name == "Keep"

    resp = await test_client.post("/api/v1/projects", headers=auth_headers(pro_user), json={"name": " "})
    assert resp.status_code == 422


async def test_viewer_cannot_update(test_client, db_session, free_user, pro_user, auth_headers, make_project):
    project = make_project(pro_user)
    db_session.add(ProjectMember(project_id=project.id, user_id=free_user.id, role=ProjectRole.VIEWER))
    db_session.commit()
    resp = await test_client.patch(
        f"/api/v1/projects/{project.id}", headers=auth_headers(free_user), json={"name": "Hijacked"}
    )
    assert resp.status_code == 403


async def test_archive_and_unarchive(test_client, pro_user, auth_headers, make_project):
    project = make_project(pro_user)
    headers = auth_headers(pro_user)

    resp = await test_client.post(f"/api/v1/projects/{project.id}/archive", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["is_archived"] is True
    assert resp.json()["archived_at"] is not None

    resp = await test_client.post(f"/api/v1/projects/{project.id}/archive", headers=headers)
    assert resp.status_code == 400

    resp = await test_client.post(f"/api/v1/projects/{project.id}/unarchive", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["is_archived"] is False
    assert resp.json()["archived_at"] is None


async def test_regenerate_api_key(test_client, pro_user, auth_headers, make_project):
    project = make_project(pro_user)
    old_key = project.api_key
    resp = await test_client.post(f"/api/v1/projects/{project.id}/regenerate-key", headers=auth_headers(pro_user))
    assert resp.status_code == 200
    assert resp.json()["api_key"] != old_key
    assert resp.json()["api_key"].startswith("sf_")


async def test_delete_project_cascades(test_client, db_session, pro_user, free_user, auth_headers, make_project):
    project = make_project(pro_user)
    feedback = Feedback(project_id=project.id, title="Dark mode", description="")
    db_session.add(feedback)
    db_session.add(ProjectMember(project_id=project.id, user_id=free_user.id, role=ProjectRole.MEMBER))
    db_session.commit()
    db_session.add(Comment(feedback_id=feedback.id, content="+1", author_name="Someone"))
    db_session.commit()

    resp = await test_client.delete(f"/api/v1/projects/{project.id}", headers=auth_headers(free_user))
    assert resp.status_code == 403

    resp = await test_client.delete(f"/api/v1/projects/{project.id}", headers=auth_headers(pro_user))
    assert resp.status_code == 204
    db_session.expire_all()
    assert db_session.query(Project).count() == 0
    assert db_session.query(Feedback).count() == 0
    assert db_session.query(Comment).count() == 0
    assert db_session.query(ProjectMember).count() == 0


async def test_allowed_statuses(test_client, pro_user, auth_headers, make_project):
    project = make_project(pro_user)
    url = f"/api/v1/projects/{project.id}/statuses"
    headers = auth_headers(pro_user)

    resp = await test_client.patch(url, headers=headers, json={"allowed_statuses": ["pending", "testflight", "completed", "pending"]})
    assert resp.status_code == 200
    assert resp.json()["allowed_statuses"] == ["pending", "testflight", "completed"]

    resp = await test_client.patch(url, headers=headers, json={"allowed_statuses": ["approved", "completed"]})
    assert resp.status_code == 400

    resp = await test_client.patch(url, headers=headers, json={"allowed_statuses": ["pending", "shipped"]})
    assert resp.status_code == 400


async def test_allowed_statuses_require_pro(test_client, free_user, auth_headers, make_project):
    project = make_project(free_user)
    resp = await test_client.patch(
        f"/api/v1/projects/{project.id}/statuses",
        headers=auth_headers(free_user),
        json={"allowed_statuses": ["pending", "completed"]},
    )
    assert resp.status_code == 402
    assert resp.json()["required_tier"] == "pro"
