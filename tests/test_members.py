"""Members and email invites."""

from datetime import datetime, timedelta

from app.models.member import ProjectInvite, ProjectMember, ProjectRole


async def test_add_existing_user_as_member(test_client, team_user, pro_user, auth_headers, make_project):
    project = make_project(team_user)
    resp = await test_client.post(
        f"/api/v1/projects/{project.id}/members",
        headers=auth_headers(team_user),
        json={"email": "PRO@example.com", "role": "admin"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["invite"] is None
    assert body["member"]["email"] == pro_user.email
    assert body["member"]["role"] == "admin"

    resp = await test_client.get(f"/api/v1/projects/{project.id}/members", headers=auth_headers(pro_user))
    assert resp.status_code == 200
    assert [m["email"] for m in resp.json()] == [pro_user.email]


async def test_add_member_conflicts(test_client, db_session, team_user, pro_user, auth_headers, make_project):
    project = make_project(team_user)
    db_session.add(ProjectMember(project_id=project.id, user_id=pro_user.id, role=ProjectRole.MEMBER))
    db_session.commit()
    url = f"/api/v1/projects/{project.id}/members"

    resp = await test_client.post(url, headers=auth_headers(team_user), json={"email": pro_user.email})
    assert resp.status_code == 409
    resp = await test_client.post(url, headers=auth_headers(team_user), json={"email": team_user.email})
    assert resp.status_code == 409


async def test_unknown_email_creates_invite(test_client, team_user, auth_headers, make_project):
    project = make_project(team_user)
    url = f"/api/v1/projects/{project.id}/members"

    resp = await test_client.post(url, headers=auth_headers(team_user), json={"email": "newbie@example.com"})
    assert resp.status_code == 201
    invite = resp.json()["invite"]
    assert resp.json()["member"] is None
    assert invite["email"] == "newbie@example.com"
    assert invite["role"] == "member"
    assert invite["code"]

    resp = await test_client.post(url, headers=auth_headers(team_user), json={"email": "newbie@example.com"})
    assert resp.status_code == 409

    resp = await test_client.get(f"/api/v1/projects/{project.id}/invites", headers=auth_headers(team_user))
    assert [i["id"] for i in resp.json()] == [invite["id"]]


async def test_expired_invite_is_replaced(test_client, db_session, team_user, auth_headers, make_project):
    project = make_project(team_user)
    db_session.add(ProjectInvite(
        project_id=project.id, invited_by_id=team_user.id, email="late@example.com",
        role=ProjectRole.MEMBER, code="OLDCODE1", expires_at=datetime.utcnow() - timedelta(days=1),
    ))
    db_session.commit()

    resp = await test_client.post(
        f"/api/v1/projects/{project.id}/members",
        headers=auth_headers(team_user),
        json={"email": "late@example.com"},
    )
    assert resp.status_code == 201
    assert resp.json()["invite"]["code"] != "OLDCODE1"
    db_session.expire_all()
    assert db_session.query(ProjectInvite).count() == 1


async def test_inviting_requires_team_plan(test_client, pro_user, auth_headers, make_project):
    project = make_project(pro_user)
    resp = await test_client.post(
        f"/api/v1/projects/{project.id}/members",
        headers=auth_headers(pro_user),
        json={"email": "someone@example.com"},
    )
    assert resp.status_code == 402
    assert resp.json()["current_tier"] == "pro"
    assert resp.json()["required_tier"] == "team"


async def test_update_role_and_remove(test_client, db_session, team_user, pro_user, free_user, auth_headers, make_project):
    project = make_project(team_user)
    member = ProjectMember(project_id=project.id, user_id=pro_user.id, role=ProjectRole.MEMBER)
    other = ProjectMember(project_id=project.id, user_id=free_user.id, role=ProjectRole.VIEWER)
    db_session.add_all([member, other])
    db_session.commit()

    resp = await test_client.patch(
        f"/api/v1/projects/{project.id}/members/{member.id}",
        headers=auth_headers(pro_user),
        json={"role": "admin"},
    )
    assert resp.status_code == 403

    resp = await test_client.patch(
        f"/api/v1/projects/{project.id}/members/{member.id}",
        headers=auth_headers(team_user),
        json={"role": "admin"},
    )
    assert resp.status_code == 200
    assert resp.json()["role"] == "admin"

    # a viewer may leave but not remove others
    resp = await test_client.delete(f"/api/v1/projects/{project.id}/members/{member.id}", headers=auth_headers(free_user))
    assert resp.status_code == 403
    resp = await test_client.delete(f"/api/v1/projects/{project.id}/members/{other.id}", headers=auth_headers(free_user))
    assert resp.status_code == 204

    resp = await test_client.get(f"/api/v1/projects/{project.id}/members", headers=auth_headers(team_user))
    assert [m["email"] for m in resp.json()] == [pro_user.email]


async def test_cancel_and_resend_invite(test_client, team_user, auth_headers, make_project):
    project = make_project(team_user)
    headers = auth_headers(team_user)
    resp = await test_client.post(
        f"/api/v1/projects/{project.id}/members", headers=headers, json={"email": "newbie@example.com"}
    )
    invite = resp.json()["invite"]

    resp = await test_client.post(f"/api/v1/projects/{project.id}/invites/{invite['id']}/resend", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["code"] != invite["code"]

    resp = await test_client.delete(f"/api/v1/projects/{project.id}/invites/{invite['id']}", headers=headers)
    assert resp.status_code == 204
    resp = await test_client.get(f"/api/v1/projects/{project.id}/invites", headers=headers)
    assert resp.json() == []


async def test_preview_and_accept_invite(test_client, team_user, make_user, free_user, auth_headers, make_project):
    project = make_project(team_user, name="Shared App", description="Our app")
    resp = await test_client.post(
        f"/api/v1/projects/{project.id}/members",
        headers=auth_headers(team_user),
        json={"email": "newbie@example.com", "role": "viewer"},
    )
    code = resp.json()["invite"]["code"]
    newbie = make_user("newbie@example.com", "Newbie")

    resp = await test_client.get(f"/api/v1/invites/preview/{code.lower()}", headers=auth_headers(newbie))
    assert resp.status_code == 200
    preview = resp.json()
    assert preview["project_name"] == "Shared App"
    assert preview["invited_by_name"] == team_user.name
    assert preview["email_matches"] is True

    resp = await test_client.post("/api/v1/invites/accept", headers=auth_headers(free_user), json={"code": code})
    assert resp.status_code == 403

    resp = await test_client.post("/api/v1/invites/accept", headers=auth_headers(newbie), json={"code": code})
    assert resp.status_code == 200
    assert resp.json() == {"project_id": str(project.id), "project_name": "Shared App", "role": "viewer"}

    resp = await test_client.post("/api/v1/invites/accept", headers=auth_headers(newbie), json={"code": code})
    assert resp.status_code == 404

    resp = await test_client.get(f"/api/v1/projects/{project.id}", headers=auth_headers(newbie))
    assert resp.status_code == 200


async def test_accept_when_already_member(test_client, db_session, team_user, pro_user, auth_headers, make_project):
    project = make_project(team_user)
    db_session.add(ProjectMember(project_id=project.id, user_id=pro_user.id, role=ProjectRole.MEMBER))
    db_session.add(ProjectInvite(
        project_id=project.id, invited_by_id=team_user.id, email=pro_user.email,
        role=ProjectRole.ADMIN, code="JOINAGAIN",
    ))
    db_session.commit()

    resp = await test_client.post("/api/v1/invites/accept", headers=auth_headers(pro_user), json={"code": "JOINAGAIN"})
    assert resp.status_code == 409


async def test_invite_preview_errors(test_client, db_session, team_user, auth_headers, make_project):
    project = make_project(team_user)
    db_session.add(ProjectInvite(
        project_id=project.id, invited_by_id=team_user.id, email="late@example.com",
        role=ProjectRole.MEMBER, code="EXPIRED1", expires_at=datetime.utcnow() - timedelta(hours=1),
    ))
    db_session.commit()

    resp = await test_client.get("/api/v1/invites/preview/NOSUCHCODE", headers=auth_headers(team_user))
    assert resp.status_code == 404
    resp = await test_client.get("/api/v1/invites/preview/EXPIRED1", headers=auth_headers(team_user))
    assert resp.status_code == 410
