"""Token handling, Google sign-in processing and the current user."""

import pytest

from app.core.security import verify_token
from app.models.user import User
from app.services.auth_service import AuthService


async def test_refresh_issues_new_token(test_client, free_user, auth_headers):
    resp = await test_client.post("/api/v1/auth/refresh", headers=auth_headers(free_user))
    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == free_user.email
    assert verify_token(data["access_token"]) == free_user.email


async def test_invalid_token_rejected(test_client):
    resp = await test_client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


async def test_token_for_deleted_user_rejected(test_client, db_session, free_user, auth_headers):
    headers = auth_headers(free_user)
    db_session.delete(free_user)
    db_session.commit()
    resp = await test_client.get("/api/v1/users/me", headers=headers)
    assert resp.status_code == 401


async def test_google_login_without_credentials(test_client):
    resp = await test_client.get("/api/v1/auth/google/login")
    assert resp.status_code == 500


async def test_update_me(test_client, free_user, auth_headers):
    resp = await test_client.patch("/api/v1/users/me", headers=auth_headers(free_user), json={"name": "Renamed"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"
    assert resp.json()["subscription_tier"] == "free"

    resp = await test_client.patch("/api/v1/users/me", headers=auth_headers(free_user), json={"name": ""})
    assert resp.status_code == 422


async def test_process_google_user_creates_then_updates(db_session):
    token = await AuthService.process_google_user(
        db_session, {"email": "New.Person@Example.com", "name": "New Person", "picture": "https://img/1.png"}
    )
    assert token.user.email == "new.person@example.com"
    assert token.user.subscription_tier == "free"

    again = await AuthService.process_google_user(db_session, {"email": "new.person@example.com", "name": None})
    assert again.user.id == token.user.id
    assert again.user.name == "New Person"
    assert again.user.profile_image == "https://img/1.png"
    assert db_session.query(User).count() == 1


async def test_process_google_user_rejects_bad_payload(db_session):
    with pytest.raises(ValueError):
        await AuthService.process_google_user(db_session, {"name": "No Email"})
