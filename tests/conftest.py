"""
Shared test fixtures.

In-memory SQLite shared through a StaticPool, the app's ``get_db`` overridden
to use it, and the provider clients replaced by mocks. Tests run as
``production`` so tier gating applies; ``dev_environment`` switches the
override on.
"""

import os
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ["ENVIRONMENT"] = "production"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-tests")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from app.core.config import settings  # noqa: E402
from app.core.security import create_access_token, generate_api_key  # noqa: E402
from app.core.tiers import SubscriptionTier, SubscriptionStatus  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.init_db import init_db  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import User  # noqa: E402
from app.models.project import Project  # noqa: E402


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture()
def db_session():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest_asyncio.fixture()
async def test_client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

@pytest.fixture()
def dev_environment(monkeypatch):
    """Every tier requirement is met"""
    monkeypatch.setattr(settings, "ENVIRONMENT", "development")
    assert settings.tier_override_active


# ---------------------------------------------------------------------------
# Users and projects
# ---------------------------------------------------------------------------

@pytest.fixture()
def make_user(db_session):
    def _make(email="owner@example.com", name="Owner", tier=SubscriptionTier.FREE, status=SubscriptionStatus.ACTIVE):
        user = User(email=email, name=name, subscription_tier=tier, subscription_status=status)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture()
def free_user(make_user):
    return make_user("free@example.com", "Free User", SubscriptionTier.FREE)


@pytest.fixture()
def pro_user(make_user):
    return make_user("pro@example.com", "Pro User", SubscriptionTier.PRO)


@pytest.fixture()
def team_user(make_user):
    return make_user("team@example.com", "Team User", SubscriptionTier.TEAM)


@pytest.fixture()
def auth_headers():
    """``auth_headers(user)`` -> bearer header for that user"""
    def _headers(user):
        token = create_access_token({"sub": user.email}, expires_delta=timedelta(minutes=30))
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture()
def make_project(db_session):
    def _make(owner, name="Demo", **fields):
        project = Project(name=name, owner_id=owner.id, api_key=generate_api_key(), **fields)
        db_session.add(project)
        db_session.commit()
        db_session.refresh(project)
        return project
    return _make


# ---------------------------------------------------------------------------
# Provider clients
# ---------------------------------------------------------------------------

@pytest.fixture()
def provider_client(monkeypatch):
    """Mock returned by ``registry.get_client`` for every provider"""
    client = MagicMock()
    client.list_level = AsyncMock(return_value=[])
    client.create_item = AsyncMock()
    client.send_message = MagicMock(return_value={"success": True})
    calls = []

    def _get_client(name):
        calls.append(name)
        return client

    monkeypatch.setattr("app.integrations.registry.get_client", _get_client)
    client.requested = calls
    return client
