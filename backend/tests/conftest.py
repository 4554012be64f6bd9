"""
Test configuration and fixtures for the test suite
"""

import os

# Must be set before seo_platform.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SECRET_ENCRYPTION_KEY"] = "test-encryption-secret"

import pytest
from fastapi.testclient import TestClient

import seo_platform.models  # noqa: F401
from seo_platform.core.config import settings
from seo_platform.core.database import SessionLocal
from seo_platform.core.database_utils import create_all_tables, drop_all_tables
from seo_platform.main import app
from seo_platform.models.subscription import Subscription
from seo_platform.models.user import User
from seo_platform.services.workspace_service import create_workspace_for_user

API = "/api/v1"

PLATFORM_SETTINGS = (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
    "SERP_API_KEY",
    "PAGESPEED_API_KEY",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "STRIPE_PRO_PRICE_ID",
    "STRIPE_AGENCY_PRICE_ID",
    "CRON_SECRET",
    "SUPER_ADMIN_EMAIL",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """No platform keys unless a test sets them"""
    for name in PLATFORM_SETTINGS:
        monkeypatch.setattr(settings, name, None)
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "DASH_ALLOWED_ORIGINS", [])


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test"""
    create_all_tables()
    yield
    drop_all_tables()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register(client):
    """Sign up a user through the API and return bearer auth headers"""

    def _register(email: str, name: str = "Test User", password: str = "secret123") -> dict:
        response = client.post(f"{API}/auth/register", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _register


@pytest.fixture
def owner_headers(register):
    return register("owner@example.com", name="Olive Owner")


@pytest.fixture
def workspace_id(client, owner_headers):
    return client.get(f"{API}/auth/me", headers=owner_headers).json()["workspace"]["id"]


@pytest.fixture
def set_plan(db):
    """Put the workspace owned by a user on a plan with an active subscription"""

    def _set_plan(email: str, plan: str, status: str = "active") -> None:
        user = db.query(User).filter(User.email == email).one()
        subscription = db.query(Subscription).filter(Subscription.user_id == user.id).one()
        subscription.plan = plan
        subscription.status = status
        db.commit()

    return _set_plan


@pytest.fixture
def workspace(db):
    """A workspace created directly in the database, for service-level tests"""
    user = User(name="Service User", email="service@example.com", password_hash=None)
    db.add(user)
    db.commit()
    return create_workspace_for_user(db, user)
