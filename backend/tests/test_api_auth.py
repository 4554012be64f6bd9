"""Integration tests for registration, login and session handling"""

from seo_platform.models.admin_log import AdminLog, AdminLogLevel
from seo_platform.models.rate_limit import RateLimitLog
from seo_platform.models.telemetry import TelemetryEvent

API = "/api/v1"


def test_register_creates_user_workspace_and_session(client):
    response = client.post(f"{API}/auth/register", json={
        "name": "Ada Lovelace",
        "email": "Ada@Example.com",
        "password": "analytical",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "ada@example.com"
    assert "password_hash" not in body["user"]
    assert "session" in response.cookies

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}).json()
    assert me["role"] == "OWNER"
    assert me["plan"] == "FREE"
    assert me["workspace"]["slug"].startswith("ada-lovelace-")


def test_session_cookie_authenticates(client, owner_headers):
    # The client kept the cookie from registration
    response = client.get(f"{API}/auth/me")

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "owner@example.com"


def test_duplicate_registration(client, register):
    register("dup@example.com")

    response = client.post(f"{API}/auth/register", json={"name": "Again", "email": "dup@example.com", "password": "secret123"})

    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


def test_invalid_registration_payload(client):
    response = client.post(f"{API}/auth/register", json={"name": "Short", "email": "not-an-email", "password": "123"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request data"
    assert {tuple(issue["loc"])[-1] for issue in body["issues"]} == {"email", "password"}


def test_password_longer_than_bcrypt_accepts_is_rejected(client):
    response = client.post(f"{API}/auth/register", json={"name": "Long", "email": "long@example.com", "password": "p" * 100})

    assert response.status_code == 400
    assert [tuple(issue["loc"])[-1] for issue in response.json()["issues"]] == ["password"]


def test_password_limit_counts_bytes(client, register):
    # 24 three-byte characters fill the 72 byte limit exactly
    register("multibyte@example.com", password="€" * 24)

    response = client.post(f"{API}/auth/register", json={"name": "Over", "email": "over@example.com", "password": "€" * 25})

    assert response.status_code == 400


def test_overlong_password_at_login_is_a_plain_failure(client, register):
    register("short@example.com")

    response = client.post(f"{API}/auth/login", json={"email": "short@example.com", "password": "p" * 100})

    assert response.status_code == 401


def test_login_success_records_telemetry(client, register, db):
    register("login@example.com", password="correct-horse")

    response = client.post(f"{API}/auth/login", json={"email": "login@example.com", "password": "correct-horse"})

    assert response.status_code == 200
    assert response.json()["access_token"]
    assert db.query(TelemetryEvent).filter(TelemetryEvent.type == "USER_LOGIN").count() == 1


def test_failed_login_is_a_security_event(client, register, db):
    register("victim@example.com")

    response = client.post(f"{API}/auth/login", json={"email": "victim@example.com", "password": "wrong-password"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"
    log = db.query(AdminLog).filter(AdminLog.action == "LOGIN_FAILED").one()
    assert log.level == AdminLogLevel.SECURITY.value
    assert log.log_metadata == {"email": "victim@example.com"}


def test_login_is_rate_limited_per_ip(client, db):
    payload = {"email": "nobody@example.com", "password": "whatever"}

    statuses = [client.post(f"{API}/auth/login", json=payload).status_code for _ in range(5)]
    limited = client.post(f"{API}/auth/login", json=payload)

    assert statuses == [401] * 5
    assert limited.status_code == 429
    assert limited.json()["detail"] == "Rate limit exceeded. Please try again later."
    assert limited.headers["Retry-After"] == "900"
    assert limited.headers["X-RateLimit-Remaining"] == "0"
    assert db.query(RateLimitLog).filter(RateLimitLog.status == 429).count() == 1


def test_requests_without_session_are_rejected(client):
    assert client.get(f"{API}/auth/me").status_code == 401
    assert client.get(f"{API}/projects/", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_logout_clears_cookie(client, owner_headers):
    response = client.post(f"{API}/auth/logout", headers=owner_headers)

    assert response.status_code == 200
    assert client.get(f"{API}/auth/me").status_code == 401
