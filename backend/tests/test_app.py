from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from projecthub.db import get_db
from projecthub.main import app


def test_health(client: TestClient):
    assert client.get("/health").json() == {"status": "ok", "service": "projecthub-backend"}
    assert client.get("/health/ready").json()["status"] == "ready"


def test_unknown_route_uses_error_envelope(client: TestClient):
    resp = client.get("/api/v1/nowhere")
    assert resp.status_code == 404
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Not Found"
    assert "stack" not in body


def test_login_is_rate_limited(client: TestClient):
    payload = {"email": "nobody@example.com", "password": "whatever"}
    statuses = [client.post("/api/v1/auth/login", json=payload).status_code for _ in range(21)]
    assert statuses[:20] == [401] * 20
    assert statuses[20] == 429
    assert client.post("/api/v1/auth/login", json=payload).json()["message"].startswith("Rate limit exceeded")


def test_request_id_is_echoed(client: TestClient):
    generated = client.get("/api/v1/auth/me")
    assert generated.headers["X-Request-ID"]

    forwarded = client.get("/api/v1/auth/me", headers={"X-Request-ID": "proxy-42"})
    assert forwarded.headers["X-Request-ID"] == "proxy-42"


def test_readiness_reports_503_when_database_is_down(client: TestClient):
    class BrokenSession:
        def execute(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))

    app.dependency_overrides[get_db] = lambda: BrokenSession()
    try:
        resp = client.get("/health/ready")
    finally:
        app.dependency_overrides.pop(get_db, None)

    assert resp.status_code == 503
    assert resp.json()["status"] == "not_ready"
