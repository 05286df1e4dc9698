import uuid
from datetime import timedelta

from fastapi.testclient import TestClient

from projecthub import models
from projecthub.core.security import create_access_token
from projecthub.db import SessionLocal
from projecthub.services.identity import ensure_admin

from .utils import PASSWORD, get_token, register_user


def test_register_returns_envelope(client: TestClient):
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": " Alice@Example.com ", "username": "alice", "password": PASSWORD},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["statusCode"] == 201
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    assert body["data"]["email"] == "alice@example.com"
    assert body["data"]["role"] == "member"
    assert "hashed_password" not in body["data"]


def test_register_duplicate_email_or_username_conflicts(client: TestClient):
    register_user(client, "bob@example.com", "bob")

    same_email = client.post(
        "/api/v1/auth/register",
        json={"email": "bob@example.com", "username": "bobby", "password": PASSWORD},
    )
    assert same_email.status_code == 409
    assert same_email.json()["success"] is False

    same_username = client.post(
        "/api/v1/auth/register",
        json={"email": "other@example.com", "username": "bob", "password": PASSWORD},
    )
    assert same_username.status_code == 409


def test_register_validation_error_is_400(client: TestClient):
    resp = client.post("/api/v1/auth/register", json={"email": "nope", "username": "x", "password": PASSWORD})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["errors"][0]["field"] == "email"


def test_login_sets_cookie_and_cookie_authenticates(client: TestClient):
    register_user(client, "carol@example.com", "carol")

    resp = client.post("/api/v1/auth/login", json={"username": "carol", "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["data"]["access_token"]
    assert "accessToken" in resp.cookies

    me = client.get("/api/v1/auth/me")
    assert me.status_code == 200
    assert me.json()["data"]["username"] == "carol"

    logout = client.post("/api/v1/auth/logout")
    assert logout.status_code == 200
    client.cookies.clear()
    assert client.get("/api/v1/auth/me").status_code == 401


def test_login_with_wrong_password_is_401(client: TestClient):
    register_user(client, "dave@example.com", "dave")
    resp = client.post("/api/v1/auth/login", json={"email": "dave@example.com", "password": "wrong-pass"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Incorrect email or password", "errors": []}


def test_me_requires_credentials(client: TestClient):
    resp = client.get("/api/v1/auth/me")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Unauthorized request"


def test_me_rejects_garbage_and_expired_tokens(client: TestClient):
    garbage = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert garbage.status_code == 401
    assert garbage.json()["message"] == "Invalid access token"

    user_id = register_user(client, "erin@example.com", "erin")
    expired = create_access_token({"sub": user_id}, expires_delta=timedelta(minutes=-1))
    resp = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401


def test_token_for_deleted_user_is_rejected(client: TestClient):
    user_id = register_user(client, "frank@example.com", "frank")
    token = get_token(client, "frank@example.com")

    with SessionLocal() as db:
        db.delete(db.get(models.User, uuid.UUID(user_id)))
        db.commit()

    resp = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid access token"


def test_ensure_admin_creates_or_promotes(client: TestClient):
    user_id = register_user(client, "grace@example.com", "grace")
    with SessionLocal() as db:
        promoted = ensure_admin(db, "grace@example.com", "grace", "ignored")
        assert str(promoted.id) == user_id
        assert promoted.role == "admin"

        created = ensure_admin(db, "Root@Example.com", "Root", PASSWORD)
        assert created.email == "root@example.com"
        assert created.role == "admin"

    token = get_token(client, "root@example.com")
    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["data"]["role"] == "admin"
