import uuid

from fastapi.testclient import TestClient

from projecthub import models
from projecthub.core.security import hash_password
from projecthub.db import SessionLocal
from projecthub.schemas.enums import ProjectRole, SystemRole

PASSWORD = "secret123"


def register_user(client: TestClient, email: str, username: str | None = None, password: str = PASSWORD) -> str:
    username = username or email.split("@")[0]
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": email, "username": username, "full_name": "User", "password": password},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["id"]


def get_token(client: TestClient, email: str, password: str = PASSWORD) -> str:
    token_resp = client.post(
        "/api/v1/auth/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert token_resp.status_code == 200, token_resp.text
    return token_resp.json()["access_token"]


def promote_to_admin(user_id: str) -> None:
    with SessionLocal() as db:
        user = db.get(models.User, uuid.UUID(user_id))
        user.role = SystemRole.ADMIN.value
        db.commit()


def register_and_login(client: TestClient, email: str, *, admin: bool = False) -> tuple[str, dict]:
    user_id = register_user(client, email)
    if admin:
        promote_to_admin(user_id)
    return user_id, {"Authorization": f"Bearer {get_token(client, email)}"}


def create_project(client: TestClient, headers: dict, name: str = "Site Redesign") -> str:
    resp = client.post("/api/v1/projects", json={"name": name, "description": "desc"}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["project"]["id"]


def add_member(client: TestClient, headers: dict, project_id: str, email: str, role: str = "member"):
    return client.post(
        f"/api/v1/projects/{project_id}/members",
        json={"email": email, "role": role},
        headers=headers,
    )


def create_task(client: TestClient, headers: dict, project_id: str, title: str = "Wireframes") -> str:
    resp = client.post(f"/api/v1/tasks/{project_id}", json={"title": title}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["id"]


def create_subtask(client: TestClient, headers: dict, project_id: str, task_id: str, title: str = "Header") -> str:
    resp = client.post(
        f"/api/v1/tasks/{project_id}/t/{task_id}/subtasks",
        json={"title": title, "description": "first pass"},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["id"]


def seed_user(db, email: str, role: SystemRole = SystemRole.MEMBER) -> models.User:
    user = models.User(
        email=email,
        username=email.split("@")[0],
        hashed_password=hash_password(PASSWORD),
        role=role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def seed_project(db, owner: models.User, name: str = "Seeded") -> models.Project:
    project = models.Project(name=name, description="", owner_user_id=owner.id)
    db.add(project)
    db.flush()
    db.add(
        models.ProjectMember(
            project_id=project.id,
            user_id=owner.id,
            role=ProjectRole.ADMIN.value,
            added_by_user_id=owner.id,
        )
    )
    db.commit()
    db.refresh(project)
    return project
