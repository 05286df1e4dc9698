import uuid

from fastapi.testclient import TestClient

from .utils import add_member, create_project, register_and_login


def test_notes_lifecycle(client: TestClient):
    admin_id, admin_headers = register_and_login(client, "admin@x.com", admin=True)
    _, member_headers = register_and_login(client, "a@x.com")
    project_id = create_project(client, admin_headers)
    add_member(client, admin_headers, project_id, "a@x.com")

    created = client.post(
        f"/api/v1/notes/{project_id}", json={"title": " Kickoff ", "content": "agenda"}, headers=admin_headers
    )
    assert created.status_code == 201, created.text
    note = created.json()["data"]
    assert note["title"] == "Kickoff"
    assert note["created_by"]["id"] == admin_id

    listing = client.get(f"/api/v1/notes/{project_id}", headers=member_headers)
    assert [n["id"] for n in listing.json()["data"]] == [note["id"]]

    fetched = client.get(f"/api/v1/notes/{project_id}/n/{note['id']}", headers=member_headers)
    assert fetched.json()["data"]["content"] == "agenda"

    updated = client.put(
        f"/api/v1/notes/{project_id}/n/{note['id']}", json={"content": "minutes"}, headers=admin_headers
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["content"] == "minutes"
    assert updated.json()["data"]["title"] == "Kickoff"

    deleted = client.delete(f"/api/v1/notes/{project_id}/n/{note['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert client.get(f"/api/v1/notes/{project_id}/n/{note['id']}", headers=member_headers).status_code == 404


def test_members_cannot_write_notes(client: TestClient):
    _, admin_headers = register_and_login(client, "admin@x.com", admin=True)
    _, member_headers = register_and_login(client, "a@x.com")
    project_id = create_project(client, admin_headers)
    add_member(client, admin_headers, project_id, "a@x.com")

    resp = client.post(f"/api/v1/notes/{project_id}", json={"title": "Mine"}, headers=member_headers)
    assert resp.status_code == 403


def test_note_for_missing_project(client: TestClient):
    _, admin_headers = register_and_login(client, "admin@x.com", admin=True)
    resp = client.post(f"/api/v1/notes/{uuid.uuid4()}", json={"title": "Lost"}, headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Project not found"

    malformed = client.post("/api/v1/notes/abc", json={"title": "Lost"}, headers=admin_headers)
    assert malformed.status_code == 400
