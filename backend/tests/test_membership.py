import uuid

import pytest

from projecthub import models
from projecthub.core.exceptions import Conflict, InvalidArgument, NotFound
from projecthub.db import SessionLocal
from projecthub.schemas.enums import ProjectRole, SystemRole
from projecthub.services import membership as registry

from .utils import seed_project, seed_user


@pytest.fixture()
def team(db):
    admin = seed_user(db, "boss@example.com", SystemRole.ADMIN)
    worker = seed_user(db, "worker@example.com")
    project = seed_project(db, admin)
    return admin, worker, project


def test_owner_membership_is_project_admin(db, team):
    admin, _, project = team
    membership = registry.get_membership(db, project.id, admin.id)
    assert membership.role == ProjectRole.ADMIN.value
    assert membership.added_by_user_id == admin.id
    assert registry.count_members(db, project.id) == 1


def test_add_member(db, team, instant_retry):
    admin, worker, project = team
    membership = registry.add_member(db, project.id, " Worker@Example.com ", "member", admin, instant_retry)

    assert membership.user_id == worker.id
    assert membership.role == ProjectRole.MEMBER.value
    assert membership.added_by_user_id == admin.id
    assert membership.joined_at is not None
    assert sorted(m.user.email for m in registry.list_members(db, project.id)) == [
        "boss@example.com",
        "worker@example.com",
    ]


def test_add_member_twice_conflicts(db, team, instant_retry):
    admin, _, project = team
    registry.add_member(db, project.id, "worker@example.com", "member", admin, instant_retry)

    with pytest.raises(Conflict) as exc:
        registry.add_member(db, project.id, "worker@example.com", "project_admin", admin, instant_retry)
    assert exc.value.message == "User is already a member of this project"
    assert registry.count_members(db, project.id) == 2


@pytest.mark.parametrize(
    "email, role, error, message",
    [
        ("", "member", InvalidArgument, "Email is required"),
        ("worker@example.com", "", InvalidArgument, "Role is required"),
        ("worker@example.com", "owner", InvalidArgument, "Invalid role. Must be one of: admin, project_admin, member"),
        ("ghost@example.com", "member", NotFound, "User with this email does not exist"),
    ],
)
def test_add_member_rejects_bad_input(db, team, instant_retry, email, role, error, message):
    admin, _, project = team
    with pytest.raises(error) as exc:
        registry.add_member(db, project.id, email, role, admin, instant_retry)
    assert exc.value.message == message


def test_add_member_to_missing_project(db, team, instant_retry):
    admin, _, _ = team
    with pytest.raises(NotFound) as exc:
        registry.add_member(db, uuid.uuid4(), "worker@example.com", "member", admin, instant_retry)
    assert exc.value.message == "Project not found"


def test_update_role_keeps_join_metadata(db, team, instant_retry):
    admin, worker, project = team
    added = registry.add_member(db, project.id, "worker@example.com", "member", admin, instant_retry)
    joined_at, added_by, version = added.joined_at, added.added_by_user_id, added.version

    updated = registry.update_member_role(db, project.id, worker.id, "project_admin", instant_retry)

    assert updated.role == ProjectRole.PROJECT_ADMIN.value
    assert updated.joined_at == joined_at
    assert updated.added_by_user_id == added_by
    assert updated.version == version + 1


def test_update_role_of_non_member(db, team, instant_retry):
    _, worker, project = team
    with pytest.raises(NotFound) as exc:
        registry.update_member_role(db, project.id, worker.id, "member", instant_retry)
    assert exc.value.message == "Member not found in this project"


def test_concurrent_role_updates_do_not_lose_writes(db, team, instant_retry, monkeypatch):
    admin, worker, project = team
    registry.add_member(db, project.id, "worker@example.com", "member", admin, instant_retry)

    original = registry._require_membership
    reads = []

    def racing_lookup(session, project_id, user_id):
        membership = original(session, project_id, user_id)
        reads.append(membership.role)
        if len(reads) == 1:
            with SessionLocal() as rival:
                registry.get_membership(rival, project_id, user_id).role = "admin"
                rival.commit()
        return membership

    monkeypatch.setattr(registry, "_require_membership", racing_lookup)
    updated = registry.update_member_role(
        db, project.id, worker.id, "project_admin", instant_retry, sleep=lambda _: None
    )

    # the loser re-read the winner's write before applying its own
    assert reads == ["member", "admin"]
    assert updated.role == ProjectRole.PROJECT_ADMIN.value
    assert updated.version == 3


def test_remove_member_keeps_authored_content(db, team, instant_retry):
    admin, worker, project = team
    registry.add_member(db, project.id, "worker@example.com", "member", admin, instant_retry)
    db.add(models.Task(project_id=project.id, title="Draft", created_by_user_id=worker.id))
    db.add(models.Note(project_id=project.id, title="Idea", content="", created_by_user_id=worker.id))
    db.commit()

    registry.remove_member(db, project.id, worker.id, instant_retry)

    assert registry.get_membership(db, project.id, worker.id) is None
    assert db.query(models.Task).filter_by(created_by_user_id=worker.id).count() == 1
    assert db.query(models.Note).filter_by(created_by_user_id=worker.id).count() == 1

    with pytest.raises(NotFound):
        registry.remove_member(db, project.id, worker.id, instant_retry)
