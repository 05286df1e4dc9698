import uuid
from unittest.mock import MagicMock

import pytest

from projecthub.core.exceptions import (
    Forbidden,
    InvalidArgument,
    NotFound,
    PreconditionFailed,
    PrincipalGone,
    Unauthenticated,
)
from projecthub.core.security import create_access_token
from projecthub.schemas.enums import ProjectRole, SystemRole
from projecthub.services import authorization
from projecthub.services.authorization import (
    RequestContext,
    authenticate,
    check_membership,
    check_project_role,
    check_subtask_update_fields,
    check_system_role,
    extract_token,
    run_guards,
)

from .utils import seed_project, seed_user


class AuditRecorder:
    def __init__(self):
        self.events = []

    def warning(self, event, **kw):
        self.events.append(("warning", event, kw))

    def info(self, event, **kw):
        self.events.append(("info", event, kw))

    def failures(self):
        return [kw for level, event, kw in self.events if event == "authorization_failed"]


@pytest.fixture()
def audit(monkeypatch) -> AuditRecorder:
    recorder = AuditRecorder()
    monkeypatch.setattr(authorization, "logger", recorder)
    return recorder


def _ctx(**kw) -> RequestContext:
    return RequestContext(endpoint="/api/v1/projects/x", method="GET", **kw)


def test_extract_token_prefers_cookie_over_header():
    assert extract_token({"accessToken": "from-cookie"}, "Bearer from-header") == "from-cookie"
    assert extract_token({}, "Bearer from-header") == "from-header"
    assert extract_token({}, "Basic abc") is None
    assert extract_token({}, None) is None


def test_authenticate_without_token_is_logged(db, audit):
    with pytest.raises(Unauthenticated) as exc:
        authenticate(_ctx(), db, None)
    assert exc.value.message == "Unauthorized request"

    [failure] = audit.failures()
    assert failure["user_id"] == "unauthenticated"
    assert failure["status_code"] == 401
    assert failure["endpoint"] == "/api/v1/projects/x"
    assert failure["method"] == "GET"
    assert failure["timestamp"]


def test_authenticate_rejects_bad_token(db, audit):
    with pytest.raises(Unauthenticated) as exc:
        authenticate(_ctx(), db, "garbage")
    assert exc.value.message == "Invalid access token"
    assert len(audit.failures()) == 1


def test_authenticate_token_for_missing_user(db, audit):
    token = create_access_token({"sub": str(uuid.uuid4())})
    with pytest.raises(PrincipalGone):
        authenticate(_ctx(), db, token)


def test_authenticate_populates_principal(db, audit):
    user = seed_user(db, "gate@example.com")
    ctx = authenticate(_ctx(), db, create_access_token({"sub": str(user.id)}))
    assert ctx.principal.id == user.id
    assert ctx.principal_id == str(user.id)
    assert audit.failures() == []


def test_check_system_role(db, audit):
    admin = seed_user(db, "root@example.com", SystemRole.ADMIN)
    member = seed_user(db, "plain@example.com")

    ctx = _ctx(principal=admin)
    assert check_system_role(ctx, [SystemRole.ADMIN]) is ctx
    # success is not audited
    assert audit.events == []

    with pytest.raises(Forbidden) as exc:
        check_system_role(_ctx(principal=member), [SystemRole.ADMIN])
    assert exc.value.message == "Insufficient permissions. Required role: admin"

    with pytest.raises(Unauthenticated):
        check_system_role(_ctx(), [SystemRole.ADMIN])
    assert len(audit.failures()) == 2


def test_check_membership_rejects_malformed_id_before_touching_db(audit):
    db = MagicMock()
    principal = MagicMock(id=uuid.uuid4())
    with pytest.raises(InvalidArgument) as exc:
        check_membership(_ctx(principal=principal), db, "not-a-uuid")
    assert exc.value.status_code == 400
    assert db.mock_calls == []
    assert audit.failures()[0]["status_code"] == 400


def test_check_membership_missing_project_and_non_member(db, audit):
    owner = seed_user(db, "owner@example.com")
    outsider = seed_user(db, "outsider@example.com")
    project = seed_project(db, owner)

    with pytest.raises(NotFound) as exc:
        check_membership(_ctx(principal=owner), db, str(uuid.uuid4()))
    assert exc.value.message == "Project not found"

    with pytest.raises(Forbidden) as exc:
        check_membership(_ctx(principal=outsider), db, str(project.id))
    assert exc.value.message == "Access denied. You are not a member of this project"

    ctx = check_membership(_ctx(principal=owner), db, str(project.id))
    assert ctx.membership.role == ProjectRole.ADMIN.value
    assert ctx.membership.project_id == project.id


def test_check_project_role_requires_membership_first(audit):
    with pytest.raises(PreconditionFailed) as exc:
        check_project_role(_ctx(principal=MagicMock(id=uuid.uuid4())), [ProjectRole.ADMIN])
    assert exc.value.status_code == 500
    assert audit.failures()[0]["status_code"] == 500


def test_check_project_role_logs_success(audit):
    membership = MagicMock(role=ProjectRole.PROJECT_ADMIN.value, project_id=uuid.uuid4())
    ctx = _ctx(principal=MagicMock(id=uuid.uuid4()), membership=membership)

    assert check_project_role(ctx, [ProjectRole.ADMIN, ProjectRole.PROJECT_ADMIN]) is ctx
    assert [event for _, event, _ in audit.events] == ["project_role_authorized"]

    with pytest.raises(Forbidden) as exc:
        check_project_role(ctx, [ProjectRole.ADMIN])
    assert exc.value.message == "Insufficient permissions. Required project role: admin"


def test_check_subtask_update_fields(audit):
    principal = MagicMock(id=uuid.uuid4())
    member_ctx = _ctx(principal=principal, membership=MagicMock(role=ProjectRole.MEMBER.value))
    manager_ctx = _ctx(principal=principal, membership=MagicMock(role=ProjectRole.PROJECT_ADMIN.value))

    assert check_subtask_update_fields(member_ctx, {"is_completed"}) is member_ctx
    with pytest.raises(Forbidden):
        check_subtask_update_fields(member_ctx, {"title", "is_completed"})
    assert check_subtask_update_fields(manager_ctx, {"title", "description"}) is manager_ctx


def test_run_guards_stops_at_first_failure(db, audit):
    calls = []

    def first(ctx):
        calls.append("first")
        return ctx

    def second(ctx):
        calls.append("second")
        raise Forbidden("nope")

    def third(ctx):
        calls.append("third")
        return ctx

    with pytest.raises(Forbidden):
        run_guards(_ctx(), [first, second, third])
    assert calls == ["first", "second"]
