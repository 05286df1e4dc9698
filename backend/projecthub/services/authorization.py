"""
Authorization gate.

A request passes through a chain of guards. Each guard takes the current
``RequestContext`` and either returns a new, further populated context or
raises an ``AuthorizationError``:

    authenticate -> check_system_role -> check_membership -> check_project_role

``check_project_role`` relies on ``check_membership`` having populated
``ctx.membership``. Every failure is written to the audit log.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional, Sequence

import jwt
from sqlalchemy.orm import Session

from projecthub import models
from projecthub.core.exceptions import (
    AuthorizationError,
    Forbidden,
    InvalidArgument,
    NotFound,
    PreconditionFailed,
    PrincipalGone,
    Unauthenticated,
)
from projecthub.core.identifiers import parse_identifier
from projecthub.core.logging import get_audit_logger
from projecthub.core.security import decode_access_token
from projecthub.schemas.enums import TASK_MANAGER_ROLES, ProjectRole, SystemRole
from projecthub.services import identity
from projecthub.services.membership import get_membership

logger = get_audit_logger()

ACCESS_TOKEN_COOKIE = "accessToken"


@dataclass(frozen=True)
class RequestContext:
    endpoint: str
    method: str
    principal: Optional[models.User] = None
    membership: Optional[models.ProjectMember] = None

    @property
    def principal_id(self) -> str:
        if self.principal is None:
            return "unauthenticated"
        return str(self.principal.id)


Guard = Callable[[RequestContext], RequestContext]


def log_authorization_failure(ctx: RequestContext, error: AuthorizationError) -> None:
    logger.warning(
        "authorization_failed",
        reason=error.message,
        user_id=ctx.principal_id,
        endpoint=ctx.endpoint,
        method=ctx.method,
        status_code=error.status_code,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


def _fail(ctx: RequestContext, error: AuthorizationError) -> None:
    log_authorization_failure(ctx, error)
    raise error


def _role_values(roles: Iterable[Any]) -> list[str]:
    return [getattr(role, "value", role) for role in roles]


def extract_token(cookies: dict[str, str], authorization: Optional[str]) -> Optional[str]:
    """Bearer credential from the access token cookie or the ``Authorization`` header."""
    token = cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        return token
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()
    return None


def authenticate(ctx: RequestContext, db: Session, token: Optional[str]) -> RequestContext:
    if not token:
        _fail(ctx, Unauthenticated("Unauthorized request"))

    try:
        payload = decode_access_token(token)
        user_id = uuid.UUID(str(payload["sub"]))
    except (jwt.PyJWTError, KeyError, ValueError):
        _fail(ctx, Unauthenticated("Invalid access token"))

    user = identity.find_by_id(db, user_id)
    if user is None or not user.is_active:
        _fail(ctx, PrincipalGone("Invalid access token"))

    return replace(ctx, principal=user)


def check_system_role(ctx: RequestContext, allowed: Sequence[SystemRole]) -> RequestContext:
    if ctx.principal is None:
        _fail(ctx, Unauthenticated("Unauthorized request"))

    role = ctx.principal.role
    if not role:
        _fail(ctx, Forbidden("User role not defined"))

    allowed_values = _role_values(allowed)
    if role not in allowed_values:
        _fail(ctx, Forbidden(f"Insufficient permissions. Required role: {' or '.join(allowed_values)}"))

    return ctx


def check_membership(ctx: RequestContext, db: Session, project_id: Any) -> RequestContext:
    if ctx.principal is None:
        _fail(ctx, Unauthenticated("Unauthorized request"))

    try:
        project_uuid = parse_identifier(project_id, "Project ID")
    except InvalidArgument as exc:
        _fail(ctx, exc)

    project = db.get(models.Project, project_uuid)
    if project is None:
        _fail(ctx, NotFound("Project not found"))

    membership = get_membership(db, project_uuid, ctx.principal.id)
    if membership is None:
        _fail(ctx, Forbidden("Access denied. You are not a member of this project"))

    return replace(ctx, membership=membership)


def check_project_role(ctx: RequestContext, allowed: Sequence[ProjectRole]) -> RequestContext:
    if ctx.membership is None:
        _fail(ctx, PreconditionFailed("Project membership validation required before role check"))

    role = ctx.membership.role
    if not role:
        _fail(ctx, Forbidden("Project role not defined"))

    allowed_values = _role_values(allowed)
    if role not in allowed_values:
        _fail(
            ctx,
            Forbidden(f"Insufficient permissions. Required project role: {' or '.join(allowed_values)}"),
        )

    logger.info(
        "project_role_authorized",
        user_id=ctx.principal_id,
        project_id=str(ctx.membership.project_id),
        role=role,
        endpoint=ctx.endpoint,
        method=ctx.method,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return ctx


def run_guards(ctx: RequestContext, guards: Iterable[Guard]) -> RequestContext:
    for guard in guards:
        ctx = guard(ctx)
    return ctx


# Fields a plain member may change on a subtask
MEMBER_EDITABLE_SUBTASK_FIELDS = frozenset({"is_completed"})


def check_subtask_update_fields(ctx: RequestContext, fields: Iterable[str]) -> RequestContext:
    """Plain members may only toggle completion; admins and project admins may edit everything."""
    if ctx.membership is None:
        _fail(ctx, PreconditionFailed("Project membership validation required before role check"))

    if ctx.membership.role == ProjectRole.MEMBER.value:
        restricted = sorted(set(fields) - MEMBER_EDITABLE_SUBTASK_FIELDS)
        if restricted:
            _fail(ctx, Forbidden("Members can only update the completion status of subtasks"))
    elif ctx.membership.role not in _role_values(TASK_MANAGER_ROLES):
        _fail(ctx, Forbidden("Project role not defined"))
    return ctx
