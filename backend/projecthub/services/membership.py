"""
Membership registry: the single source of truth for a user's role inside a project.

At most one membership exists per (project, user). Removing a membership
never touches the tasks, subtasks or notes the user authored.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session, joinedload

from projecthub import models
from projecthub.core.exceptions import Conflict, InvalidArgument, NotFound
from projecthub.core.logging import get_logger
from projecthub.schemas.enums import ProjectRole
from projecthub.services import identity
from projecthub.services.transactions import RetryPolicy, retry_operation, update_with_optimistic_lock

logger = get_logger(__name__)

VALID_PROJECT_ROLES = [role.value for role in ProjectRole]


def parse_project_role(value: Any) -> ProjectRole:
    if value is None or value == "":
        raise InvalidArgument("Role is required")
    try:
        return ProjectRole(value)
    except ValueError:
        raise InvalidArgument(
            f"Invalid role. Must be one of: {', '.join(VALID_PROJECT_ROLES)}",
            errors=[{"field": "role", "message": f"'{value}' is not a valid project role"}],
        ) from None


def get_membership(db: Session, project_id: uuid.UUID, user_id: uuid.UUID) -> Optional[models.ProjectMember]:
    return (
        db.query(models.ProjectMember)
        .filter(
            models.ProjectMember.project_id == project_id,
            models.ProjectMember.user_id == user_id,
        )
        .first()
    )


def _require_membership(db: Session, project_id: uuid.UUID, user_id: uuid.UUID) -> models.ProjectMember:
    membership = get_membership(db, project_id, user_id)
    if membership is None:
        raise NotFound("Member not found in this project")
    return membership


def list_members(db: Session, project_id: uuid.UUID) -> list[models.ProjectMember]:
    return (
        db.query(models.ProjectMember)
        .options(joinedload(models.ProjectMember.user), joinedload(models.ProjectMember.added_by))
        .filter(models.ProjectMember.project_id == project_id)
        .order_by(models.ProjectMember.joined_at.asc())
        .all()
    )


def count_members(db: Session, project_id: uuid.UUID) -> int:
    return db.query(models.ProjectMember).filter(models.ProjectMember.project_id == project_id).count()


def new_owner_membership(project: models.Project, owner: models.User) -> models.ProjectMember:
    """Membership granted to a project's creator; written in the same transaction as the project."""
    return models.ProjectMember(
        project_id=project.id,
        user_id=owner.id,
        role=ProjectRole.ADMIN.value,
        added_by_user_id=owner.id,
    )


def add_member(
    db: Session,
    project_id: uuid.UUID,
    email: str,
    role: Any,
    added_by: models.User,
    policy: Optional[RetryPolicy] = None,
) -> models.ProjectMember:
    if not email or not email.strip():
        raise InvalidArgument("Email is required")
    project_role = parse_project_role(role)

    def _attempt() -> models.ProjectMember:
        if db.get(models.Project, project_id) is None:
            raise NotFound("Project not found")

        user = identity.find_by_email_or_username(db, email=email)
        if user is None:
            raise NotFound("User with this email does not exist")

        if get_membership(db, project_id, user.id) is not None:
            raise Conflict("User is already a member of this project")

        membership = models.ProjectMember(
            project_id=project_id,
            user_id=user.id,
            role=project_role.value,
            added_by_user_id=added_by.id,
        )
        db.add(membership)
        db.commit()
        db.refresh(membership)
        return membership

    # A concurrent insert of the same pair fails on the unique constraint;
    # the retry re-reads and reports Conflict.
    membership = retry_operation(_attempt, policy, db=db)
    logger.info(
        "member_added",
        project_id=str(project_id),
        user_id=str(membership.user_id),
        role=membership.role,
        added_by=str(added_by.id),
    )
    return membership


def update_member_role(
    db: Session,
    project_id: uuid.UUID,
    user_id: uuid.UUID,
    role: Any,
    policy: Optional[RetryPolicy] = None,
    *,
    sleep: Callable[[float], Any] = time.sleep,
) -> models.ProjectMember:
    """Change only the role; ``joined_at`` and ``added_by`` are kept."""
    project_role = parse_project_role(role)

    def _set_role(membership: models.ProjectMember) -> None:
        membership.role = project_role.value

    membership = update_with_optimistic_lock(
        db,
        lambda: _require_membership(db, project_id, user_id),
        _set_role,
        policy,
        sleep=sleep,
    )
    logger.info(
        "member_role_updated",
        project_id=str(project_id),
        user_id=str(user_id),
        role=membership.role,
        version=membership.version,
    )
    return membership


def remove_member(
    db: Session,
    project_id: uuid.UUID,
    user_id: uuid.UUID,
    policy: Optional[RetryPolicy] = None,
) -> None:
    def _attempt() -> None:
        membership = _require_membership(db, project_id, user_id)
        db.delete(membership)
        db.commit()

    retry_operation(_attempt, policy, db=db)
    logger.info("member_removed", project_id=str(project_id), user_id=str(user_id))
