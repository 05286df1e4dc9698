from __future__ import annotations

import uuid
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from projecthub import models
from projecthub.core.exceptions import NotFound
from projecthub.core.logging import get_logger
from projecthub.schemas import ProjectCreate, ProjectUpdate
from projecthub.services import storage
from projecthub.services.membership import list_members, new_owner_membership
from projecthub.services.transactions import (
    CascadeStep,
    RetryPolicy,
    atomic,
    retry_operation,
    run_cascade,
    update_with_optimistic_lock,
)

logger = get_logger(__name__)


def _project_task_ids(project_id: uuid.UUID):
    return select(models.Task.id).where(models.Task.project_id == project_id)


# Children first: nothing is deleted while something still references it.
PROJECT_CASCADE: list[CascadeStep] = [
    CascadeStep("subtasks", models.Subtask, lambda pid: models.Subtask.task_id.in_(_project_task_ids(pid))),
    CascadeStep(
        "attachments",
        models.TaskAttachment,
        lambda pid: models.TaskAttachment.task_id.in_(_project_task_ids(pid)),
    ),
    CascadeStep("tasks", models.Task, lambda pid: models.Task.project_id == pid),
    CascadeStep("notes", models.Note, lambda pid: models.Note.project_id == pid),
    CascadeStep("memberships", models.ProjectMember, lambda pid: models.ProjectMember.project_id == pid),
    CascadeStep("project", models.Project, lambda pid: models.Project.id == pid),
]


def get_project_or_404(db: Session, project_id: uuid.UUID) -> models.Project:
    project = db.get(models.Project, project_id)
    if project is None:
        raise NotFound("Project not found")
    return project


def create_project(
    db: Session,
    payload: ProjectCreate,
    owner: models.User,
    policy: Optional[RetryPolicy] = None,
) -> tuple[models.Project, models.ProjectMember]:
    """Create the project and its owner's admin membership in one transaction."""

    def _attempt() -> tuple[models.Project, models.ProjectMember]:
        with atomic(db):
            project = models.Project(
                name=payload.name,
                description=payload.description or "",
                owner_user_id=owner.id,
            )
            db.add(project)
            db.flush()
            membership = new_owner_membership(project, owner)
            db.add(membership)
            db.flush()
        db.refresh(project)
        db.refresh(membership)
        return project, membership

    project, membership = retry_operation(_attempt, policy, db=db)
    logger.info("project_created", project_id=str(project.id), owner_id=str(owner.id))
    return project, membership


def update_project(
    db: Session,
    project_id: uuid.UUID,
    payload: ProjectUpdate,
    policy: Optional[RetryPolicy] = None,
) -> models.Project:
    changes = payload.model_dump(exclude_unset=True)

    def _apply(project: models.Project) -> None:
        for field, value in changes.items():
            setattr(project, field, value if value is not None else "")

    project = update_with_optimistic_lock(db, lambda: get_project_or_404(db, project_id), _apply, policy)
    logger.info(
        "project_updated",
        project_id=str(project_id),
        fields=sorted(changes),
        version=project.version,
    )
    return project


def _project_attachment_paths(db: Session, project_id: uuid.UUID) -> list[str]:
    rows = (
        db.query(models.TaskAttachment.local_path)
        .filter(models.TaskAttachment.task_id.in_(_project_task_ids(project_id)))
        .all()
    )
    return [path for (path,) in rows]


def delete_project(
    db: Session,
    project_id: uuid.UUID,
    steps: Sequence[CascadeStep] = PROJECT_CASCADE,
    policy: Optional[RetryPolicy] = None,
) -> dict[str, int]:
    """Delete the project and everything it owns, all or nothing."""
    get_project_or_404(db, project_id)
    attachment_paths = _project_attachment_paths(db, project_id)

    deleted = retry_operation(lambda: run_cascade(db, steps, project_id), policy, db=db)

    # Files cannot take part in the transaction; remove them once the rows are gone.
    storage.remove_files(attachment_paths)
    logger.info("project_deleted", project_id=str(project_id), **deleted)
    return deleted


def list_user_projects(db: Session, user: models.User) -> list[dict]:
    memberships = (
        db.query(models.ProjectMember)
        .options(joinedload(models.ProjectMember.project))
        .filter(models.ProjectMember.user_id == user.id)
        .order_by(models.ProjectMember.joined_at.desc())
        .all()
    )
    if not memberships:
        return []

    project_ids = [m.project_id for m in memberships]
    count_rows = (
        db.query(models.ProjectMember.project_id, func.count(models.ProjectMember.id))
        .filter(models.ProjectMember.project_id.in_(project_ids))
        .group_by(models.ProjectMember.project_id)
        .all()
    )
    member_counts = {project_id: count for project_id, count in count_rows}

    items = []
    for membership in memberships:
        project = membership.project
        items.append(
            {
                "id": project.id,
                "name": project.name,
                "description": project.description,
                "owner_user_id": project.owner_user_id,
                "created_at": project.created_at,
                "updated_at": project.updated_at,
                "version": project.version,
                "role": membership.role,
                "member_count": member_counts.get(project.id, 0),
                "joined_at": membership.joined_at,
            }
        )
    return items


def get_project_detail(db: Session, project_id: uuid.UUID, membership: models.ProjectMember) -> dict:
    project = (
        db.query(models.Project)
        .options(joinedload(models.Project.owner))
        .filter(models.Project.id == project_id)
        .first()
    )
    if project is None:
        raise NotFound("Project not found")

    members = list_members(db, project_id)
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "owner_user_id": project.owner_user_id,
        "owner": project.owner,
        "created_at": project.created_at,
        "updated_at": project.updated_at,
        "version": project.version,
        "user_role": membership.role,
        "members": members,
        "member_count": len(members),
    }
