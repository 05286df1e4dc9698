from __future__ import annotations

import uuid
from typing import Optional, Sequence

from fastapi import UploadFile
from sqlalchemy.orm import Session, joinedload

from projecthub import models
from projecthub.core.exceptions import InvalidArgument, NotFound
from projecthub.core.logging import get_logger
from projecthub.core.settings import settings
from projecthub.schemas import SubtaskCreate, SubtaskUpdate, TaskCreate, TaskUpdate
from projecthub.schemas.enums import TaskStatus
from projecthub.services import identity, storage
from projecthub.services.transactions import CascadeStep, atomic, run_cascade

logger = get_logger(__name__)

VALID_TASK_STATUSES = [s.value for s in TaskStatus]

TASK_CASCADE: list[CascadeStep] = [
    CascadeStep("subtasks", models.Subtask, lambda tid: models.Subtask.task_id == tid),
    CascadeStep("attachments", models.TaskAttachment, lambda tid: models.TaskAttachment.task_id == tid),
    CascadeStep("task", models.Task, lambda tid: models.Task.id == tid),
]


def _task_query(db: Session):
    return db.query(models.Task).options(
        joinedload(models.Task.assignee),
        joinedload(models.Task.created_by),
        joinedload(models.Task.attachments),
    )


def get_task_or_404(db: Session, project_id: uuid.UUID, task_id: uuid.UUID) -> models.Task:
    task = (
        _task_query(db)
        .filter(models.Task.id == task_id, models.Task.project_id == project_id)
        .first()
    )
    if task is None:
        raise NotFound("Task not found")
    return task


def _ensure_assignee(db: Session, assignee_id: Optional[uuid.UUID]) -> None:
    if assignee_id is not None and identity.find_by_id(db, assignee_id) is None:
        raise NotFound("Assignee user not found")


def _parse_status(value: str) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise InvalidArgument(f"Invalid status. Must be one of: {', '.join(VALID_TASK_STATUSES)}") from None


def create_task(db: Session, project_id: uuid.UUID, payload: TaskCreate, creator: models.User) -> models.Task:
    _ensure_assignee(db, payload.assignee_user_id)
    task = models.Task(
        project_id=project_id,
        title=payload.title,
        description=payload.description or "",
        assignee_user_id=payload.assignee_user_id,
        status=TaskStatus.TODO.value,
        created_by_user_id=creator.id,
    )
    db.add(task)
    db.commit()
    logger.info("task_created", project_id=str(project_id), task_id=str(task.id))
    return get_task_or_404(db, project_id, task.id)


def list_tasks(db: Session, project_id: uuid.UUID) -> list[models.Task]:
    return (
        _task_query(db)
        .filter(models.Task.project_id == project_id)
        .order_by(models.Task.created_at.desc())
        .all()
    )


def list_subtasks(db: Session, task_id: uuid.UUID) -> list[models.Subtask]:
    return (
        db.query(models.Subtask)
        .options(joinedload(models.Subtask.created_by))
        .filter(models.Subtask.task_id == task_id)
        .order_by(models.Subtask.created_at.asc())
        .all()
    )


def update_task(db: Session, project_id: uuid.UUID, task_id: uuid.UUID, payload: TaskUpdate) -> models.Task:
    task = get_task_or_404(db, project_id, task_id)
    changes = payload.model_dump(exclude_unset=True)

    if "assignee_user_id" in changes:
        _ensure_assignee(db, changes["assignee_user_id"])
    if "status" in changes:
        if changes["status"] is None:
            raise InvalidArgument("Status must not be null")
        changes["status"] = _parse_status(changes["status"]).value
    if "description" in changes and changes["description"] is None:
        changes["description"] = ""

    for field, value in changes.items():
        setattr(task, field, value)
    db.commit()
    logger.info("task_updated", task_id=str(task_id), fields=sorted(changes))
    return get_task_or_404(db, project_id, task_id)


def delete_task(db: Session, project_id: uuid.UUID, task_id: uuid.UUID) -> dict[str, int]:
    task = get_task_or_404(db, project_id, task_id)
    attachment_paths = [a.local_path for a in task.attachments]
    deleted = run_cascade(db, TASK_CASCADE, task_id)
    storage.remove_files(attachment_paths)
    logger.info("task_deleted", task_id=str(task_id), **deleted)
    return deleted


def create_subtask(
    db: Session,
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    payload: SubtaskCreate,
    creator: models.User,
) -> models.Subtask:
    get_task_or_404(db, project_id, task_id)
    subtask = models.Subtask(
        task_id=task_id,
        title=payload.title,
        description=payload.description or "",
        is_completed=False,
        created_by_user_id=creator.id,
    )
    db.add(subtask)
    db.commit()
    db.refresh(subtask)
    return subtask


def get_subtask_or_404(db: Session, project_id: uuid.UUID, subtask_id: uuid.UUID) -> models.Subtask:
    subtask = (
        db.query(models.Subtask)
        .options(joinedload(models.Subtask.task), joinedload(models.Subtask.created_by))
        .filter(models.Subtask.id == subtask_id)
        .first()
    )
    if subtask is None:
        raise NotFound("Subtask not found")
    if subtask.task.project_id != project_id:
        raise NotFound("Subtask not found in this project")
    return subtask


def update_subtask(
    db: Session, project_id: uuid.UUID, subtask_id: uuid.UUID, payload: SubtaskUpdate
) -> models.Subtask:
    """Apply the fields present in ``payload``; role checks happen before this is called."""
    subtask = get_subtask_or_404(db, project_id, subtask_id)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise InvalidArgument("Request body must contain at least one field to update")
    if "is_completed" in changes and changes["is_completed"] is None:
        raise InvalidArgument("isCompleted must be a boolean")
    if "description" in changes and changes["description"] is None:
        changes["description"] = ""

    for field, value in changes.items():
        setattr(subtask, field, value)
    db.commit()
    db.refresh(subtask)
    return subtask


def delete_subtask(db: Session, project_id: uuid.UUID, subtask_id: uuid.UUID) -> None:
    subtask = get_subtask_or_404(db, project_id, subtask_id)
    db.delete(subtask)
    db.commit()


def add_attachments(
    db: Session, project_id: uuid.UUID, task_id: uuid.UUID, files: Sequence[UploadFile]
) -> models.Task:
    get_task_or_404(db, project_id, task_id)
    if not files:
        raise InvalidArgument("At least one file is required")
    if len(files) > settings.max_attachments_per_upload:
        raise InvalidArgument(f"At most {settings.max_attachments_per_upload} files can be uploaded at once")

    saved: list[dict] = []
    try:
        for upload in files:
            saved.append(storage.save_upload(task_id, upload))
        with atomic(db):
            for meta in saved:
                db.add(models.TaskAttachment(task_id=task_id, **meta))
    except Exception:
        storage.remove_files(meta["local_path"] for meta in saved)
        raise

    logger.info("attachments_added", task_id=str(task_id), count=len(saved))
    return get_task_or_404(db, project_id, task_id)


def delete_attachment(
    db: Session, project_id: uuid.UUID, task_id: uuid.UUID, attachment_id: uuid.UUID
) -> None:
    get_task_or_404(db, project_id, task_id)
    attachment = (
        db.query(models.TaskAttachment)
        .filter(models.TaskAttachment.id == attachment_id, models.TaskAttachment.task_id == task_id)
        .first()
    )
    if attachment is None:
        raise NotFound("Attachment not found")
    local_path = attachment.local_path
    db.delete(attachment)
    db.commit()
    storage.remove_files([local_path])
