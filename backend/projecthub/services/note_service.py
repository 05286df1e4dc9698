from __future__ import annotations

import uuid

from sqlalchemy.orm import Session, joinedload

from projecthub import models
from projecthub.core.exceptions import NotFound
from projecthub.schemas import NoteCreate, NoteUpdate


def get_note_or_404(db: Session, project_id: uuid.UUID, note_id: uuid.UUID) -> models.Note:
    note = (
        db.query(models.Note)
        .options(joinedload(models.Note.created_by))
        .filter(models.Note.id == note_id, models.Note.project_id == project_id)
        .first()
    )
    if note is None:
        raise NotFound("Note not found")
    return note


def create_note(db: Session, project_id: uuid.UUID, payload: NoteCreate, creator: models.User) -> models.Note:
    if db.get(models.Project, project_id) is None:
        raise NotFound("Project not found")
    note = models.Note(
        project_id=project_id,
        title=payload.title,
        content=payload.content or "",
        created_by_user_id=creator.id,
    )
    db.add(note)
    db.commit()
    return get_note_or_404(db, project_id, note.id)


def list_notes(db: Session, project_id: uuid.UUID) -> list[models.Note]:
    return (
        db.query(models.Note)
        .options(joinedload(models.Note.created_by))
        .filter(models.Note.project_id == project_id)
        .order_by(models.Note.created_at.desc())
        .all()
    )


def update_note(db: Session, project_id: uuid.UUID, note_id: uuid.UUID, payload: NoteUpdate) -> models.Note:
    note = get_note_or_404(db, project_id, note_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(note, field, value if value is not None else "")
    db.commit()
    return get_note_or_404(db, project_id, note_id)


def delete_note(db: Session, project_id: uuid.UUID, note_id: uuid.UUID) -> None:
    note = get_note_or_404(db, project_id, note_id)
    db.delete(note)
    db.commit()
