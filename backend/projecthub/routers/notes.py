from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from projecthub.core.identifiers import parse_identifier
from projecthub.db import get_db
from projecthub.routers.deps import project_member, system_admin
from projecthub.schemas import ApiResponse, NoteCreate, NoteRead, NoteUpdate, api_response
from projecthub.services import note_service
from projecthub.services.authorization import RequestContext

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("/{project_id}", response_model=ApiResponse[NoteRead], status_code=status.HTTP_201_CREATED)
def create_note(
    project_id: str,
    payload: NoteCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(system_admin),
):
    note = note_service.create_note(db, parse_identifier(project_id, "Project ID"), payload, ctx.principal)
    return api_response(201, NoteRead.model_validate(note), "Note created successfully")


@router.get("/{project_id}", response_model=ApiResponse[List[NoteRead]])
def list_project_notes(
    project_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(project_member),
):
    notes = note_service.list_notes(db, ctx.membership.project_id)
    return api_response(200, [NoteRead.model_validate(n) for n in notes], "Notes retrieved successfully")


@router.get("/{project_id}/n/{note_id}", response_model=ApiResponse[NoteRead])
def get_note(
    project_id: str,
    note_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(project_member),
):
    note = note_service.get_note_or_404(db, ctx.membership.project_id, parse_identifier(note_id, "Note ID"))
    return api_response(200, NoteRead.model_validate(note), "Note retrieved successfully")


@router.put("/{project_id}/n/{note_id}", response_model=ApiResponse[NoteRead])
def update_note(
    project_id: str,
    note_id: str,
    payload: NoteUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(system_admin),
):
    note = note_service.update_note(
        db, parse_identifier(project_id, "Project ID"), parse_identifier(note_id, "Note ID"), payload
    )
    return api_response(200, NoteRead.model_validate(note), "Note updated successfully")


@router.delete("/{project_id}/n/{note_id}", response_model=ApiResponse[None])
def delete_note(
    project_id: str,
    note_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(system_admin),
):
    note_service.delete_note(db, parse_identifier(project_id, "Project ID"), parse_identifier(note_id, "Note ID"))
    return api_response(200, None, "Note deleted successfully")
