from typing import List

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from sqlalchemy.orm import Session

from projecthub.core.identifiers import parse_identifier
from projecthub.core.rate_limit import RATE_LIMITS, limiter
from projecthub.db import get_db
from projecthub.routers.deps import project_member, task_manager
from projecthub.schemas import (
    ApiResponse,
    SubtaskCreate,
    SubtaskRead,
    SubtaskUpdate,
    TaskCreate,
    TaskDetail,
    TaskRead,
    TaskUpdate,
    api_response,
)
from projecthub.services import task_service
from projecthub.services.authorization import RequestContext, check_subtask_update_fields

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("/{project_id}", response_model=ApiResponse[TaskRead], status_code=status.HTTP_201_CREATED)
def create_task(
    project_id: str,
    payload: TaskCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(task_manager),
):
    task = task_service.create_task(db, ctx.membership.project_id, payload, ctx.principal)
    return api_response(201, TaskRead.model_validate(task), "Task created successfully")


@router.get("/{project_id}", response_model=ApiResponse[List[TaskRead]])
def list_project_tasks(
    project_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(project_member),
):
    tasks = task_service.list_tasks(db, ctx.membership.project_id)
    return api_response(200, [TaskRead.model_validate(t) for t in tasks], "Tasks retrieved successfully")


@router.get("/{project_id}/t/{task_id}", response_model=ApiResponse[TaskDetail])
def get_task(
    project_id: str,
    task_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(project_member),
):
    task = task_service.get_task_or_404(db, ctx.membership.project_id, parse_identifier(task_id, "Task ID"))
    detail = TaskDetail.model_validate(task).model_copy(
        update={"subtasks": [SubtaskRead.model_validate(s) for s in task_service.list_subtasks(db, task.id)]}
    )
    return api_response(200, detail, "Task retrieved successfully")


@router.put("/{project_id}/t/{task_id}", response_model=ApiResponse[TaskRead])
def update_task(
    project_id: str,
    task_id: str,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(task_manager),
):
    task = task_service.update_task(db, ctx.membership.project_id, parse_identifier(task_id, "Task ID"), payload)
    return api_response(200, TaskRead.model_validate(task), "Task updated successfully")


@router.delete("/{project_id}/t/{task_id}", response_model=ApiResponse[None])
def delete_task(
    project_id: str,
    task_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(task_manager),
):
    task_service.delete_task(db, ctx.membership.project_id, parse_identifier(task_id, "Task ID"))
    return api_response(200, None, "Task deleted successfully")


@router.post(
    "/{project_id}/t/{task_id}/subtasks",
    response_model=ApiResponse[SubtaskRead],
    status_code=status.HTTP_201_CREATED,
)
def create_subtask(
    project_id: str,
    task_id: str,
    payload: SubtaskCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(task_manager),
):
    subtask = task_service.create_subtask(
        db, ctx.membership.project_id, parse_identifier(task_id, "Task ID"), payload, ctx.principal
    )
    return api_response(201, SubtaskRead.model_validate(subtask), "Subtask created successfully")


@router.put("/{project_id}/st/{subtask_id}", response_model=ApiResponse[SubtaskRead])
def update_subtask(
    project_id: str,
    subtask_id: str,
    payload: SubtaskUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(project_member),
):
    """Members may only toggle ``is_completed``; admins and project admins may edit every field."""
    subtask_uuid = parse_identifier(subtask_id, "Subtask ID")
    check_subtask_update_fields(ctx, payload.model_fields_set)
    subtask = task_service.update_subtask(db, ctx.membership.project_id, subtask_uuid, payload)
    return api_response(200, SubtaskRead.model_validate(subtask), "Subtask updated successfully")


@router.delete("/{project_id}/st/{subtask_id}", response_model=ApiResponse[None])
def delete_subtask(
    project_id: str,
    subtask_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(task_manager),
):
    task_service.delete_subtask(db, ctx.membership.project_id, parse_identifier(subtask_id, "Subtask ID"))
    return api_response(200, None, "Subtask deleted successfully")


@router.post(
    "/{project_id}/t/{task_id}/attachments",
    response_model=ApiResponse[TaskRead],
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(RATE_LIMITS["upload_operations"])
def upload_task_attachments(
    request: Request,
    project_id: str,
    task_id: str,
    files: List[UploadFile] = File(..., description="Files to attach to the task"),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(task_manager),
):
    task = task_service.add_attachments(db, ctx.membership.project_id, parse_identifier(task_id, "Task ID"), files)
    return api_response(201, TaskRead.model_validate(task), "Attachments uploaded successfully")


@router.delete("/{project_id}/t/{task_id}/attachments/{attachment_id}", response_model=ApiResponse[None])
def delete_task_attachment(
    project_id: str,
    task_id: str,
    attachment_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(task_manager),
):
    task_service.delete_attachment(
        db,
        ctx.membership.project_id,
        parse_identifier(task_id, "Task ID"),
        parse_identifier(attachment_id, "Attachment ID"),
    )
    return api_response(200, None, "Attachment deleted successfully")
