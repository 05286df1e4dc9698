from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from projecthub.core.identifiers import parse_identifier
from projecthub.db import get_db
from projecthub.routers.deps import authenticated, project_admin, project_member, system_admin
from projecthub.schemas import (
    ApiResponse,
    ProjectCreate,
    ProjectCreated,
    ProjectDetail,
    ProjectListItem,
    ProjectMemberAddRequest,
    ProjectMemberRead,
    ProjectMemberRoleUpdate,
    ProjectRead,
    ProjectUpdate,
    api_response,
)
from projecthub.services import membership as registry
from projecthub.services import project_service
from projecthub.services.authorization import RequestContext

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ApiResponse[ProjectCreated], status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(system_admin),
):
    project, membership = project_service.create_project(db, payload, ctx.principal)
    data = ProjectCreated(
        project=ProjectRead.model_validate(project),
        membership=ProjectMemberRead.model_validate(membership),
    )
    return api_response(201, data, "Project created successfully")


@router.get("", response_model=ApiResponse[list[ProjectListItem]])
def list_my_projects(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(authenticated),
):
    items = project_service.list_user_projects(db, ctx.principal)
    return api_response(200, [ProjectListItem.model_validate(item) for item in items], "Projects retrieved successfully")


@router.get("/{project_id}", response_model=ApiResponse[ProjectDetail])
def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(project_member),
):
    detail = project_service.get_project_detail(db, ctx.membership.project_id, ctx.membership)
    return api_response(
        200, ProjectDetail.model_validate(detail, from_attributes=True), "Project retrieved successfully"
    )


@router.put("/{project_id}", response_model=ApiResponse[ProjectRead])
def update_project(
    project_id: str,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(project_admin),
):
    project = project_service.update_project(db, ctx.membership.project_id, payload)
    return api_response(200, ProjectRead.model_validate(project), "Project updated successfully")


@router.delete("/{project_id}", response_model=ApiResponse[None])
def delete_project(
    project_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(project_admin),
):
    project_service.delete_project(db, ctx.membership.project_id)
    return api_response(200, None, "Project deleted successfully")


@router.post(
    "/{project_id}/members",
    response_model=ApiResponse[ProjectMemberRead],
    status_code=status.HTTP_201_CREATED,
)
def add_project_member(
    project_id: str,
    payload: ProjectMemberAddRequest,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(system_admin),
):
    project_uuid = parse_identifier(project_id, "Project ID")
    membership = registry.add_member(db, project_uuid, payload.email, payload.role, ctx.principal)
    return api_response(201, ProjectMemberRead.model_validate(membership), "Member added successfully")


@router.get("/{project_id}/members", response_model=ApiResponse[list[ProjectMemberRead]])
def list_project_members(
    project_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(project_member),
):
    members = registry.list_members(db, ctx.membership.project_id)
    return api_response(
        200,
        [ProjectMemberRead.model_validate(m) for m in members],
        "Project members retrieved successfully",
    )


@router.put("/{project_id}/members/{user_id}", response_model=ApiResponse[ProjectMemberRead])
def update_project_member_role(
    project_id: str,
    user_id: str,
    payload: ProjectMemberRoleUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(project_admin),
):
    user_uuid = parse_identifier(user_id, "User ID")
    membership = registry.update_member_role(db, ctx.membership.project_id, user_uuid, payload.role)
    return api_response(200, ProjectMemberRead.model_validate(membership), "Member role updated successfully")


@router.delete("/{project_id}/members/{user_id}", response_model=ApiResponse[None])
def remove_project_member(
    project_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(project_admin),
):
    user_uuid = parse_identifier(user_id, "User ID")
    registry.remove_member(db, ctx.membership.project_id, user_uuid)
    return api_response(200, None, "Member removed successfully")
