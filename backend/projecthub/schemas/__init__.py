from .enums import ProjectRole, SystemRole, TaskStatus
from .envelope import ApiErrorResponse, ApiResponse, api_response
from .member import ProjectMemberAddRequest, ProjectMemberRead, ProjectMemberRoleUpdate
from .note import NoteCreate, NoteRead, NoteUpdate
from .project import (
    ProjectCreate,
    ProjectCreated,
    ProjectDetail,
    ProjectListItem,
    ProjectRead,
    ProjectUpdate,
)
from .task import (
    AttachmentRead,
    SubtaskCreate,
    SubtaskRead,
    SubtaskUpdate,
    TaskCreate,
    TaskDetail,
    TaskRead,
    TaskUpdate,
)
from .user import LoginResponse, Token, UserCreate, UserLogin, UserRead, UserSummary

__all__ = [
    "ProjectRole",
    "SystemRole",
    "TaskStatus",
    "ApiResponse",
    "ApiErrorResponse",
    "api_response",
    "ProjectMemberAddRequest",
    "ProjectMemberRead",
    "ProjectMemberRoleUpdate",
    "NoteCreate",
    "NoteRead",
    "NoteUpdate",
    "ProjectCreate",
    "ProjectCreated",
    "ProjectDetail",
    "ProjectListItem",
    "ProjectRead",
    "ProjectUpdate",
    "AttachmentRead",
    "SubtaskCreate",
    "SubtaskRead",
    "SubtaskUpdate",
    "TaskCreate",
    "TaskDetail",
    "TaskRead",
    "TaskUpdate",
    "LoginResponse",
    "Token",
    "UserCreate",
    "UserLogin",
    "UserRead",
    "UserSummary",
]
