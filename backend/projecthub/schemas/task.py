import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from projecthub.schemas.user import UserSummary
from projecthub.schemas.validators import optional_text, required_text


class AttachmentRead(BaseModel):
    id: uuid.UUID
    url: str
    original_name: Optional[str] = None
    mimetype: Optional[str] = None
    size: int
    created_at: datetime

    model_config = {"from_attributes": True}


class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    assignee_user_id: Optional[uuid.UUID] = None

    @field_validator("title")
    @classmethod
    def _normalize_title(cls, value: str) -> str:
        return required_text(value)

    @field_validator("description")
    @classmethod
    def _normalize_description(cls, value: Optional[str]) -> Optional[str]:
        return optional_text(value)


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    assignee_user_id: Optional[uuid.UUID] = None
    status: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _normalize_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            raise ValueError("title must not be null")
        return required_text(value)

    @field_validator("description")
    @classmethod
    def _normalize_description(cls, value: Optional[str]) -> Optional[str]:
        return optional_text(value)


class SubtaskCreate(BaseModel):
    title: str
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _normalize_title(cls, value: str) -> str:
        return required_text(value)

    @field_validator("description")
    @classmethod
    def _normalize_description(cls, value: Optional[str]) -> Optional[str]:
        return optional_text(value)


class SubtaskUpdate(BaseModel):
    """Partial update; ``isCompleted`` is accepted as an alias and unknown keys are rejected."""

    title: Optional[str] = None
    description: Optional[str] = None
    is_completed: Optional[bool] = Field(default=None, alias="isCompleted")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("title")
    @classmethod
    def _normalize_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            raise ValueError("title must not be null")
        return required_text(value)

    @field_validator("description")
    @classmethod
    def _normalize_description(cls, value: Optional[str]) -> Optional[str]:
        return optional_text(value)


class SubtaskRead(BaseModel):
    id: uuid.UUID
    task_id: uuid.UUID
    title: str
    description: Optional[str] = None
    is_completed: bool
    created_by: UserSummary
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskRead(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: str
    assignee: Optional[UserSummary] = None
    created_by: UserSummary
    attachments: List[AttachmentRead] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskDetail(TaskRead):
    subtasks: List[SubtaskRead] = []
