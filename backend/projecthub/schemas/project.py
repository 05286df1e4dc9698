import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from projecthub.schemas.member import ProjectMemberRead
from projecthub.schemas.user import UserSummary
from projecthub.schemas.validators import optional_text, required_text


class ProjectBase(BaseModel):
    name: str
    description: Optional[str] = None


class ProjectCreate(ProjectBase):
    @field_validator("name")
    @classmethod
    def _normalize_name(cls, value: str) -> str:
        return required_text(value, field="name")

    @field_validator("description")
    @classmethod
    def _normalize_description(cls, value: Optional[str]) -> Optional[str]:
        return optional_text(value)


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            raise ValueError("name must not be null")
        return required_text(value, field="name")

    @field_validator("description")
    @classmethod
    def _normalize_description(cls, value: Optional[str]) -> Optional[str]:
        return optional_text(value)


class ProjectRead(ProjectBase):
    id: uuid.UUID
    owner_user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    version: int

    model_config = {"from_attributes": True}


class ProjectCreated(BaseModel):
    project: ProjectRead
    membership: ProjectMemberRead


class ProjectListItem(ProjectRead):
    role: str
    member_count: int
    joined_at: datetime


class ProjectDetail(ProjectRead):
    owner: Optional[UserSummary] = None
    user_role: str
    members: List[ProjectMemberRead] = []
    member_count: int = 0
