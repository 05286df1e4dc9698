import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from projecthub.schemas.user import UserSummary
from projecthub.schemas.validators import optional_text, required_text


class NoteCreate(BaseModel):
    title: str
    content: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _normalize_title(cls, value: str) -> str:
        return required_text(value)

    @field_validator("content")
    @classmethod
    def _normalize_content(cls, value: Optional[str]) -> Optional[str]:
        return optional_text(value)


class NoteUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _normalize_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            raise ValueError("title must not be null")
        return required_text(value)

    @field_validator("content")
    @classmethod
    def _normalize_content(cls, value: Optional[str]) -> Optional[str]:
        return optional_text(value)


class NoteRead(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    content: Optional[str] = None
    created_by: UserSummary
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
