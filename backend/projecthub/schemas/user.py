import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from projecthub.schemas.enums import SystemRole


class UserBase(BaseModel):
    email: str
    username: str
    full_name: Optional[str] = None


class UserCreate(UserBase):
    password: str

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        email = value.strip().lower()
        if "@" not in email:
            raise ValueError("email must be a valid email address")
        return email

    @field_validator("username")
    @classmethod
    def _normalize_username(cls, value: str) -> str:
        username = value.strip().lower()
        if not username:
            raise ValueError("username must not be empty")
        return username

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        if len(value) < 6:
            raise ValueError("password must be at least 6 characters long")
        return value


class UserSummary(BaseModel):
    id: uuid.UUID
    email: str
    username: str
    full_name: Optional[str] = None

    model_config = {"from_attributes": True}


class UserRead(UserSummary):
    role: SystemRole
    is_active: bool
    created_at: datetime


class UserLogin(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = None
    password: str

    @model_validator(mode="after")
    def _ensure_identifier(self) -> "UserLogin":
        if not self.email and not self.username:
            raise ValueError("Either email or username is required")
        return self


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    user: UserRead
    access_token: str
    token_type: str = "bearer"
