import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from projecthub.schemas.user import UserSummary


class ProjectMemberAddRequest(BaseModel):
    email: str
    role: str


class ProjectMemberRoleUpdate(BaseModel):
    role: str


class ProjectMemberRead(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    user: UserSummary
    role: str
    joined_at: datetime
    added_by: Optional[UserSummary] = None

    model_config = {"from_attributes": True}
