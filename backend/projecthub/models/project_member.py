import uuid

from projecthub.db import Base
from projecthub.models.project import Project
from projecthub.models.user import User
from projecthub.schemas.enums import ProjectRole
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import relationship


class ProjectMember(Base):
    __tablename__ = "project_member"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("project.id"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id"), nullable=False, index=True)
    role = Column(String(50), nullable=False, default=ProjectRole.MEMBER.value)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    added_by_user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    version = Column(Integer, nullable=False)

    project = relationship(Project)
    user = relationship(User, foreign_keys=[user_id])
    added_by = relationship(User, foreign_keys=[added_by_user_id])

    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_member_project_user"),)
    __mapper_args__ = {"version_id_col": version}
