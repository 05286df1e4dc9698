import uuid

from projecthub.db import Base
from projecthub.schemas.enums import TaskStatus
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import relationship


class Task(Base):
    __tablename__ = "task"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("project.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    assignee_user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id"), nullable=True)
    status = Column(String(32), nullable=False, default=TaskStatus.TODO.value)
    created_by_user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    project = relationship("Project")
    assignee = relationship("User", foreign_keys=[assignee_user_id])
    created_by = relationship("User", foreign_keys=[created_by_user_id])
    attachments = relationship(
        "TaskAttachment",
        back_populates="task",
        order_by="TaskAttachment.created_at",
    )


class TaskAttachment(Base):
    __tablename__ = "task_attachment"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    task_id = Column(Uuid(as_uuid=True), ForeignKey("task.id"), nullable=False, index=True)
    url = Column(String(1024), nullable=False)
    local_path = Column(String(1024), nullable=False)
    original_name = Column(String(255), nullable=True)
    mimetype = Column(String(255), nullable=True)
    size = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    task = relationship(Task, back_populates="attachments")
