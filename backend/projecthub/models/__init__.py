from .note import Note
from .project import Project
from .project_member import ProjectMember
from .subtask import Subtask
from .task import Task, TaskAttachment
from .user import User

__all__ = [
    "User",
    "Project",
    "ProjectMember",
    "Task",
    "TaskAttachment",
    "Subtask",
    "Note",
]
