# Enums for ProjectHub
from enum import Enum


class SystemRole(str, Enum):
    """Global role of a user, independent of any project"""

    ADMIN = "admin"
    MEMBER = "member"


class ProjectRole(str, Enum):
    """Role of a user inside one project"""

    ADMIN = "admin"
    PROJECT_ADMIN = "project_admin"
    MEMBER = "member"


class TaskStatus(str, Enum):
    """Status of task"""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


# Project roles allowed to manage tasks, subtasks and attachments
TASK_MANAGER_ROLES = (ProjectRole.ADMIN, ProjectRole.PROJECT_ADMIN)


__all__ = [
    "SystemRole",
    "ProjectRole",
    "TaskStatus",
    "TASK_MANAGER_ROLES",
]
