from .company import Company
from .user import User, UserRole
from .project import (
    Project, ProjectStatus, ProjectPriority,
    Task, TaskStatus, Comment, ProjectFile, ProjectOutput, AllocatedResource,
)
from .resource import Resource, ResourceCategory, ResourceStatus
from .activity import ActivityLog
from .notification import Notification

__all__ = [
    "Company",
    "User", "UserRole",
    "Project", "ProjectStatus", "ProjectPriority",
    "Task", "TaskStatus", "Comment", "ProjectFile", "ProjectOutput", "AllocatedResource",
    "Resource", "ResourceCategory", "ResourceStatus",
    "ActivityLog",
    "Notification",
]
