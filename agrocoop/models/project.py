"""
Project Model Module

This module defines the Project aggregate. A project row owns its tasks,
comments, files, output records and resource allocations as embedded JSON
lists; they have no identity outside their parent and are always rewritten
together with it.

``progress`` and ``team`` are derived from ``tasks`` and are never edited
directly (see ``agrocoop.services.projects.recalculate_progress_and_team``).
"""
from datetime import date
from enum import Enum
from typing import List, Optional
import uuid

from sqlalchemy import Column, Integer, JSON
from sqlmodel import SQLModel, Field, AutoString

from agrocoop.models.base import new_id, utcnow_iso


class ProjectStatus(str, Enum):
    PLANNING = "Planning"
    IN_PROGRESS = "In Progress"
    ON_HOLD = "On Hold"
    DELAYED = "Delayed"
    COMPLETED = "Completed"


class ProjectPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TaskStatus(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


# --- Embedded records (stored inside the project row) ---

class ProjectFile(SQLModel):
    """Metadata for a file held in blob storage."""
    id: str = Field(default_factory=new_id)
    name: str
    url: str
    uploader_name: str
    uploaded_at: str = Field(default_factory=utcnow_iso)


class Task(SQLModel):
    id: str = Field(default_factory=new_id)
    title: str
    status: TaskStatus = TaskStatus.TODO
    assigned_to: List[str] = []
    deadline: Optional[date] = None
    files: List[ProjectFile] = []


class Comment(SQLModel):
    id: str = Field(default_factory=new_id)
    text: str
    author_id: str
    author_name: str
    created_at: str = Field(default_factory=utcnow_iso)


class ProjectOutput(SQLModel):
    """Free-form production record, e.g. 40 bags of maize."""
    id: str = Field(default_factory=new_id)
    description: str
    quantity: float
    unit: str
    date: str = Field(default_factory=utcnow_iso)


class AllocatedResource(SQLModel):
    """Snapshot of a ledger quantity committed to the project."""
    resource_id: str
    name: str
    quantity: float
    unit: str = "kg"


# Shared with __mapper_args__ so every UPDATE is a compare-and-swap on it
_project_version = Column("version", Integer, nullable=False)


class Project(SQLModel, table=True):
    """
    Project aggregate root.

    Attributes:
        id: UUID primary key
        company_id: Tenant owning the project
        title: Project name (required)
        description: Free text
        status: One of ProjectStatus
        priority: One of ProjectPriority
        deadline: Optional ISO date
        estimated_budget: Optional non-negative budget
        progress: Derived, percentage of completed tasks (0-100)
        team: Derived, deduplicated union of every task's assignees
        tasks / comments / files / outputs / allocated_resources: embedded lists
        version: Optimistic concurrency counter maintained by SQLAlchemy
    """
    __tablename__ = "projects"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    company_id: str = Field(foreign_key="companies.id", index=True)

    # Basic project information
    title: str = Field(nullable=False)
    description: str = ""
    status: ProjectStatus = Field(default=ProjectStatus.PLANNING, sa_type=AutoString)
    priority: ProjectPriority = Field(default=ProjectPriority.MEDIUM, sa_type=AutoString)
    deadline: Optional[str] = None
    estimated_budget: Optional[float] = None

    # Derived fields
    progress: int = 0
    team: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Embedded lists, stored as JSON-serialised dicts
    tasks: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    comments: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    files: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    outputs: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    allocated_resources: List[dict] = Field(default_factory=list, sa_column=Column(JSON))

    version: int = Field(default=1, sa_column=_project_version)

    # Audit timestamps
    created_at: Optional[str] = Field(default_factory=utcnow_iso)
    updated_at: Optional[str] = Field(default_factory=utcnow_iso)

    __mapper_args__ = {"version_id_col": _project_version}
