"""
Project action input schemas.

Every project action validates its raw input against one of these models
before touching the database. Identifiers of the acting user are never part
of the input; they come from the authenticated session.
"""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, HttpUrl, field_validator

from agrocoop.models.project import ProjectPriority, ProjectStatus, TaskStatus


class ProjectFields(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    status: ProjectStatus
    priority: ProjectPriority = ProjectPriority.MEDIUM
    deadline: Optional[date] = None
    estimated_budget: Optional[float] = Field(default=None, ge=0)


class CreateProjectInput(ProjectFields):
    # Required by the creation form only; the stored team is always derived
    # from task assignees and therefore starts empty.
    team: List[str] = Field(min_length=1)


class UpdateProjectInput(BaseModel):
    project_id: str
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    status: Optional[ProjectStatus] = None
    priority: Optional[ProjectPriority] = None
    deadline: Optional[date] = None
    estimated_budget: Optional[float] = Field(default=None, ge=0)

    @field_validator("title", "description", "status", "priority", mode="before")
    @classmethod
    def reject_null(cls, value):
        # Omit a field to leave it unchanged; only deadline and budget can be cleared.
        if value is None:
            raise ValueError("This field cannot be cleared.")
        return value


class DeleteProjectInput(BaseModel):
    project_id: str


# --- Tasks ---

class AddTaskInput(BaseModel):
    project_id: str
    title: str = Field(min_length=3)
    assigned_to: List[str] = Field(min_length=1)
    deadline: Optional[date] = None


class UpdateTaskInput(BaseModel):
    project_id: str
    task_id: str
    title: Optional[str] = Field(default=None, min_length=3)
    assigned_to: Optional[List[str]] = Field(default=None, min_length=1)
    deadline: Optional[date] = None
    status: Optional[TaskStatus] = None

    @field_validator("title", "assigned_to", "status", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("This field cannot be cleared.")
        return value


class DeleteTaskInput(BaseModel):
    project_id: str
    task_id: str


# --- Comments ---

class AddCommentInput(BaseModel):
    project_id: str
    comment_text: str = Field(min_length=1)


class DeleteCommentInput(BaseModel):
    project_id: str
    comment_id: str


# --- Outputs ---

class AddOutputInput(BaseModel):
    project_id: str
    description: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit: str = Field(min_length=1)


class DeleteOutputInput(BaseModel):
    project_id: str
    output_id: str


# --- Files ---

class FileInput(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    url: HttpUrl


class AddProjectFileInput(BaseModel):
    project_id: str
    file: FileInput


class DeleteProjectFileInput(BaseModel):
    project_id: str
    file_id: str


class AddTaskFileInput(BaseModel):
    project_id: str
    task_id: str
    file: FileInput


class DeleteTaskFileInput(BaseModel):
    project_id: str
    task_id: str
    file_id: str


# --- Resource allocation ---

class AllocateResourceInput(BaseModel):
    project_id: str
    resource_id: str
    quantity: float = Field(gt=0)


class DeallocateResourceInput(BaseModel):
    project_id: str
    resource_id: str
