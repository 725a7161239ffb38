"""
Task Endpoints Module

Tasks are embedded in their project, so every route is nested under
``/projects/{project_id}/tasks``. Adding, editing and removing a task
recomputes the project's progress and team.
"""
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlmodel import Session

from agrocoop.api import deps
from agrocoop.db.session import get_db
from agrocoop.models.project import Task
from agrocoop.models.user import User
from agrocoop.services import projects
from agrocoop.services.storage import BlobStore

router = APIRouter()


@router.get("/{project_id}/tasks", response_model=List[Task])
def list_tasks(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    project = projects.get_project(db, current_user, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project.tasks


@router.post("/{project_id}/tasks")
def add_task(
    project_id: str,
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Add a task to the project.

    Assignees other than the current user are notified.
    """
    return deps.as_response(projects.add_task(db, current_user, {**payload, "project_id": project_id}))


@router.patch("/{project_id}/tasks/{task_id}")
def update_task(
    project_id: str,
    task_id: str,
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Update title, assignees, deadline or status of a task.

    Managers may edit any task; other members only tasks assigned to them.
    """
    return deps.as_response(
        projects.update_task(db, current_user, {**payload, "project_id": project_id, "task_id": task_id})
    )


@router.delete("/{project_id}/tasks/{task_id}")
def delete_task(
    project_id: str,
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(
        projects.delete_task(db, current_user, {"project_id": project_id, "task_id": task_id})
    )


@router.post("/{project_id}/tasks/{task_id}/files")
def add_task_file(
    project_id: str,
    task_id: str,
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(
        projects.add_task_file(db, current_user, {**payload, "project_id": project_id, "task_id": task_id})
    )


@router.post("/{project_id}/tasks/{task_id}/files/upload")
def upload_task_file(
    project_id: str,
    task_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: BlobStore = Depends(deps.get_storage),
    current_user: User = Depends(deps.get_current_active_user),
):
    result = projects.upload_file(
        db, current_user, project_id, file.filename, file.file.read(), task_id=task_id, storage=storage,
    )
    return deps.as_response(result)


@router.delete("/{project_id}/tasks/{task_id}/files/{file_id}")
def delete_task_file(
    project_id: str,
    task_id: str,
    file_id: str,
    db: Session = Depends(get_db),
    storage: BlobStore = Depends(deps.get_storage),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(
        projects.delete_task_file(
            db, current_user,
            {"project_id": project_id, "task_id": task_id, "file_id": file_id},
            storage=storage,
        )
    )
