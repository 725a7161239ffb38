"""
Project Endpoints Module

This module exposes the Project aggregate: the project root plus its
embedded comments, outputs, files and resource allocations. Tasks live in
the tasks module under the same prefix.

Reads return the stored documents. Every write is delegated to a service
action and answered with its ActionResult (200 on success, 400 on failure).
Projects of other companies are invisible.
"""
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlmodel import Session

from agrocoop.api import deps
from agrocoop.db.session import get_db
from agrocoop.models.project import Project
from agrocoop.models.user import User
from agrocoop.services import projects, resources
from agrocoop.services.storage import BlobStore

router = APIRouter()


@router.get("", response_model=List[Project])
def list_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Retrieve every project of the current company, newest first."""
    return projects.list_projects(db, current_user)


@router.get("/{project_id}", response_model=Project)
def read_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    project = projects.get_project(db, current_user, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.post("")
def create_project(
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Create a new project.

    The submitted ``team`` must be non-empty but is not stored; the team is
    derived from task assignments.
    """
    return deps.as_response(projects.create_project(db, current_user, payload))


@router.patch("/{project_id}")
def update_project(
    project_id: str,
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Apply a partial update of the editable project fields."""
    return deps.as_response(
        projects.update_project(db, current_user, {**payload, "project_id": project_id})
    )


@router.delete("/{project_id}")
def delete_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(projects.delete_project(db, current_user, {"project_id": project_id}))


# --- Comments ---

@router.post("/{project_id}/comments")
def add_comment(
    project_id: str,
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(
        projects.add_comment(db, current_user, {**payload, "project_id": project_id})
    )


@router.delete("/{project_id}/comments/{comment_id}")
def delete_comment(
    project_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Only the author of a comment may delete it."""
    return deps.as_response(
        projects.delete_comment(db, current_user, {"project_id": project_id, "comment_id": comment_id})
    )


# --- Outputs ---

@router.post("/{project_id}/outputs")
def add_output(
    project_id: str,
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(
        projects.add_output(db, current_user, {**payload, "project_id": project_id})
    )


@router.delete("/{project_id}/outputs/{output_id}")
def delete_output(
    project_id: str,
    output_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(
        projects.delete_output(db, current_user, {"project_id": project_id, "output_id": output_id})
    )


# --- Files ---

@router.post("/{project_id}/files")
def add_project_file(
    project_id: str,
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Attach metadata of a file that is already stored elsewhere."""
    return deps.as_response(
        projects.add_project_file(db, current_user, {**payload, "project_id": project_id})
    )


@router.post("/{project_id}/files/upload")
def upload_project_file(
    project_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: BlobStore = Depends(deps.get_storage),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Store the uploaded bytes and attach the file to the project."""
    result = projects.upload_file(
        db, current_user, project_id, file.filename, file.file.read(), storage=storage,
    )
    return deps.as_response(result)


@router.delete("/{project_id}/files/{file_id}")
def delete_project_file(
    project_id: str,
    file_id: str,
    db: Session = Depends(get_db),
    storage: BlobStore = Depends(deps.get_storage),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(
        projects.delete_project_file(
            db, current_user, {"project_id": project_id, "file_id": file_id}, storage=storage,
        )
    )


# --- Resource allocations ---

@router.post("/{project_id}/allocations")
def allocate_resource(
    project_id: str,
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Move ``quantity`` of a resource from the ledger to this project."""
    return deps.as_response(
        resources.allocate_resource(db, current_user, {**payload, "project_id": project_id})
    )


@router.delete("/{project_id}/allocations/{resource_id}")
def deallocate_resource(
    project_id: str,
    resource_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Return the allocated quantity to the ledger and drop the allocation."""
    return deps.as_response(
        resources.deallocate_resource(
            db, current_user, {"project_id": project_id, "resource_id": resource_id}
        )
    )
