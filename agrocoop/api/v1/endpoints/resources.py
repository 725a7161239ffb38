"""
Resource Endpoints Module

The company's resource ledger. Direct edits are open to managers and
accountants; moving stock to and from projects happens through the
project allocation routes.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from agrocoop.api import deps
from agrocoop.db.session import get_db
from agrocoop.models.resource import Resource
from agrocoop.models.user import User
from agrocoop.services import resources

router = APIRouter()


@router.get("", response_model=List[Resource])
def list_resources(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return resources.list_resources(db, current_user)


@router.get("/{resource_id}", response_model=Resource)
def read_resource(
    resource_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    resource = resources.get_resource(db, current_user, resource_id)
    if not resource:
        raise HTTPException(status_code=404, detail="Resource not found")
    return resource


@router.post("")
def create_resource(
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Create a resource; a zero quantity is stored as "Out of Stock"."""
    return deps.as_response(resources.create_resource(db, current_user, payload))


@router.patch("/{resource_id}")
def update_resource(
    resource_id: str,
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(
        resources.update_resource(db, current_user, {**payload, "resource_id": resource_id})
    )


@router.delete("/{resource_id}")
def delete_resource(
    resource_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(resources.delete_resource(db, current_user, {"resource_id": resource_id}))
