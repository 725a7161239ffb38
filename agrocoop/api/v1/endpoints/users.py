"""
User Endpoints Module

Company members: the current user's profile, the member list of the
current company and admin-only member creation.
"""
from typing import Any, List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from agrocoop.api import deps
from agrocoop.db.session import get_db
from agrocoop.models.user import User
from agrocoop.schemas.user import UserRead
from agrocoop.services import accounts

router = APIRouter()


@router.get("", response_model=List[UserRead])
def read_members(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    """List every member of the current user's company, ordered by name."""
    return accounts.list_members(db, current_user)


@router.post("")
def create_member(
    payload: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Add a member to the current company.

    Only admins may do this; the new member's role is one of
    "Project Manager", "Member" or "Accountant".
    """
    return deps.as_response(accounts.create_member(db, current_user, payload))


@router.get("/me", response_model=UserRead)
def read_user_me(
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    return current_user
