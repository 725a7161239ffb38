"""
Notification Endpoints Module

The current user's inbox. Users only ever see and modify their own
notifications.
"""
from typing import Any, List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from agrocoop.api import deps
from agrocoop.db.session import get_db
from agrocoop.models.notification import Notification
from agrocoop.models.user import User
from agrocoop.services import notifications

router = APIRouter()


@router.get("", response_model=List[Notification])
def list_notifications(
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return notifications.list_notifications(
        db, current_user, unread_only=unread_only, limit=limit, offset=skip,
    )


@router.get("/unread-count", response_model=dict[str, Any])
def read_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    return {"count": notifications.unread_count(db, current_user)}


@router.post("/read-all")
def mark_all_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(notifications.mark_all_read(db, current_user))


@router.post("/{notification_id}/read")
def mark_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return deps.as_response(notifications.mark_read(db, current_user, notification_id))
