from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from agrocoop.api import deps
from agrocoop.db.session import get_db
from agrocoop.models.activity import ActivityLog
from agrocoop.models.user import User
from agrocoop.services.activity import list_recent_activity

router = APIRouter()


@router.get("", response_model=List[ActivityLog])
def read_activity_feed(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Most recent activity of the current company, newest first."""
    return list_recent_activity(db, current_user.company_id)
