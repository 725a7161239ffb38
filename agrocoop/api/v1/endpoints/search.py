from fastapi import APIRouter, Depends
from sqlmodel import Session

from agrocoop.api import deps
from agrocoop.db.session import get_db
from agrocoop.models.user import User
from agrocoop.services.search import SearchResults, global_search

router = APIRouter()


@router.get("", response_model=SearchResults)
def search(
    q: str = "",
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Search project titles, member names and resource names of the current company."""
    return global_search(db, current_user, q)
