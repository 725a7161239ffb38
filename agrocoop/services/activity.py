"""
Activity feed: one append-only row per successful mutation.

Writing to the feed is a non-critical side effect. Failures are logged and
swallowed so they can never undo or fail the action that triggered them.
"""
import logging
from typing import List, Optional

from sqlmodel import Session, select

from agrocoop.core.config import settings
from agrocoop.models.activity import ActivityLog

logger = logging.getLogger(__name__)


def log_activity(db: Session, company_id: Optional[str], message: Optional[str]) -> None:
    if not company_id or not message:
        return
    try:
        db.add(ActivityLog(company_id=company_id, message=message))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to log activity for company %s", company_id)


def list_recent_activity(db: Session, company_id: str, limit: Optional[int] = None) -> List[ActivityLog]:
    """Newest entries first, truncated to the feed limit."""
    statement = (
        select(ActivityLog)
        .where(ActivityLog.company_id == company_id)
        .order_by(ActivityLog.timestamp.desc())
        .limit(limit or settings.ACTIVITY_FEED_LIMIT)
    )
    return list(db.exec(statement).all())
