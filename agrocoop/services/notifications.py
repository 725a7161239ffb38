"""
Notification Service Module

Creates per-user notifications after task and comment changes, and serves
each user's own inbox. Creation is best-effort: a failure is logged and
never propagated to the action that triggered it.
"""
import logging
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from agrocoop.models.notification import Notification
from agrocoop.models.user import User
from agrocoop.schemas.result import ActionResult
from agrocoop.services.errors import NotFoundError, action

logger = logging.getLogger(__name__)


def notify_users(db: Session, user_ids: Iterable[str], message: str, link: str = "#",
                 exclude_user_id: Optional[str] = None) -> int:
    """
    Insert one notification per target user, skipping the actor.

    Returns the number of rows written (0 on failure or empty target list).
    """
    # dict.fromkeys keeps first-seen order while dropping duplicates
    targets = [uid for uid in dict.fromkeys(user_ids or []) if uid and uid != exclude_user_id]
    if not targets:
        return 0
    try:
        db.add_all(
            Notification(user_id=uid, message=message, link=link or "#")
            for uid in targets
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to create notifications for %d users", len(targets))
        return 0
    return len(targets)


def list_notifications(db: Session, user: User, unread_only: bool = False,
                       limit: Optional[int] = 50, offset: int = 0) -> List[Notification]:
    statement = select(Notification).where(Notification.user_id == user.id)
    if unread_only:
        statement = statement.where(Notification.is_read == False)  # noqa: E712
    statement = statement.order_by(Notification.timestamp.desc()).offset(offset).limit(limit)
    return list(db.exec(statement).all())


def unread_count(db: Session, user: User) -> int:
    statement = select(func.count()).select_from(Notification).where(
        Notification.user_id == user.id, Notification.is_read == False  # noqa: E712
    )
    return db.exec(statement).one()


@action("marking notification as read")
def mark_read(db: Session, user: User, notification_id: str) -> ActionResult:
    notification = db.get(Notification, notification_id)
    # Other users' notifications are reported as missing
    if not notification or notification.user_id != user.id:
        raise NotFoundError("Notification not found.")
    notification.is_read = True
    db.add(notification)
    db.commit()
    return ActionResult.ok()


@action("marking all notifications as read")
def mark_all_read(db: Session, user: User) -> ActionResult:
    unread = list_notifications(db, user, unread_only=True, limit=None)
    for notification in unread:
        notification.is_read = True
        db.add(notification)
    db.commit()
    return ActionResult.ok(updated=len(unread))
