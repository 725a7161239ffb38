import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import Session

from agrocoop.core.config import settings
from agrocoop.services.errors import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_transaction(db: Session, body: Callable[[Session], T], max_attempts: Optional[int] = None) -> T:
    """
    Run ``body`` and commit its changes as one unit.

    Versioned rows (projects, resources) are written with a compare-and-swap
    on their version column. When another writer got there first the commit
    raises StaleDataError; everything is rolled back and ``body`` runs again
    against fresh state. Any other exception rolls back and propagates.
    """
    attempts = max_attempts or settings.TRANSACTION_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        try:
            result = body(db)
            db.commit()
            return result
        except StaleDataError:
            db.rollback()
            if attempt == attempts:
                logger.warning("Giving up after %d conflicting attempts", attempts)
                break
            logger.info("Concurrent modification detected, retrying (%d/%d)", attempt, attempts)
        except Exception:
            db.rollback()
            raise
    raise ConflictError("The record was modified by someone else. Please try again.")
