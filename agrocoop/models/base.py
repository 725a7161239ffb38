from datetime import datetime, timezone
import uuid


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    """Identifier for embedded records (tasks, comments, files, outputs)."""
    return uuid.uuid4().hex
