from typing import Optional
import uuid
from sqlmodel import SQLModel, Field

from agrocoop.models.base import utcnow_iso


class Notification(SQLModel, table=True):
    """
    Per-user notification produced by task and comment fan-out.

    Only ``is_read`` is ever modified after creation.
    """
    __tablename__ = "notifications"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(index=True, nullable=False)
    message: str = Field(nullable=False)
    link: str = "#"
    is_read: bool = False
    timestamp: Optional[str] = Field(default_factory=utcnow_iso, index=True)
