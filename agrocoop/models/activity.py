from typing import Optional
import uuid
from sqlmodel import SQLModel, Field

from agrocoop.models.base import utcnow_iso


class ActivityLog(SQLModel, table=True):
    """Append-only feed row describing who did what to which entity."""
    __tablename__ = "activity_logs"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    company_id: str = Field(index=True, nullable=False)
    message: str = Field(nullable=False)
    timestamp: Optional[str] = Field(default_factory=utcnow_iso, index=True)
