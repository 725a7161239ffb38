"""
Company Model Module

A company is the tenant: every other record carries its ``company_id`` and all
queries are scoped to it.
"""
import uuid
from typing import Optional
from sqlmodel import SQLModel, Field

from agrocoop.models.base import utcnow_iso


class Company(SQLModel, table=True):
    """
    Tenant root, created once at sign-up and never modified afterwards.

    Attributes:
        id: UUID primary key
        name: Display name, unique across the installation
        owner_id: The user who signed the company up
        created_at: ISO timestamp of creation
    """
    __tablename__ = "companies"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(unique=True, index=True, nullable=False)
    owner_id: Optional[str] = None
    created_at: Optional[str] = Field(default_factory=utcnow_iso)
