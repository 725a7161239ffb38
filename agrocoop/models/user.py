"""
User Model Module

This module defines the User model and UserRole enumeration for authentication
and authorization throughout the application.
"""
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, AutoString
import uuid

from agrocoop.models.base import utcnow_iso


class UserRole(str, Enum):
    """
    Closed set of roles a cooperative member can hold.

    - ADMIN: created at sign-up, manages members and everything else
    - PROJECT_MANAGER: runs projects, tasks and the resource ledger
    - MEMBER: works on assigned tasks, logs outputs
    - ACCOUNTANT: reads reports and maintains the resource ledger

    Permission checks live in ``agrocoop.services.policy``.
    """
    ADMIN = "Admin"
    PROJECT_MANAGER = "Project Manager"
    MEMBER = "Member"
    ACCOUNTANT = "Accountant"


class User(SQLModel, table=True):
    """
    User model representing authenticated members of a company.

    Users are identified by UUID and authenticated via email/password.

    Attributes:
        id: Unique identifier (UUID) automatically generated for each user
        email: User's email address, used for authentication (unique, indexed)
        password: Hashed password (bcrypt)
        display_name: Name shown in activity messages and notifications
        role: One UserRole value
        company_id: Tenant the user belongs to
        created_at: ISO timestamp when the user account was created
    """
    __tablename__ = "users"

    # Primary key - auto-generated UUID for global uniqueness
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    # Authentication fields
    email: str = Field(unique=True, index=True, nullable=False)
    password: Optional[str] = None  # Hashed password (bcrypt)

    # Profile information
    display_name: str = Field(nullable=False)

    # Authorization
    role: UserRole = Field(default=UserRole.MEMBER, sa_type=AutoString)
    company_id: str = Field(foreign_key="companies.id", index=True)

    # Audit timestamp
    created_at: Optional[str] = Field(default_factory=utcnow_iso)