"""
Resource Model Module

Resources form the shared ledger of fungible stock (seed, fertiliser, fuel,
equipment hours...). ``quantity`` is debited and credited by project
allocations inside a transaction, so the row is versioned like a project.
"""
from enum import Enum
from typing import Optional
import uuid

from sqlalchemy import Column, Integer
from sqlmodel import SQLModel, Field, AutoString

from agrocoop.models.base import utcnow_iso


class ResourceCategory(str, Enum):
    INPUTS = "Inputs"
    EQUIPMENT = "Equipment"
    INFRASTRUCTURE = "Infrastructure"
    FINANCE = "Finance"


class ResourceStatus(str, Enum):
    IN_STOCK = "In Stock"
    GOOD = "Good"
    IN_USE = "In Use"
    ON_TRACK = "On Track"
    LOW_STOCK = "Low Stock"
    NEEDS_MAINTENANCE = "Needs Maintenance"
    OUT_OF_STOCK = "Out of Stock"


_resource_version = Column("version", Integer, nullable=False)


class Resource(SQLModel, table=True):
    __tablename__ = "resources"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    company_id: str = Field(foreign_key="companies.id", index=True)

    name: str = Field(nullable=False)
    category: ResourceCategory = Field(sa_type=AutoString)
    quantity: float = 0
    unit: str = "kg"
    status: ResourceStatus = Field(default=ResourceStatus.IN_STOCK, sa_type=AutoString)

    version: int = Field(default=1, sa_column=_resource_version)

    created_at: Optional[str] = Field(default_factory=utcnow_iso)
    updated_at: Optional[str] = Field(default_factory=utcnow_iso)

    __mapper_args__ = {"version_id_col": _resource_version}
