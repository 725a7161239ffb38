from typing import Optional
from pydantic import BaseModel, Field, field_validator

from agrocoop.models.resource import ResourceCategory, ResourceStatus


class CreateResourceInput(BaseModel):
    name: str = Field(min_length=1)
    category: ResourceCategory
    quantity: float = Field(ge=0)
    unit: str = Field(default="kg", min_length=1)
    status: ResourceStatus = ResourceStatus.IN_STOCK


class UpdateResourceInput(BaseModel):
    resource_id: str
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[ResourceCategory] = None
    quantity: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = Field(default=None, min_length=1)
    status: Optional[ResourceStatus] = None

    @field_validator("name", "category", "quantity", "unit", "status", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("This field cannot be cleared.")
        return value


class DeleteResourceInput(BaseModel):
    resource_id: str
