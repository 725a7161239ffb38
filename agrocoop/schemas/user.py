from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field


# Properties to receive via API on creation (admin "create member" form)
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    display_name: str = Field(min_length=1)
    # Admin is only ever created through sign-up
    role: Literal["Project Manager", "Member", "Accountant"]


# Properties to return to client
class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    display_name: str
    role: str
    company_id: str
    created_at: Optional[str] = None
