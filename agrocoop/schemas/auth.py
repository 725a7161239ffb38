from pydantic import BaseModel, EmailStr, Field


class Token(BaseModel):
    access_token: str
    token_type: str


class SignUpRequest(BaseModel):
    """Creates a company together with its first (Admin) user."""
    full_name: str = Field(min_length=1)
    company_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
