"""
Authentication schemas for sign-up, sign-in and token responses.
"""

from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator
from pydantic.alias_generators import to_camel


class SignUpRequest(BaseModel):
    """User registration request schema."""
    name: str = Field(..., min_length=1, max_length=100, description="Display name, must be unique")
    email: EmailStr = Field(..., description="User email")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class SignInRequest(BaseModel):
    """User sign-in request schema."""
    name: str = Field(..., min_length=1, max_length=100, description="Display name")


class TokenResponse(BaseModel):
    """Token response schema."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str = Field(..., description="Signed identity token")
    user_id: int
