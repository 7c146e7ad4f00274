"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CreateUserRequest(BaseModel):
    """Request model for user registration."""

    user_name: str = Field(
        ..., min_length=3, max_length=255, description="Unique user name (min 3 characters)"
    )
    email: EmailStr
    ref_code: str | None = Field(
        default=None, min_length=1, description="Referral code of an existing user"
    )


class UpdateUserRequest(BaseModel):
    """Request model for partial user updates. Omitted fields keep their value."""

    user_name: str | None = Field(default=None, min_length=3, max_length=255)
    email: EmailStr | None = None


class UserResponse(BaseModel):
    """Public representation of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_name: str
    email: str
    ref_code: str
    added_by_ref_code: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserData(BaseModel):
    user: UserResponse


class UserEnvelope(BaseModel):
    """Response model wrapping a single user."""

    status: Literal["success"] = "success"
    data: UserData


class CreateUserResponse(UserEnvelope):
    """Response model for successful registration."""

    message: str = "User created successfully"


class UserListResponse(BaseModel):
    """Response model for one page of users."""

    status: Literal["success"] = "success"
    results: int
    users: list[UserResponse]


class HealthResponse(BaseModel):
    status: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    status: Literal["fail", "error"]
    message: str


class UserCreatedPayload(BaseModel):
    """Data of a ``user_created`` live event."""

    user: UserResponse
