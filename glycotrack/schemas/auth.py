"""Authentication schemas.

Pydantic schemas for user registration, login and the current user.
"""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from glycotrack.core.security import validate_password_strength
from glycotrack.models.user import DiabetesType


class UserRegistrationRequest(BaseModel):
    """Request schema for user registration."""

    name: str = Field(
        ...,
        min_length=2,
        max_length=255,
        description="Display name (2-255 chars)",
    )
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (min 8 chars, must include uppercase, lowercase, and number)",
    )
    diabetes_type: DiabetesType = Field(
        default=DiabetesType.TYPE1,
        description="Diagnosed diabetes type",
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be between 2 and 255 characters")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)


class UserResponse(BaseModel):
    """Public user information response."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    name: str
    email: str
    diabetes_type: DiabetesType
    date_of_birth: date | None = None
    diagnosis_date: date | None = None
    target_glucose_min: int
    target_glucose_max: int
    created_at: datetime


class AuthResponse(BaseModel):
    """Response schema for successful registration or login.

    The token is also set as an httpOnly cookie.
    """

    message: str
    user: UserResponse
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer")
    expires_in: int = Field(..., description="Token expiration in seconds")


class LoginRequest(BaseModel):
    """Request schema for user login."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")
