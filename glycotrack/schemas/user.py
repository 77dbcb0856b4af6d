"""Profile management schemas."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from glycotrack.core.security import validate_password_strength
from glycotrack.models.user import DiabetesType
from glycotrack.schemas.auth import UserResponse


class ProfileUpdateRequest(BaseModel):
    """Request schema for updating the profile.

    All fields are optional -- only provided fields are updated. The
    merged target range is checked again by the service.
    """

    name: str | None = Field(default=None, min_length=2, max_length=255)
    date_of_birth: date | None = None
    diabetes_type: DiabetesType | None = None
    diagnosis_date: date | None = None
    target_glucose_min: int | None = Field(
        default=None,
        ge=50,
        le=150,
        description="Lower bound of the target range (mg/dL). Range: 50-150.",
    )
    target_glucose_max: int | None = Field(
        default=None,
        ge=100,
        le=300,
        description="Upper bound of the target range (mg/dL). Range: 100-300.",
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v

    @model_validator(mode="after")
    def validate_target_ordering(self) -> "ProfileUpdateRequest":
        if (
            self.target_glucose_min is not None
            and self.target_glucose_max is not None
            and self.target_glucose_min >= self.target_glucose_max
        ):
            raise ValueError("target_glucose_min must be less than target_glucose_max")
        return self


class ProfileResponse(BaseModel):
    message: str
    user: UserResponse


class PasswordChangeRequest(BaseModel):
    """Request schema for changing password."""

    current_password: str = Field(
        ..., min_length=1, description="Current password for verification"
    )
    new_password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="New password (min 8 chars, must include uppercase, lowercase, and number)",
    )

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)


class AccountDeleteRequest(BaseModel):
    """Request schema for deleting the account."""

    password: str = Field(..., min_length=1)
    confirmation: Literal["DELETE_MY_ACCOUNT"] = Field(
        ..., description="Must be exactly DELETE_MY_ACCOUNT"
    )


class UserStatsResponse(BaseModel):
    """Headline numbers for the profile page."""

    total_glucose_records: int
    total_insulin_records: int
    recent_glucose_avg: int = Field(
        ..., description="Rounded mean glucose over the last 7 days"
    )
    trend: Literal["up", "down", "stable"] = Field(
        ..., description="Last 7 days compared with the 7 days before"
    )
    unread_alerts: int
