"""Insulin record schemas."""

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel, Field

from glycotrack.models.glucose import NOTES_MAX_LENGTH
from glycotrack.models.insulin import (
    INSULIN_MAX_UNITS,
    INSULIN_MIN_UNITS,
    InsulinPeriod,
    InsulinType,
)
from glycotrack.schemas.glucose import PaginationResponse


class InsulinRecordCreate(BaseModel):
    """Request schema for recording an insulin dose."""

    date: datetime.date = Field(..., description="Calendar day of the dose")
    period: InsulinPeriod = Field(..., description="Meal/time slot")
    insulin_type: InsulinType = Field(
        default=InsulinType.RAPID,
        description="Kind of insulin administered",
    )
    units: Decimal = Field(
        ...,
        ge=INSULIN_MIN_UNITS,
        le=INSULIN_MAX_UNITS,
        max_digits=5,
        decimal_places=2,
        description="Units administered. Range: 0.1-100.",
    )
    notes: str | None = Field(
        default=None,
        max_length=NOTES_MAX_LENGTH,
        description="Free-text notes (max 500 chars)",
    )


class InsulinRecordUpdate(BaseModel):
    """Request schema for updating an insulin dose.

    Date and period are fixed once recorded.
    """

    insulin_type: InsulinType | None = None
    units: Decimal | None = Field(
        default=None,
        ge=INSULIN_MIN_UNITS,
        le=INSULIN_MAX_UNITS,
        max_digits=5,
        decimal_places=2,
        description="Units administered. Range: 0.1-100.",
    )
    notes: str | None = Field(
        default=None,
        max_length=NOTES_MAX_LENGTH,
        description="Free-text notes (max 500 chars)",
    )


class InsulinRecordResponse(BaseModel):
    """Response schema for a single insulin record."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    date: datetime.date = Field(..., validation_alias="record_date")
    period: InsulinPeriod
    insulin_type: InsulinType
    units: float = Field(..., description="Units administered")
    notes: str | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class InsulinStatsResponse(BaseModel):
    """Aggregate statistics over the whole filtered set."""

    average: float = Field(..., ge=0, description="Mean units per dose")
    minimum: float = Field(..., ge=0)
    maximum: float = Field(..., ge=0)
    count: int = Field(..., ge=0)
    total: float = Field(..., ge=0, description="Sum of units")


class InsulinRecordMessage(BaseModel):
    message: str
    record: InsulinRecordResponse


class InsulinListResponse(BaseModel):
    """Response schema for a filtered, paginated insulin listing."""

    records: list[InsulinRecordResponse]
    pagination: PaginationResponse
    stats: InsulinStatsResponse
