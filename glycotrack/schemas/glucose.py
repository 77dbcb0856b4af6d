"""Glucose record schemas."""

import datetime
import uuid

from pydantic import BaseModel, Field

from glycotrack.models.glucose import (
    GLUCOSE_MAX_VALUE,
    GLUCOSE_MIN_VALUE,
    NOTES_MAX_LENGTH,
    GlucosePeriod,
)


class GlucoseRecordCreate(BaseModel):
    """Request schema for recording a glucose measurement."""

    date: datetime.date = Field(..., description="Calendar day of the measurement")
    period: GlucosePeriod = Field(..., description="Meal/time slot")
    glucose_value: int = Field(
        ...,
        ge=GLUCOSE_MIN_VALUE,
        le=GLUCOSE_MAX_VALUE,
        description="Glucose value in mg/dL. Range: 20-600.",
    )
    notes: str | None = Field(
        default=None,
        max_length=NOTES_MAX_LENGTH,
        description="Free-text notes (max 500 chars)",
    )


class GlucoseRecordUpdate(BaseModel):
    """Request schema for updating a glucose measurement.

    Only the value and notes can change; date and period are fixed.
    """

    glucose_value: int | None = Field(
        default=None,
        ge=GLUCOSE_MIN_VALUE,
        le=GLUCOSE_MAX_VALUE,
        description="Glucose value in mg/dL. Range: 20-600.",
    )
    notes: str | None = Field(
        default=None,
        max_length=NOTES_MAX_LENGTH,
        description="Free-text notes (max 500 chars)",
    )


class GlucoseRecordResponse(BaseModel):
    """Response schema for a single glucose record."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    date: datetime.date = Field(..., validation_alias="record_date")
    period: GlucosePeriod
    glucose_value: int = Field(..., description="Glucose value in mg/dL")
    notes: str | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class GlucoseStatsResponse(BaseModel):
    """Aggregate statistics over the whole filtered set."""

    average: int = Field(..., ge=0, description="Rounded mean glucose in mg/dL")
    minimum: int = Field(..., ge=0, description="Lowest value in mg/dL")
    maximum: int = Field(..., ge=0, description="Highest value in mg/dL")
    count: int = Field(..., ge=0, description="Number of records")


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class GlucoseRecordMessage(BaseModel):
    """Response schema for create/update."""

    message: str
    record: GlucoseRecordResponse


class GlucoseListResponse(BaseModel):
    """Response schema for a filtered, paginated glucose listing."""

    records: list[GlucoseRecordResponse]
    pagination: PaginationResponse
    stats: GlucoseStatsResponse


class MessageResponse(BaseModel):
    message: str
