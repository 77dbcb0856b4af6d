"""Alert feed schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from glycotrack.models.alert import AlertType


class AlertResponse(BaseModel):
    """Single alert response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: AlertType = Field(..., validation_alias="alert_type")
    title: str
    message: str | None
    glucose_value: int | None
    read: bool
    created_at: datetime


class AlertListResponse(BaseModel):
    """Response for listing the alert feed."""

    alerts: list[AlertResponse]
    count: int = Field(..., description="Number of alerts returned")
    unread_count: int = Field(..., description="Unread alerts across the whole feed")


class MarkAllReadResponse(BaseModel):
    message: str
    updated: int = Field(..., description="Number of alerts flipped to read")
