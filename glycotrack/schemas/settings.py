"""User settings schemas."""

from typing import Any

from pydantic import BaseModel, Field


class UserSettingsResponse(BaseModel):
    """The four preference blobs."""

    model_config = {"from_attributes": True}

    notification_settings: dict[str, Any]
    privacy_settings: dict[str, Any]
    data_settings: dict[str, Any]
    reminder_times: dict[str, Any]


class UserSettingsUpdate(BaseModel):
    """Request schema for updating settings.

    Each provided blob replaces the stored one; omitted blobs are kept.
    """

    notification_settings: dict[str, Any] | None = Field(
        default=None, description="Alert and reminder toggles"
    )
    privacy_settings: dict[str, Any] | None = Field(
        default=None, description="Sharing and analytics preferences"
    )
    data_settings: dict[str, Any] | None = Field(
        default=None, description="Backup and retention preferences"
    )
    reminder_times: dict[str, Any] | None = Field(
        default=None, description="Reminder time per meal slot (HH:MM)"
    )


class UserSettingsMessage(BaseModel):
    message: str
    settings: UserSettingsResponse
