"""Backup and restore schemas.

The backup document keeps camelCase top-level keys; records inside it use
the storage column names. Records are kept as loose dicts here and parsed
by the backup service so that older exports still load.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from glycotrack.models.backup import BackupStatus


class ExportInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    export_date: str | None = Field(default=None, alias="exportDate")
    version: str | None = None
    user_id: str = Field(..., alias="userId", description="Owner of the exported data")


class BackupDocument(BaseModel):
    """A complete export of one user's data."""

    model_config = ConfigDict(populate_by_name=True)

    export_info: ExportInfo = Field(..., alias="exportInfo")
    user: dict[str, Any]
    glucose_records: list[dict[str, Any]] = Field(
        default_factory=list, alias="glucoseRecords"
    )
    insulin_records: list[dict[str, Any]] = Field(
        default_factory=list, alias="insulinRecords"
    )
    settings: dict[str, Any] | None = None
    alerts: list[dict[str, Any]] = Field(default_factory=list)


class RestoreRequest(BaseModel):
    backup_data: BackupDocument


class RestoreSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    glucose_records: int
    insulin_records: int
    settings_restored: bool
    alerts_restored: int


class RestoreResponse(BaseModel):
    message: str
    restored_data: RestoreSummaryResponse


class BackupResponse(BaseModel):
    """Backup bookkeeping row."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    filename: str
    file_size: int | None
    status: BackupStatus
    created_at: datetime


class BackupCreateResponse(BaseModel):
    message: str
    backup: BackupResponse


class BackupListResponse(BaseModel):
    backups: list[BackupResponse]
