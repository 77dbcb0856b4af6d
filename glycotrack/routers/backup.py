"""Backup router.

Create, list, download, restore and delete data backups.
"""

import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.core.auth import get_current_user
from glycotrack.core.errors import PersistenceError
from glycotrack.database import Database, get_database, get_db
from glycotrack.models.backup import BackupStatus
from glycotrack.models.user import User
from glycotrack.schemas.backup import (
    BackupCreateResponse,
    BackupListResponse,
    BackupResponse,
    RestoreRequest,
    RestoreResponse,
    RestoreSummaryResponse,
)
from glycotrack.schemas.glucose import MessageResponse
from glycotrack.services.backup import (
    create_backup,
    delete_backup,
    get_backup_file,
    list_backups,
    restore_backup,
)

router = APIRouter(prefix="/api/backup", tags=["backup"])


@router.post(
    "/create",
    response_model=BackupCreateResponse,
    responses={500: {"description": "Backup could not be written"}},
)
async def create(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    database: Database = Depends(get_database),
) -> BackupCreateResponse:
    """Export all of the user's data to a new backup file."""
    backup = await create_backup(user.id, db, database)
    if backup.status == BackupStatus.FAILED:
        raise PersistenceError()
    return BackupCreateResponse(
        message="Backup created successfully",
        backup=BackupResponse.model_validate(backup),
    )


@router.get("/list", response_model=BackupListResponse)
async def list_all(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BackupListResponse:
    backups = await list_backups(user.id, db)
    return BackupListResponse(
        backups=[BackupResponse.model_validate(b) for b in backups]
    )


@router.get("/download/{backup_id}")
async def download(
    backup_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Download a completed backup as a JSON attachment."""
    backup, content = await get_backup_file(backup_id, user.id, db)
    return Response(
        content=content,
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{backup.filename}"'
        },
    )


@router.post(
    "/restore",
    response_model=RestoreResponse,
    responses={
        400: {"description": "Backup belongs to another user or is malformed"},
        500: {"description": "Restore failed; nothing was changed"},
    },
)
async def restore(
    body: RestoreRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> RestoreResponse:
    """Replace the user's data with the contents of a backup document."""
    summary = await restore_backup(user.id, body.backup_data, db)
    return RestoreResponse(
        message="Data restored successfully",
        restored_data=RestoreSummaryResponse.model_validate(summary),
    )


@router.delete("/delete/{backup_id}", response_model=MessageResponse)
async def delete(
    backup_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await delete_backup(backup_id, user.id, db)
    return MessageResponse(message="Backup deleted successfully")
