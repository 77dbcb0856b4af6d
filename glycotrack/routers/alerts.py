"""Alerts router.

Provides endpoints for reading the alert feed and marking alerts read.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.core.auth import get_current_user
from glycotrack.database import get_db
from glycotrack.models.user import User
from glycotrack.schemas.alert import (
    AlertListResponse,
    AlertResponse,
    MarkAllReadResponse,
)
from glycotrack.schemas.glucose import MessageResponse
from glycotrack.services.alert_feed import (
    count_unread,
    list_alerts,
    mark_all_read,
    mark_read,
)

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("", response_model=AlertListResponse)
async def get_alerts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AlertListResponse:
    """Get the most recent alerts for the current user, newest first."""
    alerts = await list_alerts(user.id, db)
    return AlertListResponse(
        alerts=[AlertResponse.model_validate(alert) for alert in alerts],
        count=len(alerts),
        unread_count=await count_unread(user.id, db),
    )


# Declared before /{alert_id}/read so the literal path wins
@router.put("/mark-all-read", response_model=MarkAllReadResponse)
async def read_all(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MarkAllReadResponse:
    updated = await mark_all_read(user.id, db)
    return MarkAllReadResponse(message="All alerts marked as read", updated=updated)


@router.put("/{alert_id}/read", response_model=MessageResponse)
async def read_one(
    alert_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Mark a single alert as read. 404 if it is not the caller's."""
    await mark_read(alert_id, user.id, db)
    return MessageResponse(message="Alert marked as read")
