"""User settings service.

Manages the per-user preference blobs with a get-or-create pattern.
"""

import copy
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.logging_config import get_logger
from glycotrack.models.user_settings import UserSettings

logger = get_logger(__name__)

SETTINGS_FIELDS = (
    "notification_settings",
    "privacy_settings",
    "data_settings",
    "reminder_times",
)

DEFAULT_SETTINGS: dict[str, dict[str, Any]] = {
    "notification_settings": {
        "measurementReminders": True,
        "highGlucoseAlerts": True,
        "lowGlucoseAlerts": True,
        "medicationReminders": True,
        "weeklyReports": True,
    },
    "privacy_settings": {
        "shareWithDoctor": False,
        "anonymousAnalytics": True,
        "dataExport": True,
    },
    "data_settings": {
        "autoBackup": True,
        "backupFrequency": "daily",
        "dataRetention": "2years",
    },
    "reminder_times": {
        "breakfast": "07:00",
        "lunch": "12:00",
        "dinner": "18:00",
        "bedtime": "22:00",
    },
}


def default_settings(user_id: uuid.UUID) -> UserSettings:
    """Build an unsaved UserSettings row holding the defaults."""
    return UserSettings(user_id=user_id, **copy.deepcopy(DEFAULT_SETTINGS))


async def get_settings(user_id: uuid.UUID, db: AsyncSession) -> UserSettings | None:
    result = await db.execute(
        select(UserSettings).where(UserSettings.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_or_create_settings(
    user_id: uuid.UUID,
    db: AsyncSession,
) -> UserSettings:
    """Get the user's settings, creating defaults if none exist.

    Args:
        user_id: User's UUID.
        db: Database session.

    Returns:
        The user's UserSettings record.
    """
    user_settings = await get_settings(user_id, db)

    if user_settings is None:
        user_settings = default_settings(user_id)
        db.add(user_settings)
        try:
            await db.commit()
        except IntegrityError:
            # Created concurrently by another request
            await db.rollback()
            result = await db.execute(
                select(UserSettings).where(UserSettings.user_id == user_id)
            )
            return result.scalar_one()
        await db.refresh(user_settings)

        logger.info(
            "Created default user settings",
            user_id=str(user_id),
        )

    return user_settings


async def update_settings(
    user_id: uuid.UUID,
    updates: dict[str, dict[str, Any]],
    db: AsyncSession,
) -> UserSettings:
    """Replace any of the four preference blobs.

    Blobs missing from ``updates`` are left unchanged.
    """
    user_settings = await get_or_create_settings(user_id, db)

    changed = []
    for field in SETTINGS_FIELDS:
        value = updates.get(field)
        if value is not None:
            setattr(user_settings, field, dict(value))
            changed.append(field)

    await db.commit()
    await db.refresh(user_settings)

    logger.info(
        "User settings updated",
        user_id=str(user_id),
        fields=changed,
    )
    return user_settings
