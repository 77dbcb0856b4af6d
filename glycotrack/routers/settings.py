"""Settings router.

Read and update the user's notification, privacy, data and reminder
preferences.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.core.auth import get_current_user
from glycotrack.database import get_db
from glycotrack.models.user import User
from glycotrack.schemas.settings import (
    UserSettingsMessage,
    UserSettingsResponse,
    UserSettingsUpdate,
)
from glycotrack.services.user_settings import get_or_create_settings, update_settings

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=UserSettingsResponse)
async def get_user_settings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserSettingsResponse:
    """Get the current user's settings.

    Returns defaults if no settings have been stored yet.
    """
    user_settings = await get_or_create_settings(user.id, db)
    return UserSettingsResponse.model_validate(user_settings)


@router.put("", response_model=UserSettingsMessage)
async def put_user_settings(
    body: UserSettingsUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserSettingsMessage:
    """Replace any of the four preference blobs; omitted ones are kept."""
    user_settings = await update_settings(
        user.id, body.model_dump(exclude_none=True), db
    )
    return UserSettingsMessage(
        message="Settings updated successfully",
        settings=UserSettingsResponse.model_validate(user_settings),
    )
