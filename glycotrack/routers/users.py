"""Users router.

Profile update, password change, headline stats and account deletion.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.core.auth import get_current_user
from glycotrack.database import get_db
from glycotrack.models.user import User
from glycotrack.schemas.auth import UserResponse
from glycotrack.schemas.glucose import MessageResponse
from glycotrack.schemas.user import (
    AccountDeleteRequest,
    PasswordChangeRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    UserStatsResponse,
)
from glycotrack.services.profile import (
    change_password,
    delete_account,
    update_profile,
    user_stats,
)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.put("/profile", response_model=ProfileResponse)
async def put_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    """Update profile fields and the target glucose range."""
    user = await update_profile(user, body, db)
    return ProfileResponse(
        message="Profile updated successfully",
        user=UserResponse.model_validate(user),
    )


@router.put("/change-password", response_model=MessageResponse)
async def put_password(
    body: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await change_password(user, body.current_password, body.new_password, db)
    return MessageResponse(message="Password changed successfully")


@router.get("/stats", response_model=UserStatsResponse)
async def get_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserStatsResponse:
    stats = await user_stats(user.id, db)
    return UserStatsResponse(
        total_glucose_records=stats.total_glucose_records,
        total_insulin_records=stats.total_insulin_records,
        recent_glucose_avg=stats.recent_glucose_avg,
        trend=stats.trend,
        unread_alerts=stats.unread_alerts,
    )


@router.delete("/delete-account", response_model=MessageResponse)
async def delete_my_account(
    body: AccountDeleteRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Deactivate the account. Requires the password and a confirmation word."""
    await delete_account(user, body.password, db)
    return MessageResponse(message="Account deleted successfully")
