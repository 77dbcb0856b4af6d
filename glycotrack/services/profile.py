"""Profile use-cases: update, password change, stats and account deletion."""

import uuid
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.core.errors import AuthenticationError, ValidationError
from glycotrack.core.security import hash_password, verify_password
from glycotrack.logging_config import get_logger
from glycotrack.models.user import User
from glycotrack.schemas.user import ProfileUpdateRequest
from glycotrack.services.aggregation import round_half_up
from glycotrack.services.alert_feed import count_unread
from glycotrack.services.glucose import glucose_store
from glycotrack.services.insulin import insulin_store
from glycotrack.services.measurement_store import MeasurementFilter
from glycotrack.services.reports import today

logger = get_logger(__name__)

WRONG_PASSWORD = "Incorrect password"


@dataclass
class UserStats:
    total_glucose_records: int
    total_insulin_records: int
    recent_glucose_avg: int
    trend: str
    unread_alerts: int


async def update_profile(
    user: User,
    updates: ProfileUpdateRequest,
    db: AsyncSession,
) -> User:
    """Apply a partial profile update.

    Raises:
        ValidationError: If the merged target range is not min < max.
    """
    fields = updates.model_dump(exclude_unset=True)
    # Required columns cannot be cleared
    for key in ("name", "diabetes_type", "target_glucose_min", "target_glucose_max"):
        if key in fields and fields[key] is None:
            del fields[key]

    new_min = fields.get("target_glucose_min", user.target_glucose_min)
    new_max = fields.get("target_glucose_max", user.target_glucose_max)
    if new_min >= new_max:
        raise ValidationError(
            "target_glucose_min must be less than target_glucose_max",
            details=[
                {"field": "target_glucose_min", "value": new_min},
                {"field": "target_glucose_max", "value": new_max},
            ],
        )

    for key, value in fields.items():
        setattr(user, key, value)

    await db.commit()
    await db.refresh(user)

    logger.info(
        "Profile updated",
        user_id=str(user.id),
        fields=sorted(fields),
    )
    return user


async def change_password(
    user: User,
    current_password: str,
    new_password: str,
    db: AsyncSession,
) -> None:
    """Replace the password after verifying the current one.

    Raises:
        AuthenticationError: If the current password is wrong.
    """
    if not verify_password(current_password, user.hashed_password):
        raise AuthenticationError(WRONG_PASSWORD)

    user.hashed_password = hash_password(new_password)
    await db.commit()

    logger.info("Password changed", user_id=str(user.id))


async def user_stats(user_id: uuid.UUID, db: AsyncSession) -> UserStats:
    """Record totals plus the last-7-day average and its trend.

    The trend compares the last 7 days with the 7 days before them.
    """
    now = today()
    glucose = glucose_store(db)

    recent = await glucose.list_for_user(
        user_id, MeasurementFilter(start_date=now - timedelta(days=7))
    )
    previous = await glucose.list_for_user(
        user_id,
        MeasurementFilter(
            start_date=now - timedelta(days=14),
            end_date=now - timedelta(days=8),
        ),
    )

    recent_avg = _raw_mean(r.glucose_value for r in recent)
    previous_avg = _raw_mean(r.glucose_value for r in previous)
    if recent_avg > previous_avg:
        trend = "up"
    elif recent_avg < previous_avg:
        trend = "down"
    else:
        trend = "stable"

    return UserStats(
        total_glucose_records=await glucose.count(user_id),
        total_insulin_records=await insulin_store(db).count(user_id),
        recent_glucose_avg=round_half_up(recent_avg),
        trend=trend,
        unread_alerts=await count_unread(user_id, db),
    )


def _raw_mean(values) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


async def delete_account(user: User, password: str, db: AsyncSession) -> None:
    """Soft-delete the account; the user can no longer log in.

    Raises:
        AuthenticationError: If the password is wrong.
    """
    if not verify_password(password, user.hashed_password):
        raise AuthenticationError(WRONG_PASSWORD)

    user.is_active = False
    await db.commit()

    logger.info("Account deactivated", user_id=str(user.id))
