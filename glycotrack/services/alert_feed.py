"""Per-user alert feed.

Alerts are appended (by the threshold evaluator or a restore) and after
that only the ``read`` flag changes.
"""

import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.config import settings
from glycotrack.core.errors import NotFoundError
from glycotrack.logging_config import get_logger
from glycotrack.models.alert import Alert

logger = get_logger(__name__)


async def list_alerts(
    user_id: uuid.UUID,
    db: AsyncSession,
    *,
    unread_only: bool = False,
    limit: int | None = None,
) -> list[Alert]:
    """Return the user's alerts, newest first.

    Args:
        user_id: User's UUID.
        db: Database session.
        unread_only: Only return alerts not yet marked read.
        limit: Maximum number of alerts (defaults to the feed limit).

    Returns:
        List of Alert records.
    """
    stmt = select(Alert).where(Alert.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Alert.read.is_(False))
    stmt = stmt.order_by(Alert.created_at.desc()).limit(
        limit if limit is not None else settings.alert_list_limit
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_unread(user_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Alert)
        .where(Alert.user_id == user_id, Alert.read.is_(False))
    )
    return result.scalar_one()


async def append_alert(alert: Alert, db: AsyncSession) -> Alert:
    """Persist a new alert and commit."""
    db.add(alert)
    await db.commit()
    await db.refresh(alert)

    logger.info(
        "Alert created",
        user_id=str(alert.user_id),
        alert_id=str(alert.id),
        alert_type=alert.alert_type.value,
    )
    return alert


async def mark_read(
    alert_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
) -> None:
    """Mark one of the user's alerts as read.

    Raises:
        NotFoundError: If the alert does not exist or belongs to someone else.
    """
    result = await db.execute(
        update(Alert)
        .where(Alert.id == alert_id, Alert.user_id == user_id)
        .values(read=True)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFoundError("Alert not found")
    await db.commit()


async def mark_all_read(user_id: uuid.UUID, db: AsyncSession) -> int:
    """Mark every unread alert of the user as read; returns how many changed."""
    result = await db.execute(
        update(Alert)
        .where(Alert.user_id == user_id, Alert.read.is_(False))
        .values(read=True)
    )
    await db.commit()

    logger.info(
        "Marked all alerts read",
        user_id=str(user_id),
        count=result.rowcount,
    )
    return result.rowcount
