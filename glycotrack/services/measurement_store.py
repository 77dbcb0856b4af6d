"""Measurement store.

Per-user persistence for glucose and insulin records. Both record types
share the same shape (user, date, period, value columns) and the same
uniqueness rule, so one store class serves both.
"""

import uuid
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.core.errors import ConflictError
from glycotrack.logging_config import get_logger
from glycotrack.models.glucose import GlucoseRecord
from glycotrack.models.insulin import InsulinRecord

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", GlucoseRecord, InsulinRecord)
T = TypeVar("T")

DUPLICATE_RECORD_MESSAGE = "A record already exists for this date and period"


@dataclass(frozen=True)
class MeasurementFilter:
    """Optional predicates combined with AND.

    A missing bound leaves that dimension unconstrained. Both date bounds
    are inclusive.
    """

    start_date: date | None = None
    end_date: date | None = None
    period: str | None = None

    def matches(self, record_date: date, period: Any) -> bool:
        """Evaluate the filter against one record's date and period."""
        if self.start_date is not None and record_date < self.start_date:
            return False
        if self.end_date is not None and record_date > self.end_date:
            return False
        if self.period is not None and _period_value(period) != _period_value(
            self.period
        ):
            return False
        return True


def _period_value(period: Any) -> str:
    return period.value if hasattr(period, "value") else str(period)


class MeasurementStore(Generic[RecordT]):
    """CRUD and filtered queries over one measurement model, scoped per user."""

    def __init__(self, model: type[RecordT], db: AsyncSession):
        self.model = model
        self.db = db

    def _scoped(self, user_id: uuid.UUID, filters: MeasurementFilter | None) -> Select:
        stmt = select(self.model).where(self.model.user_id == user_id)
        if filters is None:
            return stmt
        if filters.start_date is not None:
            stmt = stmt.where(self.model.record_date >= filters.start_date)
        if filters.end_date is not None:
            stmt = stmt.where(self.model.record_date <= filters.end_date)
        if filters.period is not None:
            stmt = stmt.where(self.model.period == filters.period)
        return stmt

    async def find_one(
        self,
        user_id: uuid.UUID,
        record_date: date,
        period: Any,
    ) -> RecordT | None:
        """Return the user's record for (date, period), if any."""
        result = await self.db.execute(
            select(self.model).where(
                self.model.user_id == user_id,
                self.model.record_date == record_date,
                self.model.period == period,
            )
        )
        return result.scalar_one_or_none()

    async def insert(self, record: RecordT) -> RecordT:
        """Persist a new record, enforcing (user, date, period) uniqueness.

        Raises:
            ConflictError: If a record already exists for the same slot,
                whether caught by the existence check or by the storage
                unique constraint under a race.
        """
        existing = await self.find_one(
            record.user_id, record.record_date, record.period
        )
        if existing is not None:
            logger.info(
                "Duplicate measurement rejected",
                user_id=str(record.user_id),
                record_type=self.model.__tablename__,
                date=record.record_date.isoformat(),
            )
            raise ConflictError(DUPLICATE_RECORD_MESSAGE)

        self.db.add(record)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(DUPLICATE_RECORD_MESSAGE) from e
        await self.db.refresh(record)
        return record

    async def query(
        self,
        user_id: uuid.UUID,
        filters: MeasurementFilter | None = None,
        *,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[RecordT]:
        """Filtered records, newest date first, then newest creation first.

        ``page`` is 1-based and only applies together with ``limit``.
        """
        stmt = self._scoped(user_id, filters).order_by(
            self.model.record_date.desc(),
            self.model.created_at.desc(),
        )
        if limit is not None:
            stmt = stmt.limit(limit)
            if page is not None:
                stmt = stmt.offset((page - 1) * limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        filters: MeasurementFilter | None = None,
    ) -> list[RecordT]:
        """All matching records in chronological order (date ascending)."""
        stmt = self._scoped(user_id, filters).order_by(
            self.model.record_date.asc(),
            self.model.created_at.asc(),
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count(
        self,
        user_id: uuid.UUID,
        filters: MeasurementFilter | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(
            self._scoped(user_id, filters).subquery()
        )
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def get(self, record_id: uuid.UUID, user_id: uuid.UUID) -> RecordT | None:
        """Fetch one record owned by the user."""
        result = await self.db.execute(
            select(self.model).where(
                self.model.id == record_id,
                self.model.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def update(
        self,
        record_id: uuid.UUID,
        user_id: uuid.UUID,
        fields: dict[str, Any],
    ) -> RecordT | None:
        """Apply a partial update. Returns None if absent or not owned."""
        record = await self.get(record_id, user_id)
        if record is None:
            return None

        for field, value in fields.items():
            setattr(record, field, value)

        await self.db.commit()
        await self.db.refresh(record)
        return record

    async def delete(self, record_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Delete one owned record. Returns False if absent or not owned."""
        result = await self.db.execute(
            delete(self.model).where(
                self.model.id == record_id,
                self.model.user_id == user_id,
            )
        )
        await self.db.commit()
        return result.rowcount > 0


async def run_in_transaction(
    db: AsyncSession,
    fn: Callable[[], Awaitable[T]],
) -> T:
    """Run ``fn`` and commit, or roll back everything it did and re-raise."""
    try:
        result = await fn()
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return result


def apply_filter(
    records: Sequence[RecordT],
    filters: MeasurementFilter | None,
) -> list[RecordT]:
    """In-memory counterpart of the SQL filter used by ``query``."""
    if filters is None:
        return list(records)
    return [r for r in records if filters.matches(r.record_date, r.period)]
