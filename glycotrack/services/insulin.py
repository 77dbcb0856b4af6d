"""Insulin dose use-cases."""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.core.errors import NotFoundError
from glycotrack.logging_config import get_logger
from glycotrack.models.insulin import InsulinRecord
from glycotrack.schemas.insulin import InsulinRecordCreate, InsulinRecordUpdate
from glycotrack.services.aggregation import InsulinStats, summarize_insulin
from glycotrack.services.glucose import RECORD_NOT_FOUND, Page
from glycotrack.services.measurement_store import MeasurementFilter, MeasurementStore

logger = get_logger(__name__)


def insulin_store(db: AsyncSession) -> MeasurementStore[InsulinRecord]:
    return MeasurementStore(InsulinRecord, db)


async def create_insulin_record(
    user_id: uuid.UUID,
    body: InsulinRecordCreate,
    db: AsyncSession,
) -> InsulinRecord:
    """Record an insulin dose.

    Raises:
        ConflictError: If a dose already exists for this date and period.
    """
    record = InsulinRecord(
        user_id=user_id,
        record_date=body.date,
        period=body.period,
        insulin_type=body.insulin_type,
        units=body.units,
        notes=body.notes,
    )
    record = await insulin_store(db).insert(record)

    logger.info(
        "Insulin record created",
        user_id=str(user_id),
        record_id=str(record.id),
        period=record.period.value,
    )
    return record


async def list_insulin_records(
    user_id: uuid.UUID,
    filters: MeasurementFilter,
    page: int,
    limit: int,
    db: AsyncSession,
) -> tuple[list[InsulinRecord], Page, InsulinStats]:
    store = insulin_store(db)
    records = await store.query(user_id, filters, page=page, limit=limit)
    matching = await store.list_for_user(user_id, filters)
    stats = summarize_insulin(matching)
    return records, Page(page=page, limit=limit, total=len(matching)), stats


async def update_insulin_record(
    record_id: uuid.UUID,
    user_id: uuid.UUID,
    body: InsulinRecordUpdate,
    db: AsyncSession,
) -> InsulinRecord:
    # Only notes may be cleared; null for the other fields means "keep"
    fields = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None or key == "notes"
    }
    record = await insulin_store(db).update(record_id, user_id, fields)
    if record is None:
        raise NotFoundError(RECORD_NOT_FOUND)
    return record


async def delete_insulin_record(
    record_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
) -> None:
    if not await insulin_store(db).delete(record_id, user_id):
        raise NotFoundError(RECORD_NOT_FOUND)

    logger.info(
        "Insulin record deleted",
        user_id=str(user_id),
        record_id=str(record_id),
    )
