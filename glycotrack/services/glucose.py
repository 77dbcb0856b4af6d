"""Glucose measurement use-cases.

Create, list, update and delete glucose records. Creation runs the
threshold evaluator once the record is committed.
"""

import math
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.core.errors import NotFoundError
from glycotrack.database import Database
from glycotrack.logging_config import get_logger
from glycotrack.models.glucose import GlucoseRecord
from glycotrack.models.user import User
from glycotrack.schemas.glucose import GlucoseRecordCreate, GlucoseRecordUpdate
from glycotrack.services.aggregation import GlucoseStats, summarize_glucose
from glycotrack.services.measurement_store import MeasurementFilter, MeasurementStore
from glycotrack.services.threshold import raise_threshold_alert

logger = get_logger(__name__)

RECORD_NOT_FOUND = "Record not found"


@dataclass
class Page:
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def glucose_store(db: AsyncSession) -> MeasurementStore[GlucoseRecord]:
    return MeasurementStore(GlucoseRecord, db)


async def create_glucose_record(
    user: User,
    body: GlucoseRecordCreate,
    db: AsyncSession,
    database: Database,
) -> GlucoseRecord:
    """Record a glucose value and alert if it is outside the target range.

    Raises:
        ConflictError: If the user already has a value for this date and
            period. Nothing is written and no alert is raised.
    """
    record = GlucoseRecord(
        user_id=user.id,
        record_date=body.date,
        period=body.period,
        glucose_value=body.glucose_value,
        notes=body.notes,
    )
    record = await glucose_store(db).insert(record)

    logger.info(
        "Glucose record created",
        user_id=str(user.id),
        record_id=str(record.id),
        period=record.period.value,
    )

    await raise_threshold_alert(
        database,
        user.id,
        record.glucose_value,
        user.target_glucose_min,
        user.target_glucose_max,
    )
    return record


async def list_glucose_records(
    user_id: uuid.UUID,
    filters: MeasurementFilter,
    page: int,
    limit: int,
    db: AsyncSession,
) -> tuple[list[GlucoseRecord], Page, GlucoseStats]:
    """One page of records plus stats over the whole filtered set."""
    store = glucose_store(db)
    records = await store.query(user_id, filters, page=page, limit=limit)
    matching = await store.list_for_user(user_id, filters)
    stats = summarize_glucose(matching)
    return records, Page(page=page, limit=limit, total=len(matching)), stats


async def update_glucose_record(
    record_id: uuid.UUID,
    user_id: uuid.UUID,
    body: GlucoseRecordUpdate,
    db: AsyncSession,
) -> GlucoseRecord:
    """Change the value and/or notes of an owned record.

    Raises:
        NotFoundError: If the record does not exist or is not owned.
    """
    fields = body.model_dump(exclude_unset=True)
    if fields.get("glucose_value") is None:
        fields.pop("glucose_value", None)
    record = await glucose_store(db).update(record_id, user_id, fields)
    if record is None:
        raise NotFoundError(RECORD_NOT_FOUND)
    return record


async def delete_glucose_record(
    record_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
) -> None:
    if not await glucose_store(db).delete(record_id, user_id):
        raise NotFoundError(RECORD_NOT_FOUND)

    logger.info(
        "Glucose record deleted",
        user_id=str(user_id),
        record_id=str(record_id),
    )
