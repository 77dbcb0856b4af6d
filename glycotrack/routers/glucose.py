"""Glucose records router.

Record, list, update and delete glucose measurements.
"""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.config import settings
from glycotrack.core.auth import get_current_user
from glycotrack.database import Database, get_database, get_db
from glycotrack.models.glucose import GlucosePeriod
from glycotrack.models.user import User
from glycotrack.schemas.glucose import (
    GlucoseListResponse,
    GlucoseRecordCreate,
    GlucoseRecordMessage,
    GlucoseRecordResponse,
    GlucoseRecordUpdate,
    GlucoseStatsResponse,
    MessageResponse,
    PaginationResponse,
)
from glycotrack.services.glucose import (
    create_glucose_record,
    delete_glucose_record,
    list_glucose_records,
    update_glucose_record,
)
from glycotrack.services.measurement_store import MeasurementFilter

router = APIRouter(prefix="/api/glucose", tags=["glucose"])


@router.post(
    "",
    response_model=GlucoseRecordMessage,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "A record already exists for this slot"}},
)
async def create_record(
    body: GlucoseRecordCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    database: Database = Depends(get_database),
) -> GlucoseRecordMessage:
    """Record a glucose measurement.

    Raises a low/high alert when the value falls outside the user's
    target range.
    """
    record = await create_glucose_record(user, body, db, database)
    return GlucoseRecordMessage(
        message="Record created successfully",
        record=GlucoseRecordResponse.model_validate(record),
    )


@router.get("", response_model=GlucoseListResponse)
async def list_records(
    start_date: date | None = Query(default=None, description="Inclusive lower bound"),
    end_date: date | None = Query(default=None, description="Inclusive upper bound"),
    period: GlucosePeriod | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(
        default=settings.default_page_size, ge=1, le=settings.max_page_size
    ),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> GlucoseListResponse:
    """List records newest first, with stats over the whole filtered set."""
    filters = MeasurementFilter(start_date=start_date, end_date=end_date, period=period)
    records, pagination, stats = await list_glucose_records(
        user.id, filters, page, limit, db
    )
    return GlucoseListResponse(
        records=[GlucoseRecordResponse.model_validate(r) for r in records],
        pagination=PaginationResponse(
            page=pagination.page,
            limit=pagination.limit,
            total=pagination.total,
            pages=pagination.pages,
        ),
        stats=GlucoseStatsResponse(
            average=stats.average,
            minimum=stats.minimum,
            maximum=stats.maximum,
            count=stats.count,
        ),
    )


@router.put("/{record_id}", response_model=GlucoseRecordMessage)
async def update_record(
    record_id: uuid.UUID,
    body: GlucoseRecordUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> GlucoseRecordMessage:
    """Update the value and/or notes of a record."""
    record = await update_glucose_record(record_id, user.id, body, db)
    return GlucoseRecordMessage(
        message="Record updated successfully",
        record=GlucoseRecordResponse.model_validate(record),
    )


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_record(
    record_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await delete_glucose_record(record_id, user.id, db)
    return MessageResponse(message="Record deleted successfully")
