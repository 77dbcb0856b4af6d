"""Insulin records router."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.config import settings
from glycotrack.core.auth import get_current_user
from glycotrack.database import get_db
from glycotrack.models.insulin import InsulinPeriod
from glycotrack.models.user import User
from glycotrack.schemas.glucose import MessageResponse, PaginationResponse
from glycotrack.schemas.insulin import (
    InsulinListResponse,
    InsulinRecordCreate,
    InsulinRecordMessage,
    InsulinRecordResponse,
    InsulinRecordUpdate,
    InsulinStatsResponse,
)
from glycotrack.services.insulin import (
    create_insulin_record,
    delete_insulin_record,
    list_insulin_records,
    update_insulin_record,
)
from glycotrack.services.measurement_store import MeasurementFilter

router = APIRouter(prefix="/api/insulin", tags=["insulin"])


@router.post(
    "",
    response_model=InsulinRecordMessage,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "A record already exists for this slot"}},
)
async def create_record(
    body: InsulinRecordCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> InsulinRecordMessage:
    """Record an insulin dose."""
    record = await create_insulin_record(user.id, body, db)
    return InsulinRecordMessage(
        message="Record created successfully",
        record=InsulinRecordResponse.model_validate(record),
    )


@router.get("", response_model=InsulinListResponse)
async def list_records(
    start_date: date | None = Query(default=None, description="Inclusive lower bound"),
    end_date: date | None = Query(default=None, description="Inclusive upper bound"),
    period: InsulinPeriod | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(
        default=settings.default_page_size, ge=1, le=settings.max_page_size
    ),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> InsulinListResponse:
    """List doses newest first, with stats over the whole filtered set."""
    filters = MeasurementFilter(start_date=start_date, end_date=end_date, period=period)
    records, pagination, stats = await list_insulin_records(
        user.id, filters, page, limit, db
    )
    return InsulinListResponse(
        records=[InsulinRecordResponse.model_validate(r) for r in records],
        pagination=PaginationResponse(
            page=pagination.page,
            limit=pagination.limit,
            total=pagination.total,
            pages=pagination.pages,
        ),
        stats=InsulinStatsResponse(
            average=stats.average,
            minimum=stats.minimum,
            maximum=stats.maximum,
            count=stats.count,
            total=stats.total,
        ),
    )


@router.put("/{record_id}", response_model=InsulinRecordMessage)
async def update_record(
    record_id: uuid.UUID,
    body: InsulinRecordUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> InsulinRecordMessage:
    record = await update_insulin_record(record_id, user.id, body, db)
    return InsulinRecordMessage(
        message="Record updated successfully",
        record=InsulinRecordResponse.model_validate(record),
    )


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_record(
    record_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await delete_insulin_record(record_id, user.id, db)
    return MessageResponse(message="Record deleted successfully")
