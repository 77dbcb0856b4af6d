"""Report use-cases: dashboard, glucose analysis, insulin effectiveness, CSV.

All figures are recomputed from the measurement store on every call.
"""

import csv
import io
import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Literal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.logging_config import get_logger
from glycotrack.models.base import utcnow
from glycotrack.models.glucose import GlucoseRecord
from glycotrack.models.insulin import InsulinRecord
from glycotrack.models.user import User
from glycotrack.services.aggregation import (
    DayPattern,
    InsulinEffectiveness,
    PeriodStats,
    TimeInRange,
    WeeklyTrend,
    day_of_week_patterns,
    group_by_period,
    insulin_effectiveness,
    summarize_glucose,
    time_in_range,
    weekly_trends,
)
from glycotrack.services.alert_feed import count_unread
from glycotrack.services.glucose import glucose_store
from glycotrack.services.insulin import insulin_store
from glycotrack.services.measurement_store import MeasurementFilter, apply_filter

logger = get_logger(__name__)

DEFAULT_ANALYSIS_DAYS = 30
RECENT_RECORDS_LIMIT = 10

ExportType = Literal["all", "glucose", "insulin"]


@dataclass
class DashboardStats:
    total_records: int
    avg_glucose_week: int
    avg_glucose_month: int
    total_insulin_week: float
    unread_alerts: int


@dataclass
class Dashboard:
    stats: DashboardStats
    glucose_chart: list[GlucoseRecord]
    insulin_chart: list[InsulinRecord]
    recent_records: list[GlucoseRecord]


@dataclass
class GlucoseAnalysis:
    start: date
    end: date
    target_min: int
    target_max: int
    analysis_by_period: list[PeriodStats]
    time_in_range: TimeInRange
    weekly_trends: list[WeeklyTrend]
    day_patterns: list[DayPattern]


@dataclass
class EffectivenessReport:
    start: date
    end: date
    effectiveness: InsulinEffectiveness


def today() -> date:
    return utcnow().date()


def resolve_window(
    start_date: date | None,
    end_date: date | None,
    days: int = DEFAULT_ANALYSIS_DAYS,
) -> tuple[date, date]:
    """Fill in a missing window with the last ``days`` days up to today."""
    end = end_date or today()
    start = start_date or today() - timedelta(days=days)
    return start, end


def _chart_order(record) -> tuple:
    return (record.record_date, record.period.value)


async def build_dashboard(user_id: uuid.UUID, db: AsyncSession) -> Dashboard:
    """Headline stats, 7-day chart points and the latest readings."""
    last_week = MeasurementFilter(start_date=today() - timedelta(days=7))
    last_month = MeasurementFilter(start_date=today() - timedelta(days=30))

    glucose = glucose_store(db)
    insulin = insulin_store(db)

    month_glucose = await glucose.list_for_user(user_id, last_month)
    week_glucose = apply_filter(month_glucose, last_week)
    week_insulin = await insulin.list_for_user(user_id, last_week)

    total_insulin = sum((Decimal(str(r.units)) for r in week_insulin), Decimal("0"))

    stats = DashboardStats(
        total_records=await glucose.count(user_id),
        avg_glucose_week=summarize_glucose(week_glucose).average,
        avg_glucose_month=summarize_glucose(month_glucose).average,
        total_insulin_week=float(total_insulin),
        unread_alerts=await count_unread(user_id, db),
    )

    result = await db.execute(
        select(GlucoseRecord)
        .where(GlucoseRecord.user_id == user_id)
        .order_by(GlucoseRecord.created_at.desc())
        .limit(RECENT_RECORDS_LIMIT)
    )

    return Dashboard(
        stats=stats,
        glucose_chart=sorted(week_glucose, key=_chart_order),
        insulin_chart=sorted(week_insulin, key=_chart_order),
        recent_records=list(result.scalars().all()),
    )


async def analyze_glucose(
    user: User,
    start_date: date | None,
    end_date: date | None,
    db: AsyncSession,
) -> GlucoseAnalysis:
    """Per-period stats, time in range, weekly trends and weekday patterns."""
    start, end = resolve_window(start_date, end_date)
    records = await glucose_store(db).list_for_user(
        user.id, MeasurementFilter(start_date=start, end_date=end)
    )

    return GlucoseAnalysis(
        start=start,
        end=end,
        target_min=user.target_glucose_min,
        target_max=user.target_glucose_max,
        analysis_by_period=group_by_period(records),
        time_in_range=time_in_range(
            records, user.target_glucose_min, user.target_glucose_max
        ),
        weekly_trends=weekly_trends(records),
        day_patterns=day_of_week_patterns(records),
    )


async def analyze_insulin_effectiveness(
    user_id: uuid.UUID,
    start_date: date | None,
    end_date: date | None,
    db: AsyncSession,
) -> EffectivenessReport:
    start, end = resolve_window(start_date, end_date)
    window = MeasurementFilter(start_date=start, end_date=end)
    insulin = await insulin_store(db).list_for_user(user_id, window)
    glucose = await glucose_store(db).list_for_user(user_id, window)
    return EffectivenessReport(
        start=start,
        end=end,
        effectiveness=insulin_effectiveness(insulin, glucose),
    )


GLUCOSE_CSV_HEADER = ["Date", "Period", "Glucose (mg/dL)", "Notes", "Created at"]
INSULIN_CSV_HEADER = [
    "Date",
    "Period",
    "Insulin type",
    "Units",
    "Notes",
    "Created at",
]


async def export_csv(
    user_id: uuid.UUID,
    export_type: ExportType,
    start_date: date | None,
    end_date: date | None,
    db: AsyncSession,
) -> str:
    """Render the user's records as CSV, glucose and/or insulin sections.

    Sections are separated by a blank line and sorted by date then period.
    """
    window = MeasurementFilter(start_date=start_date, end_date=end_date)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    if export_type in ("all", "glucose"):
        records = await glucose_store(db).list_for_user(user_id, window)
        writer.writerow(GLUCOSE_CSV_HEADER)
        for r in sorted(records, key=_chart_order):
            writer.writerow(
                [
                    r.record_date.isoformat(),
                    r.period.value,
                    r.glucose_value,
                    r.notes or "",
                    r.created_at.isoformat(),
                ]
            )

    if export_type in ("all", "insulin"):
        if buffer.tell():
            buffer.write("\n")
        records = await insulin_store(db).list_for_user(user_id, window)
        writer.writerow(INSULIN_CSV_HEADER)
        for r in sorted(records, key=_chart_order):
            writer.writerow(
                [
                    r.record_date.isoformat(),
                    r.period.value,
                    r.insulin_type.value,
                    f"{Decimal(str(r.units)):.2f}",
                    r.notes or "",
                    r.created_at.isoformat(),
                ]
            )

    logger.info(
        "Exported records as CSV",
        user_id=str(user_id),
        export_type=export_type,
    )
    return buffer.getvalue()
