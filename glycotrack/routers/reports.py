"""Reports router.

Dashboard, glucose analysis, insulin effectiveness and CSV export.
"""

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.core.auth import get_current_user
from glycotrack.database import get_db
from glycotrack.models.user import User
from glycotrack.schemas.glucose import GlucoseRecordResponse
from glycotrack.schemas.reports import (
    DashboardCharts,
    DashboardResponse,
    DashboardStatsResponse,
    DateWindow,
    DayPatternResponse,
    DoseEffectivenessResponse,
    GlucoseAnalysisResponse,
    GlucoseChartPoint,
    InsulinChartPoint,
    InsulinEffectivenessResponse,
    PeriodCorrelationResponse,
    PeriodStatsResponse,
    TargetRange,
    TimeInRangeResponse,
    WeeklyTrendResponse,
)
from glycotrack.services.reports import (
    analyze_glucose,
    analyze_insulin_effectiveness,
    build_dashboard,
    export_csv,
    today,
)

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DashboardResponse:
    dashboard = await build_dashboard(user.id, db)
    return DashboardResponse(
        stats=DashboardStatsResponse.model_validate(dashboard.stats),
        charts=DashboardCharts(
            glucose=[
                GlucoseChartPoint.model_validate(r) for r in dashboard.glucose_chart
            ],
            insulin=[
                InsulinChartPoint.model_validate(r) for r in dashboard.insulin_chart
            ],
        ),
        recent_records=[
            GlucoseRecordResponse.model_validate(r) for r in dashboard.recent_records
        ],
    )


@router.get("/glucose-analysis", response_model=GlucoseAnalysisResponse)
async def get_glucose_analysis(
    start_date: date | None = Query(
        default=None, description="Defaults to 30 days ago"
    ),
    end_date: date | None = Query(default=None, description="Defaults to today"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> GlucoseAnalysisResponse:
    analysis = await analyze_glucose(user, start_date, end_date, db)
    return GlucoseAnalysisResponse(
        period=DateWindow(start=analysis.start, end=analysis.end),
        targets=TargetRange(min=analysis.target_min, max=analysis.target_max),
        analysis_by_period=[
            PeriodStatsResponse.model_validate(p) for p in analysis.analysis_by_period
        ],
        time_in_range=TimeInRangeResponse.model_validate(analysis.time_in_range),
        weekly_trends=[
            WeeklyTrendResponse.model_validate(w) for w in analysis.weekly_trends
        ],
        day_patterns=[
            DayPatternResponse.model_validate(d) for d in analysis.day_patterns
        ],
    )


@router.get("/insulin-effectiveness", response_model=InsulinEffectivenessResponse)
async def get_insulin_effectiveness(
    start_date: date | None = Query(
        default=None, description="Defaults to 30 days ago"
    ),
    end_date: date | None = Query(default=None, description="Defaults to today"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> InsulinEffectivenessResponse:
    report = await analyze_insulin_effectiveness(user.id, start_date, end_date, db)
    return InsulinEffectivenessResponse(
        period=DateWindow(start=report.start, end=report.end),
        correlation_by_period=[
            PeriodCorrelationResponse.model_validate(c)
            for c in report.effectiveness.correlation_by_period
        ],
        dose_effectiveness=[
            DoseEffectivenessResponse.model_validate(d)
            for d in report.effectiveness.dose_effectiveness
        ],
    )


@router.get("/export")
async def get_export(
    type: Literal["all", "glucose", "insulin"] = Query(default="all"),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Download records as CSV."""
    content = await export_csv(user.id, type, start_date, end_date, db)
    filename = f"glycotrack_export_{today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
