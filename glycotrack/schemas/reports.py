"""Report schemas."""

import datetime

from pydantic import BaseModel, ConfigDict, Field

from glycotrack.models.glucose import GlucosePeriod
from glycotrack.models.insulin import InsulinPeriod
from glycotrack.schemas.glucose import GlucoseRecordResponse


class DashboardStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_records: int = Field(..., description="All glucose records")
    avg_glucose_week: int = Field(..., description="Rounded mean, last 7 days")
    avg_glucose_month: int = Field(..., description="Rounded mean, last 30 days")
    total_insulin_week: float = Field(..., description="Units, last 7 days")
    unread_alerts: int


class GlucoseChartPoint(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime.date = Field(..., validation_alias="record_date")
    period: GlucosePeriod
    value: int = Field(..., validation_alias="glucose_value")


class InsulinChartPoint(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime.date = Field(..., validation_alias="record_date")
    period: InsulinPeriod
    units: float


class DashboardCharts(BaseModel):
    glucose: list[GlucoseChartPoint]
    insulin: list[InsulinChartPoint]


class DashboardResponse(BaseModel):
    """Headline stats, 7-day chart data and the most recent readings."""

    stats: DashboardStatsResponse
    charts: DashboardCharts
    recent_records: list[GlucoseRecordResponse]


class DateWindow(BaseModel):
    start: datetime.date
    end: datetime.date


class TargetRange(BaseModel):
    min: int
    max: int


class PeriodStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period: str
    average: int
    minimum: int
    maximum: int
    count: int


class TimeInRangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    in_range: int
    below_range: int
    above_range: int
    total: int
    in_range_percentage: int = Field(..., ge=0, le=100)


class WeeklyTrendResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    week: datetime.date = Field(..., description="Monday of the week")
    average_glucose: int
    measurements: int


class DayPatternResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday")
    average_glucose: int
    count: int


class GlucoseAnalysisResponse(BaseModel):
    period: DateWindow
    targets: TargetRange
    analysis_by_period: list[PeriodStatsResponse]
    time_in_range: TimeInRangeResponse
    weekly_trends: list[WeeklyTrendResponse]
    day_patterns: list[DayPatternResponse]


class PeriodCorrelationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period: str
    average_insulin: float
    average_glucose_before: int
    average_glucose_after: int
    average_glucose_change: int
    count: int


class DoseEffectivenessResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    dose_range: str
    average_post_glucose: int
    count: int


class InsulinEffectivenessResponse(BaseModel):
    period: DateWindow
    correlation_by_period: list[PeriodCorrelationResponse]
    dose_effectiveness: list[DoseEffectivenessResponse]
