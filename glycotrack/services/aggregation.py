"""Aggregate statistics over measurement records.

Pure functions, always recomputed from the records passed in. Glucose
averages and percentages round half-up to whole mg/dL / whole percent;
insulin sums use exact decimal arithmetic.

Every function accepts any object exposing ``record_date`` and ``period``
plus ``glucose_value`` (glucose) or ``units`` (insulin), so ORM rows and
plain test doubles work alike.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from glycotrack.models.glucose import GlucosePeriod
from glycotrack.models.insulin import InsulinPeriod
from glycotrack.services.measurement_store import MeasurementFilter, apply_filter


@dataclass
class GlucoseStats:
    average: int = 0
    minimum: int = 0
    maximum: int = 0
    count: int = 0


@dataclass
class InsulinStats:
    average: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    count: int = 0
    total: float = 0.0


@dataclass
class TimeInRange:
    """Exhaustive partition of readings against [target_min, target_max]."""

    in_range: int = 0
    below_range: int = 0
    above_range: int = 0
    total: int = 0
    in_range_percentage: int = 0


@dataclass
class PeriodStats:
    period: str
    average: int
    minimum: int
    maximum: int
    count: int


@dataclass
class WeeklyTrend:
    week: date  # Monday of the ISO week
    average_glucose: int
    measurements: int


@dataclass
class DayPattern:
    day_of_week: int  # 0 = Sunday ... 6 = Saturday
    average_glucose: int
    count: int


@dataclass
class PeriodCorrelation:
    period: str
    average_insulin: float
    average_glucose_before: int
    average_glucose_after: int
    average_glucose_change: int
    count: int


@dataclass
class DoseEffectiveness:
    dose_range: str
    average_post_glucose: int
    count: int


@dataclass
class InsulinEffectiveness:
    correlation_by_period: list[PeriodCorrelation] = field(default_factory=list)
    dose_effectiveness: list[DoseEffectiveness] = field(default_factory=list)


def round_half_up(value: float | Decimal) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _mean(values: Sequence[int]) -> int:
    return round_half_up(Decimal(sum(values)) / len(values)) if values else 0


def _period_key(period: Any) -> str:
    return period.value if hasattr(period, "value") else str(period)


def _glucose_values(records: Iterable[Any]) -> list[int]:
    return [int(r.glucose_value) for r in records]


def summarize_glucose(
    records: Sequence[Any],
    filters: MeasurementFilter | None = None,
) -> GlucoseStats:
    """Average/min/max/count over the filtered glucose records.

    An empty filtered set yields all zeros.
    """
    values = _glucose_values(apply_filter(records, filters))
    if not values:
        return GlucoseStats()
    return GlucoseStats(
        average=_mean(values),
        minimum=min(values),
        maximum=max(values),
        count=len(values),
    )


def summarize_insulin(
    records: Sequence[Any],
    filters: MeasurementFilter | None = None,
) -> InsulinStats:
    """Average/min/max/count/total units over the filtered insulin records."""
    units = [Decimal(str(r.units)) for r in apply_filter(records, filters)]
    if not units:
        return InsulinStats()
    total = sum(units, Decimal("0"))
    return InsulinStats(
        average=float(total / len(units)),
        minimum=float(min(units)),
        maximum=float(max(units)),
        count=len(units),
        total=float(total),
    )


def time_in_range(
    records: Sequence[Any],
    target_min: int,
    target_max: int,
    filters: MeasurementFilter | None = None,
) -> TimeInRange:
    """Partition readings into below / in / above the target range.

    Both bounds are inclusive for ``in_range``, so each reading lands in
    exactly one bucket. The percentage is 0 for an empty set.
    """
    result = TimeInRange()
    for value in _glucose_values(apply_filter(records, filters)):
        if value < target_min:
            result.below_range += 1
        elif value > target_max:
            result.above_range += 1
        else:
            result.in_range += 1
    result.total = result.in_range + result.below_range + result.above_range
    if result.total:
        result.in_range_percentage = round_half_up(
            Decimal(result.in_range) / result.total * 100
        )
    return result


def _stats_for(period: str, values: list[int]) -> PeriodStats:
    return PeriodStats(
        period=period,
        average=_mean(values),
        minimum=min(values),
        maximum=max(values),
        count=len(values),
    )


def group_by_period(
    records: Sequence[Any],
    filters: MeasurementFilter | None = None,
) -> list[PeriodStats]:
    """Independent stats per meal/time slot, in slot order.

    Slots without readings are omitted.
    """
    grouped: dict[str, list[int]] = defaultdict(list)
    for record in apply_filter(records, filters):
        grouped[_period_key(record.period)].append(int(record.glucose_value))

    order = [p.value for p in GlucosePeriod]
    keys = sorted(grouped, key=lambda k: order.index(k) if k in order else len(order))
    return [_stats_for(key, grouped[key]) for key in keys]


def weekly_trends(records: Sequence[Any]) -> list[WeeklyTrend]:
    """Average glucose per ISO week (weeks start on Monday), oldest first."""
    weeks: dict[date, list[int]] = defaultdict(list)
    for record in records:
        week_start = record.record_date - timedelta(days=record.record_date.weekday())
        weeks[week_start].append(int(record.glucose_value))
    return [
        WeeklyTrend(week=week, average_glucose=_mean(values), measurements=len(values))
        for week, values in sorted(weeks.items())
    ]


def day_of_week_patterns(records: Sequence[Any]) -> list[DayPattern]:
    """Average glucose per weekday, 0 = Sunday."""
    days: dict[int, list[int]] = defaultdict(list)
    for record in records:
        days[record.record_date.isoweekday() % 7].append(int(record.glucose_value))
    return [
        DayPattern(day_of_week=day, average_glucose=_mean(values), count=len(values))
        for day, values in sorted(days.items())
    ]


# Insulin slot -> (glucose before the meal, glucose after the meal)
MEAL_GLUCOSE_PAIRS = {
    InsulinPeriod.BREAKFAST.value: (
        GlucosePeriod.BEFORE_BREAKFAST.value,
        GlucosePeriod.AFTER_BREAKFAST.value,
    ),
    InsulinPeriod.LUNCH.value: (
        GlucosePeriod.BEFORE_LUNCH.value,
        GlucosePeriod.AFTER_LUNCH.value,
    ),
    InsulinPeriod.DINNER.value: (
        GlucosePeriod.BEFORE_DINNER.value,
        GlucosePeriod.AFTER_DINNER.value,
    ),
}

DOSE_RANGES: list[tuple[str, Decimal | None]] = [
    ("0-5", Decimal("5")),
    ("6-10", Decimal("10")),
    ("11-15", Decimal("15")),
    ("16+", None),
]


def dose_range_for(units: Decimal) -> str:
    """Bucket label for a dose; upper bounds are inclusive."""
    for label, upper in DOSE_RANGES:
        if upper is None or units <= upper:
            return label
    return DOSE_RANGES[-1][0]


def insulin_effectiveness(
    insulin_records: Sequence[Any],
    glucose_records: Sequence[Any],
) -> InsulinEffectiveness:
    """Pair meal doses with same-day pre/post-meal glucose readings.

    Bedtime doses have no meal pair and are ignored.
    """
    glucose_by_slot: dict[tuple[date, str], int] = {}
    for record in glucose_records:
        slot = (record.record_date, _period_key(record.period))
        glucose_by_slot[slot] = int(record.glucose_value)

    paired: dict[str, list[tuple[Decimal, int, int]]] = defaultdict(list)
    by_dose: dict[str, list[int]] = defaultdict(list)

    for dose in insulin_records:
        period = _period_key(dose.period)
        pair = MEAL_GLUCOSE_PAIRS.get(period)
        if pair is None:
            continue
        units = Decimal(str(dose.units))
        before = glucose_by_slot.get((dose.record_date, pair[0]))
        after = glucose_by_slot.get((dose.record_date, pair[1]))

        if after is not None:
            by_dose[dose_range_for(units)].append(after)
        if before is not None and after is not None:
            paired[period].append((units, before, after))

    correlation = []
    for period in MEAL_GLUCOSE_PAIRS:
        rows = paired.get(period)
        if not rows:
            continue
        total_units = sum((u for u, _, _ in rows), Decimal("0"))
        correlation.append(
            PeriodCorrelation(
                period=period,
                average_insulin=float(total_units / len(rows)),
                average_glucose_before=_mean([b for _, b, _ in rows]),
                average_glucose_after=_mean([a for _, _, a in rows]),
                average_glucose_change=round_half_up(
                    Decimal(sum(a - b for _, b, a in rows)) / len(rows)
                ),
                count=len(rows),
            )
        )

    doses = [
        DoseEffectiveness(
            dose_range=label,
            average_post_glucose=_mean(by_dose[label]),
            count=len(by_dose[label]),
        )
        for label, _ in DOSE_RANGES
        if by_dose.get(label)
    ]

    return InsulinEffectiveness(
        correlation_by_period=correlation,
        dose_effectiveness=doses,
    )
