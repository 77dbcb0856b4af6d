"""Tests for the aggregate statistics over measurement records."""

from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

from glycotrack.models.glucose import GlucosePeriod
from glycotrack.models.insulin import InsulinPeriod
from glycotrack.services.aggregation import (
    day_of_week_patterns,
    dose_range_for,
    group_by_period,
    insulin_effectiveness,
    round_half_up,
    summarize_glucose,
    summarize_insulin,
    time_in_range,
    weekly_trends,
)
from glycotrack.services.measurement_store import MeasurementFilter

MONDAY = date(2026, 1, 5)


def glucose(value, period=GlucosePeriod.FASTING, day=MONDAY):
    return SimpleNamespace(record_date=day, period=period, glucose_value=value)


def insulin(units, period=InsulinPeriod.BREAKFAST, day=MONDAY):
    return SimpleNamespace(record_date=day, period=period, units=Decimal(units))


class TestRounding:
    def test_half_rounds_up(self):
        assert round_half_up(100.5) == 101
        assert round_half_up(Decimal("62.5")) == 63

    def test_below_half_rounds_down(self):
        assert round_half_up(100.49) == 100


class TestSummarizeGlucose:
    def test_empty_set_is_all_zeros(self):
        stats = summarize_glucose([])
        assert (stats.average, stats.minimum, stats.maximum, stats.count) == (
            0,
            0,
            0,
            0,
        )

    def test_basic_stats(self):
        stats = summarize_glucose([glucose(100), glucose(150), glucose(201)])

        assert stats.count == 3
        assert stats.minimum == 100
        assert stats.maximum == 201
        # 451 / 3 = 150.33
        assert stats.average == 150

    def test_average_rounds_half_up(self):
        stats = summarize_glucose([glucose(100), glucose(101)])
        assert stats.average == 101

    def test_filter_applies(self):
        records = [
            glucose(100, day=MONDAY),
            glucose(200, day=MONDAY + timedelta(days=3)),
        ]
        stats = summarize_glucose(
            records, MeasurementFilter(start_date=MONDAY + timedelta(days=1))
        )
        assert stats.count == 1
        assert stats.average == 200

    def test_filter_matching_nothing_is_zeros(self):
        stats = summarize_glucose(
            [glucose(100)], MeasurementFilter(period=GlucosePeriod.BEDTIME.value)
        )
        assert stats.count == 0
        assert stats.average == 0


class TestSummarizeInsulin:
    def test_empty_set_is_all_zeros(self):
        stats = summarize_insulin([])
        assert stats.count == 0
        assert stats.total == 0.0

    def test_exact_decimal_totals(self):
        stats = summarize_insulin([insulin("0.1"), insulin("0.2"), insulin("4.50")])

        assert stats.total == 4.8
        assert stats.minimum == 0.1
        assert stats.maximum == 4.5
        assert stats.count == 3
        assert stats.average == 1.6


class TestTimeInRange:
    def test_partition_is_exhaustive(self):
        tir = time_in_range(
            [glucose(50), glucose(75), glucose(190), glucose(120)], 70, 180
        )

        assert tir.below_range == 1
        assert tir.in_range == 2
        assert tir.above_range == 1
        assert tir.total == 4
        assert tir.in_range_percentage == 50

    def test_bounds_are_in_range(self):
        tir = time_in_range([glucose(70), glucose(180)], 70, 180)
        assert tir.in_range == 2
        assert tir.in_range_percentage == 100

    def test_empty_set(self):
        tir = time_in_range([], 70, 180)
        assert tir.total == 0
        assert tir.in_range_percentage == 0

    def test_percentage_rounds_half_up(self):
        # 1 of 8 in range = 12.5%
        records = [glucose(100)] + [glucose(300)] * 7
        assert time_in_range(records, 70, 180).in_range_percentage == 13


class TestGroupByPeriod:
    def test_groups_in_slot_order(self):
        records = [
            glucose(200, GlucosePeriod.BEDTIME),
            glucose(90, GlucosePeriod.FASTING),
            glucose(110, GlucosePeriod.FASTING),
            glucose(160, GlucosePeriod.AFTER_LUNCH),
        ]
        groups = group_by_period(records)

        assert [g.period for g in groups] == ["fasting", "after_lunch", "bedtime"]
        fasting = groups[0]
        assert fasting.average == 100
        assert fasting.minimum == 90
        assert fasting.maximum == 110
        assert fasting.count == 2

    def test_empty_periods_are_omitted(self):
        assert group_by_period([]) == []


class TestTrendsAndPatterns:
    def test_weekly_trends_start_on_monday(self):
        records = [
            glucose(100, day=MONDAY),
            glucose(140, day=MONDAY + timedelta(days=6)),
            glucose(200, day=MONDAY + timedelta(days=7)),
        ]
        trends = weekly_trends(records)

        assert [t.week for t in trends] == [MONDAY, MONDAY + timedelta(days=7)]
        assert trends[0].average_glucose == 120
        assert trends[0].measurements == 2
        assert trends[1].measurements == 1

    def test_day_patterns_sunday_is_zero(self):
        sunday = MONDAY - timedelta(days=1)
        patterns = day_of_week_patterns([glucose(150, day=sunday), glucose(90)])

        assert [p.day_of_week for p in patterns] == [0, 1]
        assert patterns[0].average_glucose == 150


class TestInsulinEffectiveness:
    def test_dose_ranges(self):
        assert dose_range_for(Decimal("5")) == "0-5"
        assert dose_range_for(Decimal("5.5")) == "6-10"
        assert dose_range_for(Decimal("15")) == "11-15"
        assert dose_range_for(Decimal("22")) == "16+"

    def test_pairs_meal_doses_with_same_day_readings(self):
        day2 = MONDAY + timedelta(days=1)
        doses = [
            insulin("4", InsulinPeriod.BREAKFAST, MONDAY),
            insulin("8", InsulinPeriod.BREAKFAST, day2),
            insulin("10", InsulinPeriod.BEDTIME, MONDAY),
        ]
        readings = [
            glucose(180, GlucosePeriod.BEFORE_BREAKFAST, MONDAY),
            glucose(140, GlucosePeriod.AFTER_BREAKFAST, MONDAY),
            glucose(200, GlucosePeriod.BEFORE_BREAKFAST, day2),
            glucose(150, GlucosePeriod.AFTER_BREAKFAST, day2),
        ]

        result = insulin_effectiveness(doses, readings)

        assert len(result.correlation_by_period) == 1
        breakfast = result.correlation_by_period[0]
        assert breakfast.period == "breakfast"
        assert breakfast.count == 2
        assert breakfast.average_insulin == 6.0
        assert breakfast.average_glucose_before == 190
        assert breakfast.average_glucose_after == 145
        assert breakfast.average_glucose_change == -45

        assert [(d.dose_range, d.count) for d in result.dose_effectiveness] == [
            ("0-5", 1),
            ("6-10", 1),
        ]

    def test_dose_without_after_reading_is_skipped(self):
        result = insulin_effectiveness(
            [insulin("4", InsulinPeriod.LUNCH)],
            [glucose(150, GlucosePeriod.BEFORE_LUNCH)],
        )
        assert result.correlation_by_period == []
        assert result.dose_effectiveness == []
