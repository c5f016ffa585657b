"""Bucket daily step records into chart points.

Pure functions that turn a flat list of daily records into daily, weekly or
monthly buckets plus summary stats. No side effects, no I/O. Dates missing
from the input count as zero, so every window renders a full axis.
"""

from __future__ import annotations

import math
from datetime import timedelta

from stepper_history.dates import add_months, first_of_month, get_monday, get_sunday, iter_days
from stepper_history.labels import (
    day_abbreviation,
    format_period_label,
    format_short_date,
    month_abbreviation,
)
from stepper_history.models import (
    AggregatedPoint,
    ChartResult,
    DailyStepRecord,
    DateRange,
    PeriodStats,
    ViewMode,
)


def build_index(records: list[DailyStepRecord]) -> dict[str, DailyStepRecord]:
    """Map ISO date string -> record. Later duplicates win."""
    index: dict[str, DailyStepRecord] = {}
    for record in records:
        index[record.date.isoformat()] = record
    return index


def _steps_on(index: dict[str, DailyStepRecord], d) -> int:
    record = index.get(d.isoformat())
    return record.steps if record else 0


def aggregate_daily(date_range: DateRange, index: dict[str, DailyStepRecord]) -> list[AggregatedPoint]:
    """One point per calendar day in the range."""
    assert date_range.start <= date_range.end, "start must not be after end"
    return [
        AggregatedPoint(
            label=day_abbreviation(d),
            value=_steps_on(index, d),
            sub_label=format_short_date(d),
        )
        for d in iter_days(date_range)
    ]


def aggregate_weekly(date_range: DateRange, index: dict[str, DailyStepRecord]) -> list[AggregatedPoint]:
    """One point per Monday-Sunday week, starting at the Monday of range.start."""
    assert date_range.start <= date_range.end, "start must not be after end"
    result: list[AggregatedPoint] = []
    monday = get_monday(date_range.start)
    week_number = 1

    while monday <= date_range.end:
        sunday = get_sunday(monday)
        week_total = sum(_steps_on(index, monday + timedelta(days=i)) for i in range(7))
        result.append(
            AggregatedPoint(
                label=f"Wk {week_number}",
                value=week_total,
                sub_label=f"{format_short_date(monday)}-{sunday.day}",
            )
        )
        week_number += 1
        monday += timedelta(weeks=1)

    return result


def aggregate_monthly(date_range: DateRange, index: dict[str, DailyStepRecord]) -> list[AggregatedPoint]:
    """One point per calendar month touched by the range, each summing the whole month."""
    assert date_range.start <= date_range.end, "start must not be after end"
    result: list[AggregatedPoint] = []
    month = first_of_month(date_range.start)
    end_month = first_of_month(date_range.end)

    while month <= end_month:
        next_month = add_months(month, 1)
        whole_month = DateRange(month, next_month - timedelta(days=1))
        month_total = sum(_steps_on(index, d) for d in iter_days(whole_month))
        result.append(
            AggregatedPoint(
                label=month_abbreviation(month),
                value=month_total,
                sub_label=str(month.year),
            )
        )
        month = next_month

    return result


_STRATEGIES = {
    ViewMode.DAILY: aggregate_daily,
    ViewMode.WEEKLY: aggregate_weekly,
    ViewMode.MONTHLY: aggregate_monthly,
}


def aggregate(
    date_range: DateRange, view_mode: ViewMode, index: dict[str, DailyStepRecord]
) -> list[AggregatedPoint]:
    """Bucket the indexed records over date_range, oldest bucket first."""
    return _STRATEGIES[view_mode](date_range, index)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_stats(
    date_range: DateRange, index: dict[str, DailyStepRecord], point_count: int
) -> PeriodStats:
    """Totals over the days of the range; average is per produced bucket."""
    total = 0
    distance_meters = 0.0
    for d in iter_days(date_range):
        record = index.get(d.isoformat())
        if record:
            total += record.steps
            distance_meters += record.distance_meters

    average = _round_half_up(total / point_count) if point_count > 0 else 0
    return PeriodStats(total=total, average=average, distance_meters=distance_meters)


def build_chart(
    date_range: DateRange, view_mode: ViewMode, records: list[DailyStepRecord]
) -> ChartResult:
    """Index, bucket, summarize and label records for one chart window."""
    index = build_index(records)
    points = aggregate(date_range, view_mode, index)
    return ChartResult(
        chart_data=tuple(points),
        stats=calculate_stats(date_range, index, len(points)),
        period_label=format_period_label(view_mode, date_range),
    )


def goal_threshold(view_mode: ViewMode, daily_goal: int) -> int:
    """Step target for one bucket of the given view mode."""
    if view_mode is ViewMode.WEEKLY:
        return daily_goal * 7
    if view_mode is ViewMode.MONTHLY:
        return daily_goal * 30
    return daily_goal
