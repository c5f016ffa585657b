"""Calendar-aligned date ranges for chart periods and picker presets.

Pure functions. "today" is injectable everywhere so callers and tests can pin it.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from enum import Enum

from stepper_history.models import DateRange, ViewMode

DAILY_WINDOW_DAYS = 7
WEEKLY_WINDOW_WEEKS = 7
MONTHLY_WINDOW_MONTHS = 12


def _today(today: date | None) -> date:
    return today if today is not None else date.today()


def normalize_day(value: date | datetime) -> date:
    """Drop any time-of-day component."""
    if isinstance(value, datetime):
        return value.date()
    return value


def get_monday(d: date) -> date:
    """Monday of the week containing d. Monday always starts the week."""
    return d - timedelta(days=d.weekday())


def get_sunday(d: date) -> date:
    return get_monday(d) + timedelta(days=6)


def first_of_month(d: date) -> date:
    return d.replace(day=1)


def add_months(d: date, months: int) -> date:
    """First day of the month `months` away from d's month."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def last_day_of_month(d: date) -> date:
    return add_months(d, 1) - timedelta(days=1)


def calculate_date_range(view_mode: ViewMode, offset: int, today: date | None = None) -> DateRange:
    """Return the chart window for a view mode, shifted by whole windows.

    offset 0 is the window ending in the current period, -1 the one before it.
    - daily: 7 days ending today (+ offset * 7 days)
    - weekly: 7 Monday-Sunday weeks ending this week (+ offset * 7 weeks)
    - monthly: 12 calendar months ending this month (+ offset * 12 months)
    """
    ref = _today(today)

    if view_mode is ViewMode.DAILY:
        end = ref + timedelta(days=offset * DAILY_WINDOW_DAYS)
        start = end - timedelta(days=DAILY_WINDOW_DAYS - 1)
        return DateRange(start, end)

    if view_mode is ViewMode.WEEKLY:
        end_monday = get_monday(ref) + timedelta(days=offset * 7 * WEEKLY_WINDOW_WEEKS)
        end = get_sunday(end_monday)
        start = end_monday - timedelta(weeks=WEEKLY_WINDOW_WEEKS - 1)
        return DateRange(start, end)

    end_month = add_months(ref, offset * MONTHLY_WINDOW_MONTHS)
    start = add_months(end_month, -(MONTHLY_WINDOW_MONTHS - 1))
    return DateRange(start, last_day_of_month(end_month))


class Preset(Enum):
    LAST_7_DAYS = "last7"
    LAST_30_DAYS = "last30"
    THIS_MONTH = "thisMonth"

    @property
    def label(self) -> str:
        return _PRESET_LABELS[self]


_PRESET_LABELS: dict[Preset, str] = {
    Preset.LAST_7_DAYS: "Last 7 days",
    Preset.LAST_30_DAYS: "Last 30 days",
    Preset.THIS_MONTH: "This month",
}


def preset_range(preset: Preset, today: date | None = None) -> DateRange:
    """Range for a quick-select preset. Independent of the view mode."""
    ref = _today(today)
    if preset is Preset.LAST_7_DAYS:
        return DateRange(ref - timedelta(days=6), ref)
    if preset is Preset.LAST_30_DAYS:
        return DateRange(ref - timedelta(days=29), ref)
    return DateRange(first_of_month(ref), ref)


def all_preset_ranges(today: date | None = None) -> dict[Preset, DateRange]:
    ref = _today(today)
    return {preset: preset_range(preset, ref) for preset in Preset}


def default_picker_range(today: date | None = None) -> DateRange:
    """Range the date picker opens with: the last 7 days."""
    return preset_range(Preset.LAST_7_DAYS, today)


def day_bounds(date_range: DateRange) -> tuple[datetime, datetime]:
    """Start-of-day of the first date and end-of-day of the last date."""
    return (
        datetime.combine(date_range.start, time.min),
        datetime.combine(date_range.end, time.max),
    )


def iter_days(date_range: DateRange):
    """Yield every date in the range, oldest first."""
    current = date_range.start
    while current <= date_range.end:
        yield current
        current += timedelta(days=1)
