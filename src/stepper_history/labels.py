"""Human-readable labels for chart periods."""

from __future__ import annotations

from datetime import date

from stepper_history.models import DateRange, ViewMode

# Indexed by date.weekday(): Monday == 0
DAY_ABBREVIATIONS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def day_abbreviation(d: date) -> str:
    return DAY_ABBREVIATIONS[d.weekday()]


def month_abbreviation(d: date) -> str:
    return MONTH_ABBREVIATIONS[d.month - 1]


def format_short_date(d: date) -> str:
    """'Jan 5'"""
    return f"{month_abbreviation(d)} {d.day}"


def format_date_with_year(d: date) -> str:
    """'Jan 5, 2026'"""
    return f"{format_short_date(d)}, {d.year}"


def format_daily_label(date_range: DateRange) -> str:
    start, end = date_range.start, date_range.end
    if start.year == end.year:
        return f"{format_short_date(start)} - {format_date_with_year(end)}"
    return f"{format_date_with_year(start)} - {format_date_with_year(end)}"


def format_period_label(view_mode: ViewMode, date_range: DateRange) -> str:
    """Label shown above the chart for the given window.

    daily:   'Jan 9 - Jan 15, 2026'
    weekly:  '7 weeks ending Jan 18, 2026'
    monthly: 'Feb - Dec 2026' or 'Feb 2025 - Jan 2026'
    """
    if view_mode is ViewMode.DAILY:
        return format_daily_label(date_range)

    if view_mode is ViewMode.WEEKLY:
        return f"7 weeks ending {format_date_with_year(date_range.end)}"

    start, end = date_range.start, date_range.end
    if start.year == end.year:
        return f"{month_abbreviation(start)} - {month_abbreviation(end)} {end.year}"
    return f"{month_abbreviation(start)} {start.year} - {month_abbreviation(end)} {end.year}"
