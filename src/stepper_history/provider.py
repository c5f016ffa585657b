"""Contract for the step-history data source.

The chart pipelines only need two reads: per-day totals over a range and the
list of days with any activity. Anything that can answer those (the local
SQLite store, a test double, an API client) can back the controller.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol

from stepper_history.models import DateRange


class StepsProviderError(Exception):
    """A provider could not answer: transport, server or storage failure."""


class StepsHistoryProvider(Protocol):
    def get_daily_history(self, start_date: str, end_date: str) -> list[dict]:
        """Rows of {date, totalSteps, totalDistanceMeters} for YYYY-MM-DD bounds (inclusive)."""
        ...

    def get_activity_dates(self) -> list[date]:
        """Distinct dates with at least one step entry, newest first."""
        ...


def to_history_request(date_range: DateRange) -> dict[str, str]:
    return {
        "startDate": date_range.start.isoformat(),
        "endDate": date_range.end.isoformat(),
    }


def error_message(exc: BaseException) -> str:
    """Message shown to the user for a failed fetch."""
    text = str(exc).strip()
    return text or "Something went wrong while loading your steps."
