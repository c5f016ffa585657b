"""Core data types for step-history charts.

Everything here is immutable. Records come from a provider, ranges from the
date calculator, and points/stats are derived per render.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

import structlog

logger = structlog.get_logger()


class ViewMode(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class DailyStepRecord:
    date: date
    steps: int
    distance_meters: float = 0.0


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("Start date must be before or equal to end date.")

    @property
    def days(self) -> int:
        """Number of calendar days in the range, both ends included."""
        return (self.end - self.start).days + 1

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end


@dataclass(frozen=True)
class AggregatedPoint:
    label: str  # "Mon", "Wk 1", "Jan"
    value: int
    sub_label: str | None = None  # "Jan 5", "Jan 5-11", "2026"


@dataclass(frozen=True)
class PeriodStats:
    total: int
    average: int
    distance_meters: float

    @classmethod
    def empty(cls) -> PeriodStats:
        return cls(total=0, average=0, distance_meters=0.0)


@dataclass(frozen=True)
class ChartResult:
    chart_data: tuple[AggregatedPoint, ...]
    stats: PeriodStats
    period_label: str


def _first_present(raw: dict, *keys: str) -> object:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def parse_daily_record(raw: dict) -> DailyStepRecord:
    """Parse one provider row into a DailyStepRecord.

    Accepts both the API shape ({date, totalSteps, totalDistanceMeters}) and
    the client shape ({date, steps, distanceMeters}). Distance defaults to 0.
    Raises ValueError for a missing or malformed date or step count.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Entry is not an object: {raw!r}")
    raw_date = raw.get("date")
    if isinstance(raw_date, date):
        day = raw_date
    elif isinstance(raw_date, str):
        try:
            day = date.fromisoformat(raw_date[:10])
        except ValueError as exc:
            raise ValueError(f"Invalid date: {raw_date!r}") from exc
    else:
        raise ValueError("Entry is missing a date.")

    steps = _first_present(raw, "totalSteps", "steps", "stepCount")
    if isinstance(steps, bool) or not isinstance(steps, int):
        raise ValueError(f"Invalid step count for {day.isoformat()}: {steps!r}")
    if steps < 0:
        raise ValueError(f"Step count cannot be negative for {day.isoformat()}.")

    distance = _first_present(raw, "totalDistanceMeters", "distanceMeters")
    if distance is None:
        distance = 0.0
    if isinstance(distance, bool) or not isinstance(distance, (int, float)):
        raise ValueError(f"Invalid distance for {day.isoformat()}: {distance!r}")
    if distance < 0:
        raise ValueError("Distance must be a positive value.")

    return DailyStepRecord(date=day, steps=steps, distance_meters=float(distance))


def parse_daily_records(rows: list[dict]) -> list[DailyStepRecord]:
    """Parse provider rows, skipping malformed ones."""
    records: list[DailyStepRecord] = []
    for row in rows:
        try:
            records.append(parse_daily_record(row))
        except ValueError as exc:
            logger.warning("Skipping malformed daily entry", row=row, reason=str(exc))
            continue
    return records
