"""Step recording, bulk sync and summary stats.

Validation lives here so every writer (CLI, import, tests) goes through the
same limits before touching the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

import structlog

from stepper_history.dates import first_of_month, get_monday, get_sunday, last_day_of_month
from stepper_history.db import Database
from stepper_history.models import DailyStepRecord, DateRange, parse_daily_record
from stepper_history.streaks import calculate_streak, current_streak

logger = structlog.get_logger()

MIN_STEP_COUNT = 0
MAX_STEP_COUNT = 200_000
MAX_SOURCE_LENGTH = 100
MAX_SYNC_ENTRIES = 31
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
DEFAULT_DAILY_GOAL = 10_000


@dataclass
class SyncResult:
    created: int
    updated: int
    total: int


@dataclass
class HistoryPage:
    items: list[dict]
    total_count: int
    page: int
    page_size: int


@dataclass
class StepStats:
    today_steps: int
    today_distance: float
    week_steps: int
    week_distance: float
    month_steps: int
    month_distance: float
    current_streak: int
    longest_streak: int
    daily_goal: int


@dataclass
class ActivitySummary:
    total_steps: int
    total_distance_meters: float
    average_steps_per_day: int
    current_streak: int


def _validate_entry(
    step_count: int, entry_date: date, distance_meters: float | None, today: date
) -> None:
    if isinstance(step_count, bool) or not isinstance(step_count, int):
        raise ValueError("Step count must be a whole number.")
    if step_count < MIN_STEP_COUNT or step_count > MAX_STEP_COUNT:
        raise ValueError(f"Step count must be between {MIN_STEP_COUNT} and {MAX_STEP_COUNT}.")
    if distance_meters is not None and distance_meters < 0:
        raise ValueError("Distance must be a positive value.")
    if entry_date > today:
        raise ValueError("Date cannot be in the future.")


def record_steps(
    db: Database,
    step_count: int,
    entry_date: date,
    distance_meters: float | None = None,
    source: str | None = None,
    today: date | None = None,
) -> dict:
    """Validate and store a single step entry."""
    _validate_entry(step_count, entry_date, distance_meters, today or date.today())
    if source is not None and len(source) > MAX_SOURCE_LENGTH:
        raise ValueError(f"Source cannot exceed {MAX_SOURCE_LENGTH} characters.")

    entry = db.record_entry(entry_date.isoformat(), step_count, distance_meters, source)
    logger.info("Recorded steps", date=entry_date.isoformat(), steps=step_count, source=source)
    return entry


def _parse_sync_entry(raw: dict) -> tuple[date, int, float | None, str]:
    if not isinstance(raw, dict):
        raise ValueError("Each entry must be an object.")
    try:
        entry_date = date.fromisoformat(str(raw.get("date", "")))
    except ValueError as exc:
        raise ValueError(f"Invalid date: {raw.get('date')!r}") from exc
    source = raw.get("source")
    if not isinstance(source, str) or not source.strip():
        raise ValueError("Source is required for each entry.")
    if len(source) > MAX_SOURCE_LENGTH:
        raise ValueError(f"Source cannot exceed {MAX_SOURCE_LENGTH} characters.")
    distance = raw.get("distanceMeters")
    if distance is not None and (isinstance(distance, bool) or not isinstance(distance, (int, float))):
        raise ValueError("Distance must be a number.")
    return entry_date, raw.get("stepCount"), distance, source


def sync_steps(db: Database, entries: list[dict], today: date | None = None) -> SyncResult:
    """Bulk upsert entries from a health provider, keyed on (date, source).

    Every entry is validated before anything is written.
    """
    if not entries:
        raise ValueError("At least one entry is required.")
    if len(entries) > MAX_SYNC_ENTRIES:
        raise ValueError(f"Maximum {MAX_SYNC_ENTRIES} entries allowed per sync.")

    today_date = today or date.today()
    parsed = []
    for raw in entries:
        entry_date, step_count, distance, source = _parse_sync_entry(raw)
        _validate_entry(step_count, entry_date, distance, today_date)
        parsed.append((entry_date, step_count, distance, source))

    created = 0
    updated = 0
    for entry_date, step_count, distance, source in parsed:
        if db.upsert_by_date_and_source(entry_date.isoformat(), step_count, source, distance):
            created += 1
        else:
            updated += 1

    logger.info("Synced steps", created=created, updated=updated)
    return SyncResult(created=created, updated=updated, total=len(entries))


def delete_by_source(db: Database, source: str) -> int:
    if not source or not source.strip():
        raise ValueError("Source cannot be empty.")
    deleted = db.delete_by_source(source)
    logger.info("Deleted entries by source", source=source, deleted=deleted)
    return deleted


def get_history_page(
    db: Database, date_range: DateRange, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
) -> HistoryPage:
    """Paginated raw entries. Out-of-range page sizes are clamped, not rejected."""
    if page < 1:
        raise ValueError("Page number must be greater than 0.")
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    if page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE

    items, total = db.get_entries_page(
        date_range.start.isoformat(), date_range.end.isoformat(), page, page_size
    )
    return HistoryPage(items=items, total_count=total, page=page, page_size=page_size)


def _summaries_to_records(summaries: list[dict]) -> list[DailyStepRecord]:
    return [
        parse_daily_record(
            {
                "date": s["date"],
                "totalSteps": s["total_steps"],
                "totalDistanceMeters": s["total_distance_meters"],
            }
        )
        for s in summaries
    ]


def _period_totals(records: list[DailyStepRecord], period: DateRange) -> tuple[int, float]:
    in_period = [r for r in records if period.contains(r.date)]
    return sum(r.steps for r in in_period), sum(r.distance_meters for r in in_period)


def get_step_stats(db: Database, daily_goal: int = DEFAULT_DAILY_GOAL, today: date | None = None) -> StepStats:
    """Today / this week (Mon-Sun) / this month totals plus goal streaks."""
    today_date = today or date.today()
    records = _summaries_to_records(db.get_all_daily_summaries())

    today_steps, today_distance = _period_totals(records, DateRange(today_date, today_date))
    week_steps, week_distance = _period_totals(
        records, DateRange(get_monday(today_date), get_sunday(today_date))
    )
    month_steps, month_distance = _period_totals(
        records, DateRange(first_of_month(today_date), last_day_of_month(today_date))
    )
    streak = calculate_streak(records, daily_goal=daily_goal, today=today_date)

    return StepStats(
        today_steps=today_steps,
        today_distance=today_distance,
        week_steps=week_steps,
        week_distance=week_distance,
        month_steps=month_steps,
        month_distance=month_distance,
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        daily_goal=daily_goal,
    )


def get_activity_summary(db: Database, today: date | None = None) -> ActivitySummary:
    """Last 7 days (today included) plus the any-activity streak."""
    today_date = today or date.today()
    week_ago = today_date - timedelta(days=6)
    records = _summaries_to_records(
        db.get_daily_summaries(week_ago.isoformat(), today_date.isoformat())
    )
    total_steps = sum(r.steps for r in records)
    return ActivitySummary(
        total_steps=total_steps,
        total_distance_meters=sum(r.distance_meters for r in records),
        average_steps_per_day=total_steps // 7,
        current_streak=current_streak(db.get_activity_dates(), today_date),
    )
