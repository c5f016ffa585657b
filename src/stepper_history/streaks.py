"""Activity streak tracking for stepper-history."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from stepper_history.models import DailyStepRecord


@dataclass
class StreakInfo:
    current_streak: int
    longest_streak: int
    last_active_date: date | None
    is_active_today: bool


def current_streak(activity_dates: Iterable[date], today: date | None = None) -> int:
    """Count consecutive active days ending today or yesterday.

    Rules:
    - No dates -> 0
    - Most recent date must be today or yesterday, otherwise the streak is broken
    - Walk back one day at a time from the most recent date; a gap ends it

    Input is expected distinct and newest first, but it is de-duplicated and
    re-sorted here so an unordered list gives the same answer.
    """
    dates = sorted(set(activity_dates), reverse=True)
    if not dates:
        return 0

    today_date = today if today is not None else date.today()
    yesterday = today_date - timedelta(days=1)

    most_recent = dates[0]
    if most_recent != today_date and most_recent != yesterday:
        return 0

    streak = 0
    expected = most_recent
    for d in dates:
        if d == expected:
            streak += 1
            expected -= timedelta(days=1)
        else:
            break

    return streak


def longest_streak(activity_dates: Iterable[date]) -> int:
    """Longest run of consecutive days anywhere in the history."""
    sorted_dates = sorted(set(activity_dates))
    if not sorted_dates:
        return 0

    longest = 1
    run = 1
    for i in range(1, len(sorted_dates)):
        if (sorted_dates[i] - sorted_dates[i - 1]).days == 1:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


def active_dates(records: Iterable[DailyStepRecord], daily_goal: int = 0) -> list[date]:
    """Dates with activity that met the goal, newest first."""
    threshold = max(daily_goal, 1)
    return sorted({r.date for r in records if r.steps >= threshold}, reverse=True)


def calculate_streak(
    records: Iterable[DailyStepRecord], daily_goal: int = 0, today: date | None = None
) -> StreakInfo:
    """Current and longest streak from daily records.

    A day counts when it has steps and reaches daily_goal (0 = any activity).
    """
    today_date = today if today is not None else date.today()
    dates = active_dates(records, daily_goal)

    if not dates:
        return StreakInfo(
            current_streak=0,
            longest_streak=0,
            last_active_date=None,
            is_active_today=False,
        )

    current = current_streak(dates, today_date)
    return StreakInfo(
        current_streak=current,
        longest_streak=max(longest_streak(dates), current),
        last_active_date=dates[0],
        is_active_today=dates[0] == today_date,
    )
