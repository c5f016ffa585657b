"""Tests for step recording, sync and summary stats."""

from datetime import date

import pytest

from stepper_history.db import Database
from stepper_history.models import DateRange
from stepper_history.steps import (
    MAX_PAGE_SIZE,
    delete_by_source,
    get_activity_summary,
    get_history_page,
    get_step_stats,
    record_steps,
    sync_steps,
)

TODAY = date(2026, 1, 20)


@pytest.fixture
def db(tmp_path):
    """Create a temporary database for testing."""
    database = Database(db_path=tmp_path / "test.db")
    yield database
    database.close()


class TestRecordSteps:
    def test_records_entry(self, db):
        entry = record_steps(db, 8000, TODAY, distance_meters=6000.0, source="manual", today=TODAY)
        assert entry["date"] == "2026-01-20"
        assert entry["step_count"] == 8000

    def test_zero_steps_allowed(self, db):
        assert record_steps(db, 0, TODAY, today=TODAY)["step_count"] == 0

    def test_too_many_steps(self, db):
        with pytest.raises(ValueError, match="Step count must be between 0 and 200000."):
            record_steps(db, 200_001, TODAY, today=TODAY)

    def test_negative_steps(self, db):
        with pytest.raises(ValueError, match="between"):
            record_steps(db, -1, TODAY, today=TODAY)

    def test_future_date(self, db):
        with pytest.raises(ValueError, match="Date cannot be in the future."):
            record_steps(db, 10, date(2026, 1, 21), today=TODAY)

    def test_negative_distance(self, db):
        with pytest.raises(ValueError, match="Distance must be a positive value."):
            record_steps(db, 10, TODAY, distance_meters=-1.0, today=TODAY)

    def test_source_too_long(self, db):
        with pytest.raises(ValueError, match="Source cannot exceed"):
            record_steps(db, 10, TODAY, source="x" * 101, today=TODAY)


class TestSyncSteps:
    def test_creates_and_updates(self, db):
        entries = [
            {"date": "2026-01-19", "stepCount": 5000, "distanceMeters": 4000.0, "source": "healthkit"},
            {"date": "2026-01-20", "stepCount": 3000, "source": "healthkit"},
        ]
        result = sync_steps(db, entries, today=TODAY)
        assert (result.created, result.updated, result.total) == (2, 0, 2)

        result = sync_steps(db, [{"date": "2026-01-20", "stepCount": 6000, "source": "healthkit"}], today=TODAY)
        assert (result.created, result.updated, result.total) == (0, 1, 1)
        assert db.get_daily_summaries("2026-01-20", "2026-01-20")[0]["total_steps"] == 6000

    def test_empty(self, db):
        with pytest.raises(ValueError, match="At least one entry is required."):
            sync_steps(db, [], today=TODAY)

    def test_too_many_entries(self, db):
        entries = [{"date": "2026-01-01", "stepCount": 1, "source": "s"}] * 32
        with pytest.raises(ValueError, match="Maximum 31 entries allowed per sync."):
            sync_steps(db, entries, today=TODAY)

    def test_source_required(self, db):
        with pytest.raises(ValueError, match="Source is required for each entry."):
            sync_steps(db, [{"date": "2026-01-20", "stepCount": 1}], today=TODAY)

    def test_invalid_entry_writes_nothing(self, db):
        entries = [
            {"date": "2026-01-19", "stepCount": 5000, "source": "healthkit"},
            {"date": "2026-01-20", "stepCount": 999_999, "source": "healthkit"},
        ]
        with pytest.raises(ValueError):
            sync_steps(db, entries, today=TODAY)
        assert db.get_activity_dates() == []

    def test_bad_date(self, db):
        with pytest.raises(ValueError, match="Invalid date"):
            sync_steps(db, [{"date": "20/01/2026", "stepCount": 1, "source": "s"}], today=TODAY)

    def test_missing_step_count(self, db):
        with pytest.raises(ValueError, match="whole number"):
            sync_steps(db, [{"date": "2026-01-20", "source": "s"}], today=TODAY)


class TestDeleteBySource:
    def test_deletes(self, db):
        sync_steps(db, [{"date": "2026-01-20", "stepCount": 1, "source": "watch"}], today=TODAY)
        assert delete_by_source(db, "watch") == 1

    def test_blank_source(self, db):
        with pytest.raises(ValueError, match="Source cannot be empty."):
            delete_by_source(db, "  ")


class TestHistoryPage:
    def test_pages(self, db):
        for day in (18, 19, 20):
            record_steps(db, 100, date(2026, 1, day), today=TODAY)
        page = get_history_page(db, DateRange(date(2026, 1, 1), TODAY), page=1, page_size=2)
        assert page.total_count == 3
        assert len(page.items) == 2

    def test_page_zero_rejected(self, db):
        with pytest.raises(ValueError, match="Page number must be greater than 0."):
            get_history_page(db, DateRange(TODAY, TODAY), page=0)

    def test_page_size_clamped(self, db):
        assert get_history_page(db, DateRange(TODAY, TODAY), page_size=500).page_size == MAX_PAGE_SIZE
        assert get_history_page(db, DateRange(TODAY, TODAY), page_size=0).page_size == 50


@pytest.fixture
def walked(db):
    record_steps(db, 12_000, TODAY, distance_meters=9000.0, today=TODAY)
    record_steps(db, 11_000, date(2026, 1, 19), today=TODAY)
    record_steps(db, 10_000, date(2026, 1, 18), today=TODAY)
    record_steps(db, 500, date(2026, 1, 5), today=TODAY)
    return db


class TestStepStats:
    def test_period_totals(self, walked):
        stats = get_step_stats(walked, daily_goal=10_000, today=TODAY)
        assert stats.today_steps == 12_000
        assert stats.today_distance == 9000.0
        assert stats.week_steps == 23_000
        assert stats.month_steps == 33_500
        assert stats.daily_goal == 10_000

    def test_goal_streaks(self, walked):
        stats = get_step_stats(walked, daily_goal=10_000, today=TODAY)
        assert stats.current_streak == 3
        assert stats.longest_streak == 3

    def test_higher_goal_breaks_streak(self, walked):
        stats = get_step_stats(walked, daily_goal=11_500, today=TODAY)
        assert stats.current_streak == 1

    def test_empty_store(self, db):
        stats = get_step_stats(db, today=TODAY)
        assert stats.today_steps == 0
        assert stats.current_streak == 0


class TestActivitySummary:
    def test_last_seven_days(self, walked):
        summary = get_activity_summary(walked, today=TODAY)
        assert summary.total_steps == 33_000
        assert summary.total_distance_meters == 9000.0
        assert summary.average_steps_per_day == 33_000 // 7
        assert summary.current_streak == 3

    def test_empty_store(self, db):
        summary = get_activity_summary(db, today=TODAY)
        assert summary.total_steps == 0
        assert summary.current_streak == 0
