"""Tests for CLI commands and display helpers."""

from __future__ import annotations

import json
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from stepper_history.cli import (
    build_parser,
    do_activity,
    do_chart,
    do_delete_source,
    do_goal,
    do_history,
    do_import,
    do_presets,
    do_range,
    do_record,
    do_stats,
    do_streak,
    do_units,
    main,
)
from stepper_history.db import Database
from stepper_history.display import format_distance, format_number
from stepper_history.provider import StepsProviderError

TODAY = date(2026, 1, 20)


@pytest.fixture(autouse=True)
def config_path(tmp_path, monkeypatch):
    """Point the config file at a temp location."""
    path = tmp_path / "config.json"
    monkeypatch.setattr("stepper_history.config.DEFAULT_CONFIG_PATH", path)
    return path


@pytest.fixture
def db(tmp_path):
    """Create a temporary database for testing."""
    db_path = tmp_path / "test.db"
    database = Database(db_path=db_path)
    yield database
    database.close()


@pytest.fixture
def walked(db):
    for day, steps in ((20, 12_000), (19, 11_000), (18, 9_000)):
        db.record_entry(date(2026, 1, day).isoformat(), steps, 1000.0, "manual")
    return db


# ── Argument Parsing ──────────────────────────────────────────────────────────


class TestArgumentParsing:
    def test_no_args_defaults_to_none_command(self):
        args = build_parser().parse_args([])
        assert args.command is None

    def test_chart_defaults(self):
        args = build_parser().parse_args(["chart"])
        assert args.view == "daily"
        assert args.offset == 0

    def test_chart_options(self):
        args = build_parser().parse_args(["chart", "--view", "monthly", "--offset", "-2"])
        assert args.view == "monthly"
        assert args.offset == -2

    def test_range_preset(self):
        args = build_parser().parse_args(["range", "--preset", "last30"])
        assert args.preset == "last30"

    def test_record(self):
        args = build_parser().parse_args(["record", "--steps", "5000", "--date", "2026-01-19"])
        assert args.steps == 5000
        assert args.date == "2026-01-19"

    def test_verbose(self):
        assert build_parser().parse_args(["-v", "streak"]).verbose is True

    def test_invalid_view_raises(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["chart", "--view", "hourly"])

    def test_invalid_command_raises(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["nonexistent"])


# ── Display helpers ───────────────────────────────────────────────────────────


class TestFormatNumber:
    def test_small_number(self):
        assert format_number(42) == "42"

    def test_number_with_commas(self):
        assert format_number(1200) == "1,200"

    def test_thousands(self):
        assert format_number(12_500) == "12.5K"

    def test_millions(self):
        assert format_number(1_234_567) == "1.2M"


class TestFormatDistance:
    def test_metric(self):
        assert format_distance(12_345) == "12.3 km"

    def test_imperial(self):
        assert format_distance(1609.344, "imperial") == "1.0 mi"

    def test_zero(self):
        assert format_distance(0.0) == "0.0 km"


# ── Commands ──────────────────────────────────────────────────────────────────


class TestChart:
    def test_daily(self, walked):
        data = do_chart(walked, today=TODAY)
        assert len(data["chart_data"]) == 7
        assert data["stats"]["total"] == 32_000
        assert data["goal_threshold"] == 10_000
        assert data["units"] == "metric"
        assert data["can_go_next"] is False

    def test_weekly_goal_threshold(self, walked):
        data = do_chart(walked, view="weekly", today=TODAY)
        assert data["goal_threshold"] == 70_000
        assert data["chart_data"][-1]["value"] == 23_000

    def test_previous_period(self, walked):
        data = do_chart(walked, offset=-1, today=TODAY)
        assert data["stats"]["total"] == 0
        assert data["can_go_next"] is True

    def test_goal_from_config(self, walked):
        do_goal(5000)
        assert do_chart(walked, today=TODAY)["goal_threshold"] == 5000


class TestRange:
    def test_preset(self, walked):
        data = do_range(walked, preset="last30", today=TODAY)
        assert data["is_custom_mode"] is True
        assert len(data["chart_data"]) == 30

    def test_explicit_dates(self, walked):
        data = do_range(walked, start="2026-01-19", end="2026-01-20", today=TODAY)
        assert [p["value"] for p in data["chart_data"]] == [11_000, 12_000]

    def test_needs_arguments(self, walked):
        with pytest.raises(ValueError, match="--preset"):
            do_range(walked, today=TODAY)

    def test_bad_date(self, walked):
        with pytest.raises(ValueError, match="Invalid start date"):
            do_range(walked, start="yesterday", end="2026-01-20", today=TODAY)

    def test_reversed_dates(self, walked):
        with pytest.raises(ValueError):
            do_range(walked, start="2026-01-20", end="2026-01-01", today=TODAY)


class TestPresets:
    def test_lists_all(self):
        presets = do_presets(today=TODAY)
        assert [p["key"] for p in presets] == ["last7", "last30", "thisMonth"]
        assert presets[2]["start"] == "2026-01-01"


class TestStreakAndStats:
    def test_streak(self, walked):
        assert do_streak(walked, today=TODAY) == {"current_streak": 3, "longest_streak": 3, "error": None}

    def test_streak_reports_provider_error(self):
        failing = MagicMock()
        failing.get_activity_dates.side_effect = StepsProviderError("database is locked")
        data = do_streak(failing, today=TODAY)
        assert data["error"] == "database is locked"
        assert data["current_streak"] == 0
        failing.get_activity_dates.assert_called_once_with()

    def test_stats_uses_goal(self, walked):
        data = do_stats(walked, today=TODAY)
        assert data["current_streak"] == 2
        assert data["today_steps"] == 12_000

    def test_activity(self, walked):
        data = do_activity(walked, today=TODAY)
        assert data["total_steps"] == 32_000
        assert data["total_distance_meters"] == 3000.0


class TestRecordAndImport:
    def test_record_defaults_to_today(self, db):
        entry = do_record(db, 4000, today=TODAY)
        assert entry["date"] == "2026-01-20"

    def test_record_future_rejected(self, db):
        with pytest.raises(ValueError, match="future"):
            do_record(db, 4000, entry_date="2026-01-21", today=TODAY)

    def test_import_list(self, db, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text(json.dumps([
            {"date": "2026-01-19", "stepCount": 5000, "source": "healthkit"},
            {"date": "2026-01-20", "stepCount": 6000, "source": "healthkit"},
        ]), encoding="utf-8")
        assert do_import(db, path, today=TODAY) == {"created": 2, "updated": 0, "total": 2}

    def test_import_wrapped_entries(self, db, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text(json.dumps({"entries": [
            {"date": "2026-01-20", "stepCount": 6000, "source": "healthkit"},
        ]}), encoding="utf-8")
        assert do_import(db, path, today=TODAY)["created"] == 1

    def test_import_missing_file(self, db, tmp_path):
        with pytest.raises(ValueError, match="File not found"):
            do_import(db, tmp_path / "missing.json", today=TODAY)

    def test_import_bad_json(self, db, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            do_import(db, path, today=TODAY)


class TestHistoryAndDelete:
    def test_history_defaults_to_last_30_days(self, walked):
        walked.record_entry("2025-12-01", 100)
        data = do_history(walked, today=TODAY)
        assert data["total_count"] == 3

    def test_delete_source(self, walked):
        assert do_delete_source(walked, "manual") == 3


class TestSettings:
    def test_goal_show_and_set(self, config_path):
        assert do_goal() == 10_000
        assert do_goal(7500) == 7500
        assert json.loads(config_path.read_text())["daily_goal"] == 7500

    def test_units(self):
        assert do_units() == "metric"
        assert do_units("imperial") == "imperial"


class TestMain:
    def test_record_command(self, tmp_path):
        db_path = tmp_path / "main.db"
        with patch("stepper_history.cli.get_db_path", return_value=db_path), \
             patch("sys.argv", ["stepper-history", "record", "--steps", "1234", "--date", "2026-01-01"]):
            main()
        database = Database(db_path=db_path)
        try:
            assert database.get_activity_dates() == [date(2026, 1, 1)]
        finally:
            database.close()

    def test_validation_error_exits_1(self, tmp_path):
        with patch("stepper_history.cli.get_db_path", return_value=tmp_path / "main.db"), \
             patch("sys.argv", ["stepper-history", "record", "--steps", "999999"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1
