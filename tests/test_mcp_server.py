"""Tests for the MCP server tool functions."""
from datetime import date, timedelta
from unittest.mock import MagicMock, patch

import pytest

from stepper_history.db import Database
from stepper_history.mcp_server import get_chart, get_custom_range, get_presets, get_step_stats, get_streak
from stepper_history.provider import StepsProviderError


@pytest.fixture(autouse=True)
def config_path(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setattr("stepper_history.config.DEFAULT_CONFIG_PATH", path)
    return path


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "steps.db"
    today = date.today()
    database = Database(db_path=path)
    for days_ago, steps in ((0, 12_000), (1, 8_000), (2, 11_000)):
        database.record_entry((today - timedelta(days=days_ago)).isoformat(), steps, 500.0)
    database.close()
    return path


@pytest.fixture
def fresh_db(db_path):
    with patch("stepper_history.mcp_server._get_db", side_effect=lambda: Database(db_path=db_path)) as factory:
        yield factory


class TestGetChart:
    def test_daily(self, fresh_db):
        result = get_chart()
        assert len(result["chart_data"]) == 7
        assert result["stats"]["total"] == 31_000
        assert result["offset"] == 0
        assert result["goal_threshold"] == 10_000
        assert result["is_custom_mode"] is False

    def test_monthly(self, fresh_db):
        result = get_chart(view="monthly")
        assert len(result["chart_data"]) == 12
        assert result["goal_threshold"] == 300_000

    def test_future_offset_clamped(self, fresh_db):
        assert get_chart(offset=3)["offset"] == 0

    def test_unknown_view(self):
        assert "error" in get_chart(view="hourly")

    def test_closes_db(self):
        mock_db = MagicMock()
        mock_db.get_daily_history.return_value = []
        with patch("stepper_history.mcp_server._get_db", return_value=mock_db):
            get_chart()
        mock_db.close.assert_called_once()


class TestGetCustomRange:
    def test_range(self, fresh_db):
        today = date.today()
        result = get_custom_range((today - timedelta(days=2)).isoformat(), today.isoformat())
        assert [p["value"] for p in result["chart_data"]] == [11_000, 8_000, 12_000]
        assert result["is_custom_mode"] is True

    def test_bad_format(self):
        assert get_custom_range("01/01/2026", "2026-01-02") == {"error": "Dates must be YYYY-MM-DD."}

    def test_reversed(self):
        result = get_custom_range("2026-01-10", "2026-01-01")
        assert "error" in result

    def test_provider_error_reported(self):
        mock_db = MagicMock()
        mock_db.get_daily_history.side_effect = StepsProviderError("disk gone")
        with patch("stepper_history.mcp_server._get_db", return_value=mock_db):
            result = get_custom_range("2026-01-01", "2026-01-02")
        assert result["error"] == "disk gone"
        mock_db.close.assert_called_once()


class TestGetPresets:
    def test_three_presets(self):
        presets = get_presets()["presets"]
        assert [p["key"] for p in presets] == ["last7", "last30", "thisMonth"]
        assert all(p["end"] == date.today().isoformat() for p in presets)


class TestGetStreak:
    def test_streak(self, fresh_db):
        assert get_streak() == {"current_streak": 3, "longest_streak": 3}

    def test_provider_error(self):
        mock_db = MagicMock()
        mock_db.get_activity_dates.side_effect = StepsProviderError("locked")
        with patch("stepper_history.mcp_server._get_db", return_value=mock_db):
            assert get_streak() == {"error": "locked"}
        mock_db.close.assert_called_once()
        mock_db.get_activity_dates.assert_called_once_with()


class TestGetStepStats:
    def test_stats(self, fresh_db):
        result = get_step_stats()
        assert result["today_steps"] == 12_000
        assert result["daily_goal"] == 10_000
        assert result["current_streak"] == 1
