"""MCP server for stepper-history.

Exposes step charts, custom ranges and streaks as MCP tools.
Run via: python3 -m stepper_history.mcp_server
"""
from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any

from mcp.server.fastmcp import FastMCP

from stepper_history.aggregation import goal_threshold
from stepper_history.config import get_daily_goal, get_db_path
from stepper_history.controller import HistoryController
from stepper_history.dates import all_preset_ranges
from stepper_history.logging_setup import configure_logging
from stepper_history.models import ViewMode
from stepper_history.selector import display_to_dict

mcp = FastMCP(name="stepper-history")


def _get_db():
    from stepper_history.db import Database
    return Database(get_db_path())


@mcp.tool()
def get_chart(view: str = "daily", offset: int = 0) -> dict[str, Any]:
    """Get chart buckets, totals and period label for a view (daily/weekly/monthly) and offset (0 = current, -1 = previous)."""
    try:
        view_mode = ViewMode(view)
    except ValueError:
        return {"error": f"Unknown view {view!r}. Use daily, weekly or monthly."}
    db = _get_db()
    try:
        controller = HistoryController(db, view_mode=view_mode)
        data = display_to_dict(controller.go_to_offset(offset))
        data["offset"] = controller.regular.offset
        data["goal_threshold"] = goal_threshold(view_mode, get_daily_goal())
        return data
    finally:
        db.close()


@mcp.tool()
def get_custom_range(start: str, end: str) -> dict[str, Any]:
    """Get daily step buckets and totals for an explicit YYYY-MM-DD range (both ends included)."""
    try:
        start_date = date.fromisoformat(start)
        end_date = date.fromisoformat(end)
    except ValueError:
        return {"error": "Dates must be YYYY-MM-DD."}
    if start_date > end_date:
        return {"error": "Start date must be before or equal to end date."}
    db = _get_db()
    try:
        controller = HistoryController(db)
        return display_to_dict(controller.confirm_date_range(start_date, end_date))
    finally:
        db.close()


@mcp.tool()
def get_presets() -> dict[str, Any]:
    """Get the quick-select ranges (last 7 days, last 30 days, this month) as dates."""
    return {
        "presets": [
            {
                "key": preset.value,
                "label": preset.label,
                "start": date_range.start.isoformat(),
                "end": date_range.end.isoformat(),
            }
            for preset, date_range in all_preset_ranges().items()
        ]
    }


@mcp.tool()
def get_streak() -> dict[str, Any]:
    """Get the current and longest run of consecutive days with any steps."""
    db = _get_db()
    try:
        result = HistoryController(db).current_streak()
    finally:
        db.close()
    if result.error:
        return {"error": result.error}
    return {"current_streak": result.current_streak, "longest_streak": result.longest_streak}


@mcp.tool()
def get_step_stats() -> dict[str, Any]:
    """Get today, this week and this month totals plus goal streaks."""
    from stepper_history.steps import get_step_stats as _step_stats
    db = _get_db()
    try:
        return asdict(_step_stats(db, daily_goal=get_daily_goal()))
    finally:
        db.close()


def main() -> None:
    configure_logging()
    mcp.run()


if __name__ == "__main__":
    main()
