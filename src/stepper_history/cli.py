"""CLI commands for stepper-history."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from datetime import date, timedelta
from pathlib import Path

from stepper_history.aggregation import goal_threshold
from stepper_history.config import get_daily_goal, get_db_path, get_units, set_daily_goal, set_units
from stepper_history.controller import HistoryController
from stepper_history.dates import Preset, all_preset_ranges
from stepper_history.db import Database
from stepper_history.display import (
    print_activity_summary,
    print_chart,
    print_error,
    print_history_page,
    print_message,
    print_presets,
    print_step_stats,
    print_streak,
    print_sync_result,
)
from stepper_history.logging_setup import configure_logging
from stepper_history.models import DateRange, ViewMode
from stepper_history.provider import StepsProviderError
from stepper_history.selector import display_to_dict
from stepper_history.steps import (
    DEFAULT_PAGE_SIZE,
    delete_by_source,
    get_activity_summary,
    get_history_page,
    get_step_stats,
    record_steps,
    sync_steps,
)

PRESET_CHOICES = [p.value for p in Preset]
VIEW_CHOICES = [v.value for v in ViewMode]


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="stepper-history",
        description="Step history charts, streaks and stats",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output to stderr")
    subparsers = parser.add_subparsers(dest="command")

    chart_p = subparsers.add_parser("chart", help="Show the step chart for a period")
    chart_p.add_argument("--view", choices=VIEW_CHOICES, default="daily")
    chart_p.add_argument("--offset", type=int, default=0, help="0 = current period, -1 = previous, ...")

    range_p = subparsers.add_parser("range", help="Show a custom date range (daily bars)")
    range_p.add_argument("--preset", "-p", choices=PRESET_CHOICES, default=None)
    range_p.add_argument("--start", "-s", default=None, help="YYYY-MM-DD")
    range_p.add_argument("--end", "-e", default=None, help="YYYY-MM-DD")

    subparsers.add_parser("presets", help="List quick-select date ranges")
    subparsers.add_parser("streak", help="Show your activity streak")
    subparsers.add_parser("stats", help="Today, week and month totals with goal streaks")
    subparsers.add_parser("activity", help="Last 7 days summary")

    record_p = subparsers.add_parser("record", help="Record steps for a day")
    record_p.add_argument("--steps", type=int, required=True)
    record_p.add_argument("--distance", type=float, default=None, help="Distance in meters")
    record_p.add_argument("--date", default=None, help="YYYY-MM-DD (default: today)")
    record_p.add_argument("--source", default=None)

    import_p = subparsers.add_parser("import", help="Bulk import entries from a JSON file")
    import_p.add_argument("file", help="JSON list of {date, stepCount, distanceMeters, source}")

    history_p = subparsers.add_parser("history", help="List raw step entries")
    history_p.add_argument("--start", default=None, help="YYYY-MM-DD (default: 30 days ago)")
    history_p.add_argument("--end", default=None, help="YYYY-MM-DD (default: today)")
    history_p.add_argument("--page", type=int, default=1)
    history_p.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE)

    delete_p = subparsers.add_parser("delete-source", help="Delete every entry from a source")
    delete_p.add_argument("source")

    goal_p = subparsers.add_parser("goal", help="Show or set the daily step goal")
    goal_p.add_argument("value", type=int, nargs="?", default=None)

    units_p = subparsers.add_parser("units", help="Show or set distance units")
    units_p.add_argument("value", choices=["metric", "imperial"], nargs="?", default=None)
    return parser


def main() -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args()
    command = args.command or "chart"

    configure_logging(verbose=args.verbose)

    try:
        if command == "goal":
            do_goal(args.value)
            return
        if command == "units":
            do_units(args.value)
            return
        if command == "presets":
            do_presets()
            return

        db = Database(get_db_path())
        try:
            if command == "chart":
                do_chart(db, view=getattr(args, "view", "daily"), offset=getattr(args, "offset", 0))
            elif command == "range":
                do_range(db, preset=args.preset, start=args.start, end=args.end)
            elif command == "streak":
                do_streak(db)
            elif command == "stats":
                do_stats(db)
            elif command == "activity":
                do_activity(db)
            elif command == "record":
                do_record(db, steps=args.steps, distance=args.distance, entry_date=args.date, source=args.source)
            elif command == "import":
                do_import(db, Path(args.file))
            elif command == "history":
                do_history(db, start=args.start, end=args.end, page=args.page, page_size=args.page_size)
            elif command == "delete-source":
                do_delete_source(db, args.source)
        finally:
            db.close()
    except (ValueError, StepsProviderError) as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc


def _parse_date(value: str, name: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid {name} date: {value!r} (expected YYYY-MM-DD)") from exc


def _render_display(controller: HistoryController, view_mode: ViewMode) -> dict:
    data = display_to_dict(controller.display())
    data["goal_threshold"] = goal_threshold(view_mode, get_daily_goal())
    data["units"] = get_units()
    print_chart(data)
    return data


def do_chart(db: Database, view: str = "daily", offset: int = 0, today: date | None = None) -> dict:
    """Fetch and render the offset-navigated chart. Returns the display dict."""
    view_mode = ViewMode(view)
    controller = HistoryController(db, view_mode=view_mode, today=today)
    controller.go_to_offset(offset)
    return _render_display(controller, view_mode)


def do_range(
    db: Database,
    preset: str | None = None,
    start: str | None = None,
    end: str | None = None,
    today: date | None = None,
) -> dict:
    """Render a custom range, either from a preset or explicit start/end."""
    controller = HistoryController(db, today=today)
    if preset:
        controller.apply_preset(Preset(preset))
    elif start and end:
        controller.confirm_date_range(_parse_date(start, "start"), _parse_date(end, "end"))
    else:
        raise ValueError("Pass --preset, or both --start and --end.")
    return _render_display(controller, ViewMode.DAILY)


def do_presets(today: date | None = None) -> list[dict]:
    ref = today or date.today()
    presets = [
        {
            "key": preset.value,
            "label": preset.label,
            "start": date_range.start.isoformat(),
            "end": date_range.end.isoformat(),
        }
        for preset, date_range in all_preset_ranges(ref).items()
    ]
    print_presets(presets)
    return presets


def do_streak(db: Database, today: date | None = None) -> dict:
    data = asdict(HistoryController(db, today=today).current_streak())
    print_streak(data)
    return data


def do_stats(db: Database, today: date | None = None) -> dict:
    stats = get_step_stats(db, daily_goal=get_daily_goal(), today=today)
    data = asdict(stats)
    data["units"] = get_units()
    print_step_stats(data)
    return data


def do_activity(db: Database, today: date | None = None) -> dict:
    summary = get_activity_summary(db, today=today)
    data = asdict(summary)
    data["units"] = get_units()
    print_activity_summary(data)
    return data


def do_record(
    db: Database,
    steps: int,
    distance: float | None = None,
    entry_date: str | None = None,
    source: str | None = None,
    today: date | None = None,
) -> dict:
    ref = today or date.today()
    day = _parse_date(entry_date, "entry") if entry_date else ref
    entry = record_steps(db, steps, day, distance_meters=distance, source=source, today=ref)
    print_message(f"Recorded {steps:,} steps for {day.isoformat()}.", title="Steps Recorded")
    return entry


def do_import(db: Database, path: Path, today: date | None = None) -> dict:
    """Import a JSON list of sync entries (or {"entries": [...]})."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"File not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc.msg}") from exc

    entries = raw.get("entries") if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise ValueError("Expected a list of entries.")

    result = asdict(sync_steps(db, entries, today=today))
    print_sync_result(result)
    return result


def do_history(
    db: Database,
    start: str | None = None,
    end: str | None = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    today: date | None = None,
) -> dict:
    ref = today or date.today()
    end_date = _parse_date(end, "end") if end else ref
    start_date = _parse_date(start, "start") if start else end_date - timedelta(days=29)
    history = get_history_page(db, DateRange(start_date, end_date), page=page, page_size=page_size)
    data = asdict(history)
    data["units"] = get_units()
    print_history_page(data)
    return data


def do_delete_source(db: Database, source: str) -> int:
    deleted = delete_by_source(db, source)
    print_message(f"Deleted {deleted} entries from {source}.", title="Source Removed")
    return deleted


def do_goal(value: int | None = None, config_path: Path | None = None) -> int:
    if value is not None:
        set_daily_goal(value, config_path)
    goal = get_daily_goal(config_path)
    print_message(f"Daily goal: {goal:,} steps", title="Goal")
    return goal


def do_units(value: str | None = None, config_path: Path | None = None) -> str:
    if value is not None:
        set_units(value, config_path)
    units = get_units(config_path)
    print_message(f"Distance units: {units}", title="Units")
    return units
