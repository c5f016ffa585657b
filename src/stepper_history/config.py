"""Configuration file management for stepper-history.

Reads and writes ~/.stepper-history/config.json for user preferences
(daily goal, distance units) and an optional database path override.
"""
from __future__ import annotations

import json
from pathlib import Path

DEFAULT_CONFIG_PATH: Path = Path.home() / ".stepper-history" / "config.json"

DEFAULT_DAILY_GOAL = 10_000
UNITS = ("metric", "imperial")


def load_config(config_path: Path | None = None) -> dict:
    """Load config from JSON file. Returns {} if file missing or invalid."""
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict, config_path: Path | None = None) -> None:
    """Write config dict to JSON file. Creates parent dirs if needed."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def get_daily_goal(config_path: Path | None = None) -> int:
    """Return the configured daily step goal, falling back to 10,000."""
    raw = load_config(config_path).get("daily_goal")
    if isinstance(raw, int) and not isinstance(raw, bool) and raw > 0:
        return raw
    return DEFAULT_DAILY_GOAL


def set_daily_goal(goal: int, config_path: Path | None = None) -> None:
    if goal <= 0:
        raise ValueError("Daily goal must be a positive number of steps.")
    config = load_config(config_path)
    config["daily_goal"] = goal
    save_config(config, config_path)


def get_units(config_path: Path | None = None) -> str:
    raw = load_config(config_path).get("units")
    return raw if raw in UNITS else "metric"


def set_units(units: str, config_path: Path | None = None) -> None:
    if units not in UNITS:
        raise ValueError(f"Units must be one of: {', '.join(UNITS)}")
    config = load_config(config_path)
    config["units"] = units
    save_config(config, config_path)


def get_db_path(config_path: Path | None = None) -> Path | None:
    """Return the configured database path, or None to use the default."""
    raw = load_config(config_path).get("db_path")
    if raw:
        return Path(raw).expanduser()
    return None
