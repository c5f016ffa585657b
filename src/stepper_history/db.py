"""SQLite step store for stepper-history."""

import sqlite3
import uuid
from datetime import date, datetime, timezone
from pathlib import Path

from stepper_history.provider import StepsProviderError

DEFAULT_DB_PATH = Path.home() / ".stepper-history" / "steps.db"


class Database:
    """SQLite database manager with WAL mode.

    Also serves as a StepsHistoryProvider for the chart pipelines.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.init_db()

    def init_db(self) -> None:
        """Create tables if they do not exist."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS step_entries (
                id TEXT PRIMARY KEY,
                date TEXT NOT NULL,
                step_count INTEGER NOT NULL DEFAULT 0,
                distance_meters REAL,
                source TEXT,
                recorded_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_step_entries_date_source
                ON step_entries (date, source);

            CREATE INDEX IF NOT EXISTS idx_step_entries_date
                ON step_entries (date);
        """)
        self.conn.commit()

    def record_entry(
        self,
        entry_date: str,
        step_count: int,
        distance_meters: float | None = None,
        source: str | None = None,
    ) -> dict:
        """Insert a new step entry and return it."""
        entry_id = str(uuid.uuid4())
        recorded_at = datetime.now(tz=timezone.utc).isoformat()
        self.conn.execute(
            "INSERT INTO step_entries (id, date, step_count, distance_meters, source, recorded_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (entry_id, entry_date, step_count, distance_meters, source, recorded_at),
        )
        self.conn.commit()
        return self.get_entry(entry_id)

    def upsert_by_date_and_source(
        self,
        entry_date: str,
        step_count: int,
        source: str,
        distance_meters: float | None = None,
    ) -> bool:
        """Insert or replace the entry for (date, source). Returns True if created."""
        existing = self.conn.execute(
            "SELECT id FROM step_entries WHERE date = ? AND source = ?",
            (entry_date, source),
        ).fetchone()
        recorded_at = datetime.now(tz=timezone.utc).isoformat()
        if existing is None:
            self.conn.execute(
                "INSERT INTO step_entries (id, date, step_count, distance_meters, source, recorded_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (str(uuid.uuid4()), entry_date, step_count, distance_meters, source, recorded_at),
            )
        else:
            self.conn.execute(
                "UPDATE step_entries SET step_count = ?, distance_meters = ?, recorded_at = ? "
                "WHERE id = ?",
                (step_count, distance_meters, recorded_at, existing["id"]),
            )
        self.conn.commit()
        return existing is None

    def get_entry(self, entry_id: str) -> dict | None:
        """Get a single step entry by ID."""
        row = self.conn.execute(
            "SELECT * FROM step_entries WHERE id = ?", (entry_id,)
        ).fetchone()
        return dict(row) if row else None

    def delete_entry(self, entry_id: str) -> bool:
        """Delete a step entry. Returns False if it did not exist."""
        cursor = self.conn.execute("DELETE FROM step_entries WHERE id = ?", (entry_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    def delete_by_source(self, source: str) -> int:
        """Delete every entry from a source. Returns the number removed."""
        cursor = self.conn.execute("DELETE FROM step_entries WHERE source = ?", (source,))
        self.conn.commit()
        return cursor.rowcount

    def get_entries_page(
        self, start_date: str, end_date: str, page: int, page_size: int
    ) -> tuple[list[dict], int]:
        """Entries in a date range (inclusive), newest first, one page at a time."""
        total = self.conn.execute(
            "SELECT COUNT(*) FROM step_entries WHERE date >= ? AND date <= ?",
            (start_date, end_date),
        ).fetchone()[0]
        rows = self.conn.execute(
            "SELECT * FROM step_entries WHERE date >= ? AND date <= ? "
            "ORDER BY date DESC, recorded_at DESC LIMIT ? OFFSET ?",
            (start_date, end_date, page_size, (page - 1) * page_size),
        ).fetchall()
        return [dict(row) for row in rows], total

    def get_daily_summaries(self, start_date: str, end_date: str) -> list[dict]:
        """Per-day totals across all sources for a date range (inclusive), ordered by date."""
        rows = self.conn.execute(
            "SELECT date, SUM(step_count) AS total_steps, "
            "COALESCE(SUM(distance_meters), 0.0) AS total_distance_meters "
            "FROM step_entries WHERE date >= ? AND date <= ? "
            "GROUP BY date ORDER BY date",
            (start_date, end_date),
        ).fetchall()
        return [dict(row) for row in rows]

    def get_all_daily_summaries(self) -> list[dict]:
        """Per-day totals for the whole history, newest first."""
        rows = self.conn.execute(
            "SELECT date, SUM(step_count) AS total_steps, "
            "COALESCE(SUM(distance_meters), 0.0) AS total_distance_meters "
            "FROM step_entries GROUP BY date ORDER BY date DESC"
        ).fetchall()
        return [dict(row) for row in rows]

    # StepsHistoryProvider

    def get_daily_history(self, start_date: str, end_date: str) -> list[dict]:
        try:
            summaries = self.get_daily_summaries(start_date, end_date)
        except sqlite3.Error as exc:
            raise StepsProviderError(f"Could not load step history: {exc}") from exc
        return [
            {
                "date": s["date"],
                "totalSteps": s["total_steps"],
                "totalDistanceMeters": s["total_distance_meters"],
            }
            for s in summaries
        ]

    def get_activity_dates(self) -> list[date]:
        try:
            rows = self.conn.execute(
                "SELECT DISTINCT date FROM step_entries ORDER BY date DESC"
            ).fetchall()
        except sqlite3.Error as exc:
            raise StepsProviderError(f"Could not load activity dates: {exc}") from exc
        return [date.fromisoformat(row["date"]) for row in rows]

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()
