"""
SQLite event store: the calendar's events keyed by id.
"""

import json
import logging
import sqlite3
import time
from datetime import date
from datetime import datetime
from pathlib import Path

from week_calendar.models import CalendarViewError
from week_calendar.models import Event
from week_calendar.models import EventSource
from week_calendar.models import EventStatus
from week_calendar.records import event_to_record
from week_calendar.records import load_events

_COLUMNS = (
    "id",
    "title",
    "description",
    "color",
    "start_time",
    "end_time",
    "is_recurring",
    "recurrence_rule",
    "recurrence_id",
    "recurrence_exception_dates",
    "status",
    "source",
)


class EventStore:
    """Manages the SQLite events table."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.conn: sqlite3.Connection | None = None
        self.logger = logging.getLogger(__name__)

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def connect(self):
        """Initialize and connect to the event database."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row  # Enable column access by name
        self._init_schema()

    def _init_schema(self):
        """Create the events table if it doesn't exist."""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS events (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                description TEXT,
                color TEXT,
                start_time TEXT NOT NULL,
                end_time TEXT NOT NULL,
                is_recurring INTEGER NOT NULL DEFAULT 0,
                recurrence_rule TEXT,
                recurrence_id TEXT,
                recurrence_exception_dates TEXT NOT NULL DEFAULT '[]',
                status TEXT NOT NULL DEFAULT 'confirmed',
                source TEXT NOT NULL DEFAULT 'local',
                created_at INTEGER NOT NULL,
                updated_at INTEGER NOT NULL
            )
        """)
        self.conn.execute(
            "CREATE INDEX IF NOT EXISTS events_recurrence_id ON events (recurrence_id)"
        )
        self.conn.commit()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> dict:
        record = dict(row)
        record["is_recurring"] = bool(record["is_recurring"])
        record["recurrence_exception_dates"] = json.loads(
            record["recurrence_exception_dates"] or "[]"
        )
        return record

    # ------------------------------------------------------------------ #
    # Queries                                                               #
    # ------------------------------------------------------------------ #

    def get_record(self, event_id: str) -> dict | None:
        """Return the raw record for ``event_id`` or None."""
        cursor = self.conn.execute("SELECT * FROM events WHERE id = ? LIMIT 1", (event_id,))
        row = cursor.fetchone()
        return self._row_to_record(row) if row else None

    def get(self, event_id: str) -> Event | None:
        record = self.get_record(event_id)
        if record is None:
            return None
        events, _ = load_events([record])
        return events[0] if events else None

    def all_records(self) -> list[dict]:
        """All raw records ordered by start time (ties by id)."""
        cursor = self.conn.execute("SELECT * FROM events ORDER BY start_time, id")
        return [self._row_to_record(row) for row in cursor.fetchall()]

    def all_events(self) -> tuple[list[Event], int]:
        """All events that parse, plus the number of records that did not."""
        return load_events(self.all_records())

    def series_records(self, anchor_id: str) -> list[dict]:
        """Records that belong to the series anchored at ``anchor_id`` (anchor excluded)."""
        cursor = self.conn.execute(
            "SELECT * FROM events WHERE recurrence_id = ? AND id != ? ORDER BY start_time",
            (anchor_id, anchor_id),
        )
        return [self._row_to_record(row) for row in cursor.fetchall()]

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM events").fetchone()[0]

    # ------------------------------------------------------------------ #
    # Mutations                                                             #
    # ------------------------------------------------------------------ #

    def upsert(self, event: Event):
        """Insert ``event`` or replace the stored record with the same id."""
        record = event_to_record(event)
        record["is_recurring"] = int(record["is_recurring"])
        record["recurrence_exception_dates"] = json.dumps(record["recurrence_exception_dates"])
        timestamp = int(time.time())
        placeholders = ", ".join("?" for _ in _COLUMNS)
        updates = ", ".join(f"{c} = excluded.{c}" for c in _COLUMNS if c != "id")
        self.conn.execute(
            f"INSERT INTO events ({', '.join(_COLUMNS)}, created_at, updated_at) "
            f"VALUES ({placeholders}, ?, ?) "
            f"ON CONFLICT(id) DO UPDATE SET {updates}, updated_at = excluded.updated_at",
            (*(record[c] for c in _COLUMNS), timestamp, timestamp),
        )

    def upsert_many(self, events: list[Event]) -> int:
        for event in events:
            self.upsert(event)
        return len(events)

    def delete(self, event_id: str) -> int:
        """Delete one event; returns the number of rows removed."""
        cursor = self.conn.execute("DELETE FROM events WHERE id = ?", (event_id,))
        return cursor.rowcount

    def delete_series(self, anchor_id: str) -> int:
        """Delete an anchor together with every record pointing at it."""
        cursor = self.conn.execute(
            "DELETE FROM events WHERE id = ? OR recurrence_id = ?", (anchor_id, anchor_id)
        )
        return cursor.rowcount

    def add_recurrence_exception(self, anchor_id: str, occurrence: date | datetime) -> Event:
        """Cancel one occurrence of a series by storing a cancellation record.

        ``occurrence`` may be a date, in which case the anchor's time of day
        is used for the cancellation's start time.
        """
        anchor = self.get(anchor_id)
        if anchor is None:
            raise CalendarViewError(f"Event not found: {anchor_id}")
        if not anchor.recurrence_rule:
            raise CalendarViewError(f"Event {anchor_id} is not a recurring series")

        if isinstance(occurrence, datetime):
            start = occurrence
        else:
            start = datetime.combine(occurrence, anchor.start_time.timetz())

        cancellation = Event(
            id=f"{anchor_id}-{start.date().isoformat()}",
            title=anchor.title,
            start_time=start,
            end_time=start,
            is_recurring=False,
            recurrence_rule=None,
            recurrence_id=anchor.series_id,
            status=EventStatus.CANCELLED,
            source=EventSource.LOCAL,
        )
        self.upsert(cancellation)
        self.logger.debug(
            "Cancelled occurrence of %s on %s (%s)", anchor_id, start.date(), cancellation.id
        )
        return cancellation

    def clear_all(self):
        """Remove every event."""
        self.conn.execute("DELETE FROM events")

    def commit(self):
        """Commit pending transactions."""
        if self.conn:
            self.conn.commit()

    def close(self):
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
