"""
Shared pytest fixtures and event-building helpers.
"""

from datetime import datetime

import pytest

from week_calendar.db import EventStore
from week_calendar.models import Event
from week_calendar.models import EventSource
from week_calendar.models import EventStatus


def at(timestamp: str) -> datetime:
    """Parse an ISO 8601 timestamp such as ``2024-01-01T09:00Z``."""
    return datetime.fromisoformat(timestamp.replace("Z", "+00:00"))


def make_event(
    event_id: str = "E1",
    start: str = "2024-01-01T09:00Z",
    end: str = "2024-01-01T10:00Z",
    title: str = "Test Event",
    **fields,
) -> Event:
    """Return a confirmed, non-recurring local event."""
    return Event(id=event_id, title=title, start_time=at(start), end_time=at(end), **fields)


def make_recurring_event(
    event_id: str = "E1",
    rule: str = "FREQ=WEEKLY;INTERVAL=1",
    start: str = "2024-01-01T09:00Z",
    end: str = "2024-01-01T10:00Z",
    **fields,
) -> Event:
    """Return a recurring anchor event."""
    return make_event(
        event_id,
        start,
        end,
        title="Recurring Event",
        is_recurring=True,
        recurrence_rule=rule,
        **fields,
    )


def make_cancellation(anchor_id: str, start: str, event_id: str | None = None) -> Event:
    """Return a cancellation record for one occurrence of ``anchor_id``."""
    return Event(
        id=event_id or f"{anchor_id}-{start[:10]}",
        title="Cancelled",
        start_time=at(start),
        end_time=at(start),
        recurrence_id=anchor_id,
        status=EventStatus.CANCELLED,
        source=EventSource.LOCAL,
    )


def make_record(event_id: str = "R1", **overrides) -> dict:
    """Return a raw event record as the store or a JSON import holds it."""
    record = {
        "id": event_id,
        "title": "Record Event",
        "start_time": "2024-01-01T09:00:00Z",
        "end_time": "2024-01-01T10:00:00Z",
        "is_recurring": False,
        "recurrence_rule": None,
        "recurrence_id": None,
        "recurrence_exception_dates": [],
        "status": "confirmed",
        "source": "local",
    }
    record.update(overrides)
    return record


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test_events.db"


@pytest.fixture
def store(db_path):
    with EventStore(db_path) as db:
        yield db
