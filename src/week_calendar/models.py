"""
Pure data models, no sqlite or CLI imports.
"""

from dataclasses import dataclass
from dataclasses import replace
from datetime import date
from datetime import datetime
from enum import Enum
from pathlib import Path

DEFAULT_STORE_DB = Path.home() / ".local/share/week-calendar-events.db"
DEFAULT_CONFIG = Path.home() / ".config/week-calendar.conf"


class CalendarViewError(Exception):
    """Base exception for calendar view errors."""

    pass


class EventRecordError(CalendarViewError):
    """A raw event record could not be turned into an Event."""

    pass


class EventStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class EventSource(str, Enum):
    LOCAL = "local"
    GOOGLE = "google"


@dataclass(frozen=True)
class Event:
    """A calendar event as stored by the event store or yielded by Google.

    Anchor events of a series carry ``recurrence_rule``.  Cancellation records
    carry ``status=CANCELLED`` and point at the anchor through ``recurrence_id``.
    Materialized occurrences carry ``anchor_id`` so callers never need to
    take the synthetic ``id`` apart.
    """

    id: str
    title: str
    start_time: datetime
    end_time: datetime
    description: str | None = None
    color: str | None = None
    is_recurring: bool = False
    recurrence_rule: str | None = None
    recurrence_id: str | None = None
    recurrence_exception_dates: tuple[date, ...] = ()
    status: EventStatus = EventStatus.CONFIRMED
    source: EventSource = EventSource.LOCAL
    anchor_id: str | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == EventStatus.CANCELLED

    @property
    def series_id(self) -> str:
        """Key under which cancellations of this event's series are recorded."""
        return self.recurrence_id or self.id

    def with_times(self, start_time: datetime, end_time: datetime, **changes) -> "Event":
        return replace(self, start_time=start_time, end_time=end_time, **changes)


@dataclass(frozen=True)
class Segment:
    """The part of one event that falls inside one calendar day."""

    event: Event
    day: date
    start_time: datetime
    end_time: datetime
    is_start: bool
    is_end: bool

    @property
    def id(self) -> str:
        return self.event.id

    @property
    def title(self) -> str:
        return self.event.title

    @property
    def description(self) -> str | None:
        return self.event.description

    @property
    def color(self) -> str | None:
        return self.event.color

    @property
    def source(self) -> EventSource:
        return self.event.source

    @property
    def anchor_id(self) -> str | None:
        return self.event.anchor_id

    @property
    def is_continuation(self) -> bool:
        return not (self.is_start and self.is_end)


@dataclass
class ViewConfig:
    """Configuration for the week view."""

    store_db_path: Path
    week_start: str = "monday"  # 'monday' or 'sunday'
    time_format: str = "12h"  # '12h' or '24h'
