"""
Conversion between raw event records (dicts, as stored or imported) and Event.

Raw records use the column names of the event store: ``start_time`` and
``end_time`` as ISO 8601 strings, ``recurrence_exception_dates`` as a list of
ISO dates or datetimes, ``status`` and ``source`` as plain strings.
"""

import logging
from collections.abc import Iterable
from datetime import date
from datetime import datetime
from datetime import timezone
from typing import Any

from week_calendar.models import Event
from week_calendar.models import EventRecordError
from week_calendar.models import EventSource
from week_calendar.models import EventStatus

_logger = logging.getLogger(__name__)


def parse_instant(value: Any) -> datetime:
    """Parse an ISO 8601 timestamp or date into an aware datetime.

    Naive timestamps and bare dates are taken as UTC.  Raises
    EventRecordError for anything else.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise EventRecordError(f"Invalid timestamp {value!r}: {e}") from e
    else:
        raise EventRecordError(f"Invalid timestamp {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_exception_dates(values: Iterable[Any] | None) -> tuple[date, ...]:
    """Parse exception dates; unparseable entries are logged and dropped."""
    result = []
    for value in values or ():
        try:
            result.append(parse_instant(value).date())
        except EventRecordError as e:
            _logger.warning("Ignoring recurrence exception date: %s", e)
    return tuple(result)


def _enum_value(enum_cls, value, default):
    if value is None:
        return default
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        _logger.debug("Unknown %s %r, using %s", enum_cls.__name__, value, default.value)
        return default


def event_from_record(record: dict[str, Any]) -> Event:
    """Build an Event from a store row or imported JSON object."""
    event_id = record.get("id")
    if not event_id:
        raise EventRecordError("Event record has no id")

    start = parse_instant(record.get("start_time"))
    end_raw = record.get("end_time")
    end = parse_instant(end_raw) if end_raw is not None else start
    if end < start:
        raise EventRecordError(f"Event {event_id} ends before it starts")

    exception_dates = record.get("recurrence_exception_dates")
    if isinstance(exception_dates, str):
        exception_dates = [exception_dates]

    return Event(
        id=str(event_id),
        title=record.get("title") or "Untitled Event",
        start_time=start,
        end_time=end,
        description=record.get("description"),
        color=record.get("color"),
        is_recurring=bool(record.get("is_recurring")),
        recurrence_rule=record.get("recurrence_rule") or None,
        recurrence_id=record.get("recurrence_id") or None,
        recurrence_exception_dates=parse_exception_dates(exception_dates),
        status=_enum_value(EventStatus, record.get("status"), EventStatus.CONFIRMED),
        source=_enum_value(EventSource, record.get("source"), EventSource.LOCAL),
    )


def event_to_record(event: Event) -> dict[str, Any]:
    """Inverse of event_from_record, suitable for the store or JSON export."""
    return {
        "id": event.id,
        "title": event.title,
        "description": event.description,
        "color": event.color,
        "start_time": event.start_time.isoformat(),
        "end_time": event.end_time.isoformat(),
        "is_recurring": event.is_recurring,
        "recurrence_rule": event.recurrence_rule,
        "recurrence_id": event.recurrence_id,
        "recurrence_exception_dates": [d.isoformat() for d in event.recurrence_exception_dates],
        "status": event.status.value,
        "source": event.source.value,
    }


def load_events(records: Iterable[dict[str, Any]]) -> tuple[list[Event], int]:
    """Convert records, skipping (and logging) the ones that are invalid.

    Returns (events, skipped_count).  Input order is preserved.
    """
    events = []
    skipped = 0
    for record in records:
        try:
            events.append(event_from_record(record))
        except EventRecordError as e:
            skipped += 1
            _logger.warning("Skipping event record %s: %s", record.get("id", "?"), e)
    return events, skipped
