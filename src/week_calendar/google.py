"""
Map Google Calendar API event resources onto Event.

Google sends recurring series as one master item whose ``recurrence`` list
holds ``RRULE:`` and ``EXDATE`` lines, plus separate items (with
``recurringEventId``) for moved or cancelled occurrences.
"""

import logging
import re
from typing import Any

from week_calendar.models import Event
from week_calendar.models import EventRecordError
from week_calendar.models import EventSource
from week_calendar.models import EventStatus
from week_calendar.records import parse_exception_dates
from week_calendar.records import parse_instant

_logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#039be5"

GOOGLE_CALENDAR_COLORS = {
    "1": "#7986cb",  # Lavender
    "2": "#33b679",  # Sage
    "3": "#8e24aa",  # Grape
    "4": "#e67c73",  # Flamingo
    "5": "#f6c026",  # Banana
    "6": "#f5511d",  # Tangerine
    "7": "#039be5",  # Peacock
    "8": "#616161",  # Graphite
    "9": "#3f51b5",  # Blueberry
    "10": "#0b8043",  # Basil
    "11": "#d60000",  # Tomato
}

# EXDATE;VALUE=DATE:20240115 or EXDATE;TZID=Europe/Berlin:20240115T090000,20240122T090000
_EXDATE_LINE_RE = re.compile(r"^EXDATE[^:]*:(.+)$", re.IGNORECASE)
_EXDATE_VALUE_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})")


def _time_field(item: dict[str, Any], key: str):
    value = item.get(key) or {}
    return value.get("dateTime") or value.get("date")


def split_recurrence(lines: list[str] | None) -> tuple[str | None, list[str]]:
    """Return (first RRULE line, exception dates as ISO strings) from ``recurrence``."""
    rule = None
    exdates = []
    for line in lines or ():
        line = line.strip()
        if line.upper().startswith("RRULE:"):
            if rule is None:
                rule = line
            continue
        m = _EXDATE_LINE_RE.match(line)
        if not m:
            continue
        for value in m.group(1).split(","):
            dm = _EXDATE_VALUE_RE.match(value.strip())
            if dm:
                exdates.append(f"{dm.group(1)}-{dm.group(2)}-{dm.group(3)}")
    return rule, exdates


def event_from_google(item: dict[str, Any]) -> Event:
    """Build an Event from one Google Calendar ``events`` resource."""
    event_id = item.get("id")
    if not event_id:
        raise EventRecordError("Google event has no id")

    status = EventStatus.CANCELLED if item.get("status") == "cancelled" else EventStatus.CONFIRMED
    recurrence = item.get("recurrence")
    recurring_event_id = item.get("recurringEventId")
    is_recurring = bool(recurrence or recurring_event_id)

    if status == EventStatus.CANCELLED:
        # A cancellation belongs to the day the occurrence was scheduled on,
        # even when the occurrence had been moved before it was cancelled.
        start_raw = _time_field(item, "originalStartTime") or _time_field(item, "start")
        start = end = parse_instant(start_raw)
    else:
        start = parse_instant(_time_field(item, "start"))
        end_raw = _time_field(item, "end")
        end = parse_instant(end_raw) if end_raw is not None else start

    rule, exdates = split_recurrence(recurrence)

    return Event(
        id=str(event_id),
        title=item.get("summary") or "Untitled Event",
        start_time=start,
        end_time=end,
        description=item.get("description") or None,
        color=GOOGLE_CALENDAR_COLORS.get(str(item.get("colorId")), DEFAULT_COLOR),
        is_recurring=is_recurring,
        recurrence_rule=rule,
        recurrence_id=recurring_event_id or (str(event_id) if is_recurring else None),
        recurrence_exception_dates=parse_exception_dates(exdates),
        status=status,
        source=EventSource.GOOGLE,
    )


def load_google_events(items: list[dict[str, Any]]) -> tuple[list[Event], int]:
    """Convert Google items, skipping (and logging) the ones that are invalid."""
    events = []
    skipped = 0
    for item in items:
        try:
            events.append(event_from_google(item))
        except EventRecordError as e:
            skipped += 1
            _logger.warning("Skipping Google event %s: %s", item.get("id", "?"), e)
    return events, skipped
