"""
Clip events to calendar days for the week grid.
"""

from collections.abc import Iterable
from datetime import date
from datetime import datetime
from datetime import time
from datetime import timedelta
from datetime import tzinfo

from week_calendar.models import Event
from week_calendar.models import Segment


def day_bounds(day: date, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    """Return the ``[00:00, next 00:00)`` window of ``day`` in ``tz``."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    return start, start + timedelta(days=1)


def overlaps_day(event: Event, day: date) -> bool:
    """True if the event has any time inside ``day``.

    The day window is half-open, ``[00:00, next 00:00)`` in the event's
    timezone, so an event ending exactly at midnight does not spill into
    the next day and no empty trailing segment is ever produced.
    Zero-length events (start == end) belong to the day they sit on.
    """
    day_start, day_end = day_bounds(day, event.start_time.tzinfo)
    if event.start_time == event.end_time:
        return day_start <= event.start_time < day_end
    return event.start_time < day_end and event.end_time > day_start


def segment_for_day(event: Event, day: date) -> Segment | None:
    """Clip ``event`` to ``day``; None when the event does not touch the day."""
    if not overlaps_day(event, day):
        return None

    day_start, day_end = day_bounds(day, event.start_time.tzinfo)
    start = max(event.start_time, day_start)
    end = min(event.end_time, day_end)
    return Segment(
        event=event,
        day=day,
        start_time=start,
        end_time=end,
        is_start=start == event.start_time,
        is_end=end == event.end_time,
    )


def segments_for_range(event: Event, days: Iterable[date]) -> list[Segment]:
    """Segment ``event`` over each of ``days``, skipping days it misses."""
    return [seg for seg in (segment_for_day(event, d) for d in days) if seg is not None]
