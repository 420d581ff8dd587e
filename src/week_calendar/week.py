"""
Resolve a visible week into per-day render lists.

For every (day, event) pair: plain events are clipped to the day directly,
recurring anchors are tested against their rule, checked against the
cancellation index and materialized before clipping.  Cancelled records are
never rendered; they only feed the cancellation index.
"""

import logging
from collections.abc import Iterable
from collections.abc import Sequence
from datetime import date
from datetime import timedelta

from week_calendar.models import Event
from week_calendar.models import Segment
from week_calendar.recurrence import RecurrenceRule
from week_calendar.recurrence import materialize_instance
from week_calendar.recurrence import occurs_on
from week_calendar.recurrence import parse_rule
from week_calendar.segments import segment_for_day

_logger = logging.getLogger(__name__)

_WEEK_STARTS = {"monday": 0, "sunday": 6}


class CancellationIndex:
    """Set of (series id, day) pairs whose occurrence has been cancelled.

    Built once per resolution pass from every cancelled record that points
    at a series.  Records whose anchor is not in the pass are kept but
    simply never looked up.
    """

    def __init__(self, entries: Iterable[tuple[str, date]] = ()):
        self._entries: set[tuple[str, date]] = set(entries)

    @classmethod
    def build(cls, events: Iterable[Event]) -> "CancellationIndex":
        entries = set()
        for event in events:
            if not (event.is_cancelled and event.recurrence_id):
                continue
            try:
                entries.add((event.recurrence_id, event.start_time.date()))
            except AttributeError:
                _logger.warning("Ignoring cancellation %s with no valid start time", event.id)
        return cls(entries)

    def is_cancelled(self, series_id: str, day: date) -> bool:
        return (series_id, day) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def week_days(reference: date, week_start: str = "monday") -> list[date]:
    """Return the seven days of the week containing ``reference``."""
    try:
        first_weekday = _WEEK_STARTS[week_start.lower()]
    except KeyError:
        raise ValueError(f"week_start must be 'monday' or 'sunday', got {week_start!r}") from None
    offset = (reference.weekday() - first_weekday) % 7
    start = reference - timedelta(days=offset)
    return [start + timedelta(days=i) for i in range(7)]


def _is_series_anchor(event: Event) -> bool:
    return event.is_recurring and bool(event.recurrence_rule)


def _segment_event(
    event: Event,
    rule: RecurrenceRule | None,
    day: date,
    cancellations: CancellationIndex,
) -> Segment | None:
    if rule is None:
        return segment_for_day(event, day)

    if not occurs_on(event.start_time, rule, event.recurrence_exception_dates, day):
        return None
    if cancellations.is_cancelled(event.series_id, day):
        _logger.debug("Occurrence of %s on %s is cancelled", event.series_id, day)
        return None
    return segment_for_day(materialize_instance(event, day), day)


def resolve_week(events: Sequence[Event], days: Sequence[date]) -> dict[date, list[Segment]]:
    """Return the segments to render for each of ``days``.

    Every requested day is a key of the result.  Within a day, segments keep
    the order of ``events``; callers sort ``events`` first if they want
    chronological order.  An event that cannot be evaluated (bad timestamps)
    is logged and left out of that day only.
    """
    cancellations = CancellationIndex.build(events)

    # Rules are parsed once per pass, not once per day.
    rules = [parse_rule(e.recurrence_rule) if _is_series_anchor(e) else None for e in events]

    result: dict[date, list[Segment]] = {}
    for day in days:
        segments = result.setdefault(day, [])
        for event, rule in zip(events, rules):
            if event.is_cancelled:
                continue
            try:
                segment = _segment_event(event, rule, day, cancellations)
            except (TypeError, ValueError, OverflowError, AttributeError) as e:
                _logger.warning("Skipping event %s on %s: %s", event.id, day, e)
                continue
            if segment is not None:
                segments.append(segment)
    return result
