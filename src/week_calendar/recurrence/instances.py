"""
Turn an anchor event plus an occurrence date into a concrete event.
"""

from datetime import date
from datetime import datetime

from week_calendar.models import Event


def instance_id(anchor_id: str, target: date) -> str:
    """Deterministic id for the occurrence of a series on ``target``.

    Used as a stable UI key only; the anchor is carried separately in
    ``Event.anchor_id``.
    """
    return f"{anchor_id}-recurring-{target.isoformat()}"


def materialize_instance(event: Event, target: date) -> Event:
    """Return the occurrence of ``event`` on ``target``.

    The start keeps the anchor's time of day (and tzinfo), and the end keeps
    the anchor's duration.  Only call this for dates the matcher accepted.
    """
    if isinstance(target, datetime):
        target = target.date()

    duration = event.end_time - event.start_time
    start = datetime.combine(target, event.start_time.timetz())
    end = start + duration

    return event.with_times(
        start,
        end,
        id=instance_id(event.id, target),
        is_recurring=True,
        anchor_id=event.series_id,
    )
