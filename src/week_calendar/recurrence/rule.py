"""
Recurrence rule model and parser for the RRULE subset the calendar stores.

Only FREQ, INTERVAL, COUNT, BYDAY and UNTIL are understood.  Anything else in
the rule string is ignored, and a rule that cannot be understood at all comes
back as the neutral rule (frequency NONE), which never produces occurrences.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from datetime import datetime
from datetime import timezone
from enum import Enum

_logger = logging.getLogger(__name__)

WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")

# UNTIL=20240630 or UNTIL=20240630T235959Z (the trailing Z is optional).
_UNTIL_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})(?:T(\d{2})(\d{2})(\d{2})Z?)?$")

# BYDAY entries: bare "TU", or ordinal-qualified "2TU" / "-1FR".
_BYDAY_RE = re.compile(r"^([+-]?\d{1,2})?(MO|TU|WE|TH|FR|SA|SU)$")


class Frequency(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NONE = "none"


_FREQ_VALUES = {
    "DAILY": Frequency.DAILY,
    "WEEKLY": Frequency.WEEKLY,
    "MONTHLY": Frequency.MONTHLY,
    "YEARLY": Frequency.YEARLY,
}


@dataclass(frozen=True)
class RecurrenceRule:
    """Parsed form of a recurrence rule string.

    ``count`` is parsed and kept but the matcher does not enforce it.
    ``until`` is an inclusive bound: the whole UNTIL calendar day still
    produces occurrences.
    """

    frequency: Frequency = Frequency.NONE
    interval: int = 1
    count: int | None = None
    until: datetime | None = None
    by_day: tuple[str, ...] | None = None

    @classmethod
    def none(cls) -> "RecurrenceRule":
        return cls()

    def by_day_entries(self) -> list[tuple[int | None, str]]:
        """Split BYDAY codes into (ordinal, weekday code) pairs.

        Bare codes have ordinal None.  Entries that are not valid weekday
        codes are dropped.
        """
        entries = []
        for code in self.by_day or ():
            m = _BYDAY_RE.match(code)
            if not m:
                _logger.debug("Ignoring malformed BYDAY entry %r", code)
                continue
            ordinal = int(m.group(1)) if m.group(1) else None
            entries.append((ordinal, m.group(2)))
        return entries


def weekday_code(d: date) -> str:
    """Return the two-letter RRULE weekday code (MO..SU) for a date."""
    return WEEKDAY_CODES[d.weekday()]


def _parse_positive_int(value: str) -> int | None:
    try:
        n = int(value)
    except ValueError:
        return None
    return n if n > 0 else None


def parse_until(value: str) -> datetime | None:
    """Parse an UNTIL value as a UTC instant, or return None if malformed."""
    m = _UNTIL_RE.match(value.strip())
    if not m:
        _logger.debug("Malformed UNTIL value %r, treating rule as unbounded", value)
        return None
    year, month, day, hour, minute, second = (int(g) if g else 0 for g in m.groups())
    try:
        return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError as e:
        _logger.debug("Invalid UNTIL value %r (%s), treating rule as unbounded", value, e)
        return None


def parse_rule(rule: str | None) -> RecurrenceRule:
    """Parse an RRULE-like string into a RecurrenceRule.

    Never raises: None, empty, and unrecognised input give the neutral rule.
    """
    if not rule:
        return RecurrenceRule.none()

    text = rule.strip()
    if text[:6].upper() == "RRULE:":
        text = text[6:]

    frequency = Frequency.NONE
    interval = 1
    count = None
    until = None
    by_day = None

    for part in text.split(";"):
        key, sep, value = part.partition("=")
        if not sep:
            continue
        key = key.strip().upper()
        value = value.strip()

        if key == "FREQ":
            frequency = _FREQ_VALUES.get(value.upper(), Frequency.NONE)
        elif key == "INTERVAL":
            interval = _parse_positive_int(value) or 1
        elif key == "COUNT":
            count = _parse_positive_int(value)
        elif key == "BYDAY":
            codes = tuple(c.strip().upper() for c in value.split(",") if c.strip())
            by_day = codes or None
        elif key == "UNTIL":
            until = parse_until(value)

    if frequency is Frequency.NONE:
        return RecurrenceRule.none()

    return RecurrenceRule(
        frequency=frequency,
        interval=interval,
        count=count,
        until=until,
        by_day=by_day,
    )
