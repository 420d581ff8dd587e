"""
Occurrence predicate: does a recurrence rule produce an occurrence on a date?

Interval gating is always a modulo on the calendar-unit distance from the
anchor's own calendar day, so any date can be tested without unrolling the
series from its start.
"""

import calendar
import math
from collections.abc import Callable
from collections.abc import Iterable
from datetime import date
from datetime import datetime

from week_calendar.recurrence.rule import Frequency
from week_calendar.recurrence.rule import RecurrenceRule
from week_calendar.recurrence.rule import weekday_code


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date, end: date) -> int:
    return (end - start).days


def weeks_between(start: date, end: date) -> int:
    """Whole 7-day blocks from ``start`` to ``end``."""
    return days_between(start, end) // 7


def months_between(start: date, end: date) -> int:
    return (end.year * 12 + end.month) - (start.year * 12 + start.month)


def years_between(start: date, end: date) -> int:
    return end.year - start.year


def _nth_weekday_of_month(d: date) -> int:
    """1 for the first such weekday in the month, 2 for the second, ..."""
    return math.ceil(d.day / 7)


def _nth_weekday_from_end(d: date) -> int:
    """-1 for the last such weekday in the month, -2 for the one before, ..."""
    days_in_month = calendar.monthrange(d.year, d.month)[1]
    return -math.ceil((days_in_month - d.day + 1) / 7)


def _daily(anchor: date, rule: RecurrenceRule, target: date) -> bool:
    return days_between(anchor, target) % rule.interval == 0


def _weekly(anchor: date, rule: RecurrenceRule, target: date) -> bool:
    if rule.by_day:
        if weekday_code(target) not in rule.by_day:
            return False
    elif target.weekday() != anchor.weekday():
        return False
    return weeks_between(anchor, target) % rule.interval == 0


def _monthly_by_day_matches(rule: RecurrenceRule, target: date) -> bool:
    code = weekday_code(target)
    for ordinal, day_code in rule.by_day_entries():
        if day_code != code:
            continue
        if ordinal is None:
            return True
        if ordinal > 0 and ordinal == _nth_weekday_of_month(target):
            return True
        if ordinal < 0 and ordinal == _nth_weekday_from_end(target):
            return True
    return False


def _monthly(anchor: date, rule: RecurrenceRule, target: date) -> bool:
    if rule.by_day:
        if not _monthly_by_day_matches(rule, target):
            return False
    elif target.day != anchor.day:
        return False
    return months_between(anchor, target) % rule.interval == 0


def _yearly(anchor: date, rule: RecurrenceRule, target: date) -> bool:
    if (target.month, target.day) != (anchor.month, anchor.day):
        return False
    return years_between(anchor, target) % rule.interval == 0


def _never(anchor: date, rule: RecurrenceRule, target: date) -> bool:
    return False


_MATCHERS: dict[Frequency, Callable[[date, RecurrenceRule, date], bool]] = {
    Frequency.DAILY: _daily,
    Frequency.WEEKLY: _weekly,
    Frequency.MONTHLY: _monthly,
    Frequency.YEARLY: _yearly,
    Frequency.NONE: _never,
}

def occurs_on(
    anchor_start: datetime,
    rule: RecurrenceRule,
    exception_dates: Iterable[date | datetime] | None,
    target: date,
) -> bool:
    """Return True if the series anchored at ``anchor_start`` occurs on ``target``.

    Dates are compared as calendar days; the time of day of the anchor and of
    any exception date is ignored.
    """
    if rule.frequency is Frequency.NONE:
        return False

    target = _as_date(target)
    anchor = _as_date(anchor_start)

    if target < anchor:
        return False
    if rule.until is not None and rule.until.date() < target:
        return False
    if any(_as_date(d) == target for d in exception_dates or ()):
        return False

    return _MATCHERS[rule.frequency](anchor, rule, target)
