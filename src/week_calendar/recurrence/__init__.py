"""
Recurrence handling: rule parsing, occurrence matching, instance materialization.
"""

from week_calendar.recurrence.instances import instance_id
from week_calendar.recurrence.instances import materialize_instance
from week_calendar.recurrence.matcher import occurs_on
from week_calendar.recurrence.rule import Frequency
from week_calendar.recurrence.rule import RecurrenceRule
from week_calendar.recurrence.rule import parse_rule
from week_calendar.recurrence.rule import weekday_code

__all__ = [
    "Frequency",
    "RecurrenceRule",
    "instance_id",
    "materialize_instance",
    "occurs_on",
    "parse_rule",
    "weekday_code",
]
