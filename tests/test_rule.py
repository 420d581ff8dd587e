"""
Unit tests for recurrence rule parsing.
"""

from datetime import date
from datetime import datetime
from datetime import timezone

from week_calendar.recurrence.rule import Frequency
from week_calendar.recurrence.rule import RecurrenceRule
from week_calendar.recurrence.rule import parse_rule
from week_calendar.recurrence.rule import parse_until
from week_calendar.recurrence.rule import weekday_code


class TestNeutralRule:
    def test_none_gives_neutral_rule(self):
        assert parse_rule(None) == RecurrenceRule(Frequency.NONE, 1, None, None, None)

    def test_empty_string_gives_neutral_rule(self):
        assert parse_rule("") == RecurrenceRule.none()

    def test_garbage_gives_neutral_rule(self):
        assert parse_rule("not a rule at all") == RecurrenceRule.none()

    def test_unsupported_frequency_gives_neutral_rule(self):
        """HOURLY and finer are not supported and never occur."""
        rule = parse_rule("FREQ=HOURLY;INTERVAL=2")
        assert rule.frequency is Frequency.NONE
        assert rule.interval == 1

    def test_missing_freq_gives_neutral_rule(self):
        assert parse_rule("INTERVAL=2;BYDAY=MO") == RecurrenceRule.none()


class TestFrequencyAndInterval:
    def test_each_frequency(self):
        assert parse_rule("FREQ=DAILY").frequency is Frequency.DAILY
        assert parse_rule("FREQ=WEEKLY").frequency is Frequency.WEEKLY
        assert parse_rule("FREQ=MONTHLY").frequency is Frequency.MONTHLY
        assert parse_rule("FREQ=YEARLY").frequency is Frequency.YEARLY

    def test_rrule_prefix_is_accepted(self):
        rule = parse_rule("RRULE:FREQ=WEEKLY;INTERVAL=2")
        assert rule.frequency is Frequency.WEEKLY
        assert rule.interval == 2

    def test_interval_defaults_to_one(self):
        assert parse_rule("FREQ=DAILY").interval == 1

    def test_unparseable_interval_defaults_to_one(self):
        assert parse_rule("FREQ=DAILY;INTERVAL=abc").interval == 1

    def test_zero_interval_defaults_to_one(self):
        assert parse_rule("FREQ=DAILY;INTERVAL=0").interval == 1

    def test_count_is_parsed(self):
        assert parse_rule("FREQ=DAILY;COUNT=5").count == 5
        assert parse_rule("FREQ=DAILY;COUNT=x").count is None

    def test_unknown_keys_are_ignored(self):
        rule = parse_rule("FREQ=WEEKLY;WKST=SU;BYSETPOS=1;INTERVAL=3")
        assert rule.frequency is Frequency.WEEKLY
        assert rule.interval == 3

    def test_tokens_without_equals_are_ignored(self):
        assert parse_rule("FREQ=DAILY;;junk;INTERVAL=2").interval == 2


class TestByDay:
    def test_order_and_qualifiers_preserved(self):
        rule = parse_rule("FREQ=MONTHLY;BYDAY=2TU,MO,-1FR")
        assert rule.by_day == ("2TU", "MO", "-1FR")

    def test_by_day_entries_split_ordinals(self):
        rule = parse_rule("FREQ=MONTHLY;BYDAY=2TU,MO,-1FR")
        assert rule.by_day_entries() == [(2, "TU"), (None, "MO"), (-1, "FR")]

    def test_malformed_entries_dropped_from_entries(self):
        rule = parse_rule("FREQ=MONTHLY;BYDAY=XX,1MO")
        assert rule.by_day == ("XX", "1MO")
        assert rule.by_day_entries() == [(1, "MO")]

    def test_empty_byday_is_none(self):
        assert parse_rule("FREQ=WEEKLY;BYDAY=").by_day is None


class TestUntil:
    def test_date_only_until(self):
        rule = parse_rule("FREQ=DAILY;UNTIL=20240131")
        assert rule.until == datetime(2024, 1, 31, tzinfo=timezone.utc)

    def test_datetime_until(self):
        rule = parse_rule("FREQ=DAILY;UNTIL=20240630T235959Z")
        assert rule.until == datetime(2024, 6, 30, 23, 59, 59, tzinfo=timezone.utc)

    def test_malformed_until_leaves_rule_unbounded(self):
        """A corrupt UNTIL must not reject the rule."""
        rule = parse_rule("FREQ=WEEKLY;UNTIL=2024-13-45")
        assert rule.frequency is Frequency.WEEKLY
        assert rule.until is None

    def test_impossible_calendar_date(self):
        assert parse_until("20240230") is None


def test_weekday_code():
    assert weekday_code(date(2024, 1, 1)) == "MO"
    assert weekday_code(date(2024, 1, 7)) == "SU"
