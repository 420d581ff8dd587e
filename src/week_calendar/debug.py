"""
Debug/inspect tools for recurrence rules and stored events.

Importable functions:
  dump_rule(rule_str, console) : render a parsed rule in a Rich Panel
  dump_event(event, console)   : render one event in a Rich Panel
  preview_occurrences(...)     : first N occurrence dates of a series
"""

from datetime import date
from datetime import datetime
from datetime import timedelta

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from week_calendar.models import Event
from week_calendar.recurrence import Frequency
from week_calendar.recurrence import occurs_on
from week_calendar.recurrence import parse_rule

# Search horizon for previews: ten years covers any yearly interval in practice.
_PREVIEW_HORIZON_DAYS = 3660


def preview_occurrences(
    anchor_start: datetime,
    rule_str: str | None,
    exception_dates=(),
    limit: int = 10,
    after: date | None = None,
) -> list[date]:
    """Return up to ``limit`` occurrence dates on or after ``after``."""
    rule = parse_rule(rule_str)
    if rule.frequency is Frequency.NONE:
        return []
    day = max(after or anchor_start.date(), anchor_start.date())
    found = []
    for _ in range(_PREVIEW_HORIZON_DAYS):
        if rule.until is not None and day > rule.until.date():
            break
        if occurs_on(anchor_start, rule, exception_dates, day):
            found.append(day)
            if len(found) >= limit:
                break
        day += timedelta(days=1)
    return found


def _row(lines: Text, label: str, value) -> None:
    if value is None:
        return
    lines.append(f"  {label:<14}: ", style="bold cyan")
    lines.append(f"{value}\n")


def dump_rule(rule_str: str | None, console: Console) -> None:
    """Render the parsed form of a rule string."""
    rule = parse_rule(rule_str)
    lines = Text()
    _row(lines, "FREQUENCY", rule.frequency.value)
    _row(lines, "INTERVAL", rule.interval)
    _row(lines, "COUNT", rule.count)
    _row(lines, "UNTIL", rule.until.isoformat() if rule.until else None)
    _row(lines, "BYDAY", ",".join(rule.by_day) if rule.by_day else None)
    if rule.frequency is Frequency.NONE:
        lines.append("  (never occurs)\n", style="yellow")
    console.print(Panel(lines, title=f"[bold]{rule_str or '(empty rule)'}[/bold]", expand=False))


def dump_event(event: Event, console: Console) -> None:
    """Render a single event as a Rich Panel."""
    lines = Text()
    _row(lines, "ID", event.id)
    _row(lines, "START", event.start_time.isoformat())
    _row(lines, "END", event.end_time.isoformat())
    _row(lines, "STATUS", event.status.value)
    _row(lines, "SOURCE", event.source.value)
    _row(lines, "COLOR", event.color)
    _row(lines, "RRULE", event.recurrence_rule)
    _row(lines, "RECURRENCE-ID", event.recurrence_id)
    for ex in event.recurrence_exception_dates:
        _row(lines, "EXDATE", ex.isoformat())
    _row(lines, "DESCRIPTION", event.description)

    console.print(Panel(lines, title=f"[bold]{event.title}[/bold]", expand=False))
