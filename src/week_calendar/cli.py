"""
Command-line interface for the week calendar.
"""

import json
import logging
import re
from configparser import ConfigParser
from dataclasses import dataclass
from dataclasses import field
from datetime import date
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from week_calendar.db import EventStore
from week_calendar.debug import dump_event
from week_calendar.debug import dump_rule
from week_calendar.debug import preview_occurrences
from week_calendar.google import load_google_events
from week_calendar.models import DEFAULT_CONFIG
from week_calendar.models import DEFAULT_STORE_DB
from week_calendar.models import CalendarViewError
from week_calendar.models import Segment
from week_calendar.models import ViewConfig
from week_calendar.records import load_events
from week_calendar.records import parse_instant
from week_calendar.week import resolve_week
from week_calendar.week import week_days

# ---------------------------------------------------------------------------
# Typer app
# ---------------------------------------------------------------------------

app = typer.Typer(
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Week view of local and Google calendar events, recurring series included.",
)

console = Console()

CONFIG_SECTION = "week-calendar"

_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


# ---------------------------------------------------------------------------
# Global state shared across subcommands
# ---------------------------------------------------------------------------


@dataclass
class _State:
    config_path: Path = field(default_factory=lambda: DEFAULT_CONFIG)
    store_db: Path | None = None


state = _State()


@app.callback()
def _global(
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help=f"Config file path (default: {DEFAULT_CONFIG})"),
    ] = DEFAULT_CONFIG,
    store_db: Annotated[
        Path | None,
        typer.Option("--store", help=f"Event store path (default: {DEFAULT_STORE_DB})"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose debug output"),
    ] = False,
) -> None:
    state.config_path = config
    state.store_db = store_db
    _setup_logging(verbose)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False, console=console)],
    )


def _load_config_file(config_path: Path) -> dict[str, str]:
    if not config_path.exists():
        return {}
    parser = ConfigParser()
    parser.read(config_path)
    if CONFIG_SECTION not in parser:
        return {}
    return dict(parser[CONFIG_SECTION])


def _build_config(week_start: str | None = None) -> ViewConfig:
    config_file = _load_config_file(state.config_path)

    store_path = state.store_db or Path(config_file.get("store_db", DEFAULT_STORE_DB)).expanduser()
    start = (week_start or config_file.get("week_start") or "monday").lower()
    if start not in ("monday", "sunday"):
        raise typer.BadParameter(f"week start must be 'monday' or 'sunday', got {start!r}")
    time_format = config_file.get("time_format", "12h").lower()
    if time_format not in ("12h", "24h"):
        raise typer.BadParameter(f"time_format must be '12h' or '24h', got {time_format!r}")

    return ViewConfig(
        store_db_path=store_path,
        week_start=start,
        time_format=time_format,
    )


def _parse_day(value: str | None) -> date:
    if value is None:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got {value!r}") from None


def _read_json_list(path: Path) -> list[dict]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Error:[/] Cannot read {path}: {e}")
        raise typer.Exit(1) from None
    if isinstance(data, dict):
        # Google's events.list response wraps the events in "items".
        data = data.get("items", [])
    if not isinstance(data, list):
        console.print(f"[bold red]Error:[/] {path} does not contain a list of events")
        raise typer.Exit(1)
    return data


def _format_time(value: datetime, cfg: ViewConfig) -> str:
    if cfg.time_format == "24h":
        return value.strftime("%H:%M")
    return value.strftime("%I:%M %p").lstrip("0").lower()


def _segment_times(seg: Segment, cfg: ViewConfig) -> str:
    # Continuation segments show the day edge rather than the clipped instant.
    day_open, day_close = ("00:00", "23:59") if cfg.time_format == "24h" else ("12:00 am", "11:59 pm")
    start = _format_time(seg.start_time, cfg) if seg.is_start else day_open
    end = _format_time(seg.end_time, cfg) if seg.is_end else day_close
    return f"{start} – {end}"


def _color_style(color: str | None) -> str:
    return color if color and _HEX_COLOR_RE.match(color) else ""


def _render_week(days: list[date], resolved: dict[date, list[Segment]], cfg: ViewConfig) -> None:
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Day", style="bold", width=12)
    table.add_column("Time", width=20)
    table.add_column("Event")
    table.add_column("Source", style="dim")

    today = date.today()
    for day in days:
        label = Text(day.strftime("%a %d %b"), style="bold green" if day == today else "")
        segments = resolved.get(day, [])
        if not segments:
            table.add_row(label, "", Text("—", style="dim"), "")
            continue
        for i, seg in enumerate(segments):
            title = Text(seg.title, style=_color_style(seg.color))
            if seg.is_continuation:
                title.append(" (continues)", style="dim")
            if seg.anchor_id:
                title.append(" ↻", style="cyan")
            table.add_row(
                label if i == 0 else "",
                _segment_times(seg, cfg),
                title,
                seg.source.value,
            )
        table.add_section()

    console.print(table)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

_DAY_ARG = Annotated[
    str | None,
    typer.Argument(help="Any day inside the week to show, YYYY-MM-DD (default: today)"),
]
_WEEK_START = Annotated[
    str | None,
    typer.Option("--week-start", help="First day of the week: monday or sunday"),
]
_EVENTS_FILE = Annotated[
    Path | None,
    typer.Option("--events", "-e", help="Read events from a JSON file instead of the store"),
]
_GOOGLE = Annotated[
    bool,
    typer.Option("--google", "-g", help="Events file holds Google Calendar API items"),
]


@app.command()
def week(
    day: _DAY_ARG = None,
    week_start: _WEEK_START = None,
    events_file: _EVENTS_FILE = None,
    google: _GOOGLE = False,
) -> None:
    """Show every event segment of one week, recurring occurrences expanded."""
    cfg = _build_config(week_start)
    days = week_days(_parse_day(day), cfg.week_start)

    if events_file is not None:
        items = _read_json_list(events_file)
        events, skipped = load_google_events(items) if google else load_events(items)
    else:
        with EventStore(cfg.store_db_path) as store:
            events, skipped = store.all_events()

    events.sort(key=lambda e: e.start_time)
    resolved = resolve_week(events, days)

    console.print(
        Panel(
            Text(f"{days[0]:%d %b %Y} – {days[-1]:%d %b %Y}", justify="center"),
            title="[bold]Week[/bold]",
        )
    )
    _render_week(days, resolved, cfg)
    if skipped:
        console.print(f"[yellow]{skipped} event record(s) skipped (invalid timestamps)[/]")


@app.command("import")
def import_events(
    path: Annotated[Path, typer.Argument(help="JSON file with a list of event records")],
    google: _GOOGLE = False,
    replace: Annotated[
        bool, typer.Option("--replace", help="Remove all stored events before importing")
    ] = False,
) -> None:
    """Import events into the store (upsert by id)."""
    cfg = _build_config()
    items = _read_json_list(path)
    events, skipped = load_google_events(items) if google else load_events(items)

    with EventStore(cfg.store_db_path) as store:
        if replace:
            store.clear_all()
        imported = store.upsert_many(events)
        store.commit()

    results = Table.grid(padding=(0, 2))
    results.add_column(style="bold")
    results.add_column(justify="right")
    results.add_row("Imported", str(imported))
    skipped_val = Text(str(skipped))
    if skipped == 0:
        skipped_val.append(" ✓", style="green")
    else:
        skipped_val.stylize("bold red")
    results.add_row("Skipped", skipped_val)
    console.print(Panel(results, title="[bold]Import[/bold]", expand=False))

    if skipped:
        raise typer.Exit(1)


@app.command("list")
def list_events() -> None:
    """List stored events."""
    cfg = _build_config()
    with EventStore(cfg.store_db_path) as store:
        events, skipped = store.all_events()

    if not events:
        console.print("[yellow]Event store is empty.[/]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Title", style="bold")
    table.add_column("Start")
    table.add_column("Rule")
    table.add_column("Status")
    table.add_column("Source")
    for event in events:
        status_style = "red" if event.is_cancelled else "green"
        table.add_row(
            event.id,
            event.title,
            event.start_time.strftime("%Y-%m-%d %H:%M"),
            event.recurrence_rule or "",
            Text(event.status.value, style=status_style),
            event.source.value,
        )
    console.print(table)
    if skipped:
        console.print(f"[yellow]{skipped} record(s) could not be read[/]")


@app.command()
def show(event_id: Annotated[str, typer.Argument(help="Event id")]) -> None:
    """Show one stored event and, for a series, its next occurrences."""
    cfg = _build_config()
    with EventStore(cfg.store_db_path) as store:
        event = store.get(event_id)
    if event is None:
        console.print(f"[bold red]Error:[/] Event not found: {event_id}")
        raise typer.Exit(1)

    dump_event(event, console)
    if event.recurrence_rule:
        upcoming = preview_occurrences(
            event.start_time,
            event.recurrence_rule,
            event.recurrence_exception_dates,
            after=date.today(),
        )
        console.print("  Next: " + (", ".join(d.isoformat() for d in upcoming) or "none"))


@app.command()
def cancel(
    event_id: Annotated[str, typer.Argument(help="Id of the recurring (anchor) event")],
    occurrence: Annotated[str, typer.Argument(help="Occurrence date or timestamp (ISO 8601)")],
) -> None:
    """Cancel one occurrence of a recurring event."""
    cfg = _build_config()
    try:
        when = date.fromisoformat(occurrence)
    except ValueError:
        try:
            when = parse_instant(occurrence)
        except CalendarViewError as e:
            raise typer.BadParameter(str(e)) from None

    try:
        with EventStore(cfg.store_db_path) as store:
            record = store.add_recurrence_exception(event_id, when)
            store.commit()
    except CalendarViewError as e:
        console.print(f"[bold red]Cancel failed:[/] {e}")
        raise typer.Exit(1) from None

    console.print(f"Cancelled [bold]{record.title}[/] on {record.start_time.date()}")


@app.command()
def delete(
    event_id: Annotated[str, typer.Argument(help="Event id")],
    series: Annotated[
        bool, typer.Option("--series", help="Also delete every cancellation of the series")
    ] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")] = False,
) -> None:
    """Delete an event (or a whole recurring series)."""
    cfg = _build_config()
    if not yes:
        typer.confirm(f"Delete {'series' if series else 'event'} {event_id}?", abort=True)

    with EventStore(cfg.store_db_path) as store:
        removed = store.delete_series(event_id) if series else store.delete(event_id)
        store.commit()

    if removed == 0:
        console.print(f"[yellow]No event with id {event_id}[/]")
        raise typer.Exit(1)
    console.print(f"Deleted {removed} record(s)")


@app.command()
def rule(
    rule_str: Annotated[str, typer.Argument(help="Recurrence rule, e.g. FREQ=WEEKLY;BYDAY=MO,WE")],
    start: Annotated[
        str | None,
        typer.Option("--start", "-s", help="Series start (ISO 8601) for an occurrence preview"),
    ] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Occurrences to preview")] = 10,
) -> None:
    """Parse a recurrence rule and preview its occurrences."""
    dump_rule(rule_str, console)
    if start is None:
        return
    try:
        anchor = parse_instant(start)
    except CalendarViewError as e:
        raise typer.BadParameter(str(e)) from None
    dates = preview_occurrences(anchor, rule_str, limit=limit)
    for d in dates:
        console.print(f"  {d:%a %Y-%m-%d}")
    if not dates:
        console.print("  [yellow]No occurrences[/]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
