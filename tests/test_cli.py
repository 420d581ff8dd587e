"""
CLI smoke tests using typer's CliRunner against a temporary event store.
"""

import json

from typer.testing import CliRunner

from tests.conftest import make_record
from week_calendar.cli import app
from week_calendar.db import EventStore
from week_calendar.records import event_from_record

runner = CliRunner()


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _invoke(db_path, tmp_path, *args):
    config = tmp_path / "missing.conf"
    return runner.invoke(app, ["--config", str(config), "--store", str(db_path), *args])


class TestImportAndWeek:
    def test_import_then_week(self, db_path, tmp_path):
        events_file = _write(
            tmp_path / "events.json",
            [
                make_record(
                    "E1",
                    title="Weekly sync",
                    is_recurring=True,
                    recurrence_rule="FREQ=WEEKLY;INTERVAL=1",
                )
            ],
        )
        result = _invoke(db_path, tmp_path, "import", str(events_file))
        assert result.exit_code == 0, result.output

        result = _invoke(db_path, tmp_path, "week", "2024-01-10")
        assert result.exit_code == 0, result.output
        assert "Weekly sync" in result.output

    def test_import_with_invalid_record_fails(self, db_path, tmp_path):
        events_file = _write(tmp_path / "events.json", [make_record("bad", start_time="nope")])
        result = _invoke(db_path, tmp_path, "import", str(events_file))
        assert result.exit_code == 1

    def test_week_from_google_file(self, db_path, tmp_path):
        items = {
            "items": [
                {
                    "id": "g1",
                    "summary": "Google standup",
                    "start": {"dateTime": "2024-01-01T09:00:00Z"},
                    "end": {"dateTime": "2024-01-01T09:15:00Z"},
                    "recurrence": ["RRULE:FREQ=DAILY"],
                }
            ]
        }
        events_file = _write(tmp_path / "google.json", items)
        result = _invoke(db_path, tmp_path, "week", "2024-01-10", "--events", str(events_file), "--google")
        assert result.exit_code == 0, result.output
        assert "Google standup" in result.output

    def test_bad_day_argument(self, db_path, tmp_path):
        result = _invoke(db_path, tmp_path, "week", "10/01/2024")
        assert result.exit_code != 0


class TestCancelAndDelete:
    def test_cancel_writes_cancellation(self, db_path, tmp_path):
        with EventStore(db_path) as store:
            store.upsert(
                event_from_record(
                    make_record("E1", is_recurring=True, recurrence_rule="FREQ=WEEKLY")
                )
            )
            store.commit()

        result = _invoke(db_path, tmp_path, "cancel", "E1", "2024-01-15")
        assert result.exit_code == 0, result.output

        with EventStore(db_path) as store:
            assert store.get("E1-2024-01-15").is_cancelled

    def test_cancel_unknown_event(self, db_path, tmp_path):
        result = _invoke(db_path, tmp_path, "cancel", "nope", "2024-01-15")
        assert result.exit_code == 1

    def test_delete_missing(self, db_path, tmp_path):
        result = _invoke(db_path, tmp_path, "delete", "nope", "--yes")
        assert result.exit_code == 1


def test_rule_preview(db_path, tmp_path):
    result = _invoke(
        db_path, tmp_path, "rule", "FREQ=MONTHLY;BYDAY=2TU", "--start", "2024-01-01T09:00:00Z", "-n", "2"
    )
    assert result.exit_code == 0, result.output
    assert "2024-01-09" in result.output
    assert "2024-02-13" in result.output
