"""Tests for the JSONL audit log."""

import json
from pathlib import Path

import pytest

from rsvp_sheets.audit import (
    AuditLog,
    log_append_failed,
    log_appended,
    log_duplicate,
    log_run_failed,
    log_skipped,
)
from rsvp_sheets.models import AuditEvent, RsvpRecord, SkippedMail


def _record() -> RsvpRecord:
    return RsvpRecord(date="9/1/2015 10:5:3", name="Jane", can_attend="Yes")


class TestAuditLog:
    """Test run directories and event persistence."""

    def test_create_run(self, tmp_path: Path):
        """Test a timestamped run directory is created."""
        audit = AuditLog.create_run(tmp_path)
        assert audit.run_dir.parent == tmp_path
        assert audit.run_dir.name.startswith("rsvp-")
        assert audit.run_dir.is_dir()

    def test_from_existing_missing(self, tmp_path: Path):
        """Test loading a missing run fails."""
        with pytest.raises(FileNotFoundError):
            AuditLog.from_existing(tmp_path / "missing")

    def test_read_events_empty(self, tmp_path: Path):
        """Test a fresh log has no events."""
        assert AuditLog(tmp_path / "run").read_events() == []

    def test_log_appends_jsonl(self, tmp_path: Path):
        """Test each event is one JSON line."""
        audit = AuditLog(tmp_path / "run")
        audit.log(AuditEvent.create("run_started", metadata={"label": "Wedding RSVPs"}))
        log_appended(audit, "m1", _record())

        lines = audit.events_file.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0])["metadata"] == {"label": "Wedding RSVPs"}
        assert json.loads(lines[1])["record"]["name"] == "Jane"

    def test_optional_fields_omitted(self, tmp_path: Path):
        """Test None fields are left out of the JSON."""
        audit = AuditLog(tmp_path / "run")
        audit.log(AuditEvent.create("run_completed"))

        event = audit.read_events()[0]
        assert set(event) == {"event_id", "timestamp", "stage"}

    def test_run_summary(self, tmp_path: Path):
        """Test counts by stage and errors."""
        audit = AuditLog(tmp_path / "run")
        log_appended(audit, "m1", _record())
        log_appended(audit, "m2", _record())
        log_duplicate(audit, "m3", _record())
        log_append_failed(audit, "m4", _record(), "quota exceeded")
        log_run_failed(audit, "header unavailable", spreadsheet_id="abc")

        summary = audit.get_run_summary()

        assert summary["total_events"] == 5
        assert summary["by_stage"] == {
            "appended": 2,
            "duplicate": 1,
            "append_failed": 1,
            "run_failed": 1,
        }
        assert summary["errors"] == 2

    def test_log_skipped(self, tmp_path: Path):
        """Test unreadable mail is logged with its thread and error."""
        audit = AuditLog(tmp_path / "run")
        log_skipped(audit, SkippedMail(thread_id="t1", message_id="m1", error="Missing payload"))
        log_skipped(audit, SkippedMail(thread_id="t2", error="HttpError 404"))

        first, second = audit.read_events()
        assert first["stage"] == "skipped"
        assert first["message_id"] == "m1"
        assert first["metadata"] == {"thread_id": "t1"}
        assert "message_id" not in second
        assert audit.get_run_summary()["errors"] == 2

    def test_unicode_preserved(self, tmp_path: Path):
        """Test non-ASCII names are written as-is."""
        audit = AuditLog(tmp_path / "run")
        log_appended(audit, "m1", RsvpRecord(name="Zoë & José"))

        assert "Zoë & José" in audit.events_file.read_text(encoding="utf-8")
        assert audit.read_events()[0]["record"]["name"] == "Zoë & José"


class TestAuditEvent:
    """Test event construction."""

    def test_create_generates_id_and_timestamp(self):
        first = AuditEvent.create("appended", message_id="m1")
        second = AuditEvent.create("appended", message_id="m1")
        assert first.event_id != second.event_id
        assert first.timestamp.tzinfo is not None

    def test_run_failed_metadata(self):
        event = AuditEvent.create("run_failed", error="boom", metadata={"spreadsheet_id": "abc"})
        d = event.to_jsonl_dict()
        assert d["error"] == "boom"
        assert d["metadata"] == {"spreadsheet_id": "abc"}
        assert "message_id" not in d
