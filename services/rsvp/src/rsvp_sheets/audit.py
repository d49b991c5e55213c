"""Audit logging for RSVP sync runs.

Append-only JSONL event log, one directory per run.

Storage: ~/.rsvp-sheets/runs/rsvp-{timestamp}/events.jsonl
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rsvp_sheets.models import AuditEvent, RsvpRecord, SkippedMail


DEFAULT_RUNS_DIR = Path.home() / ".rsvp-sheets" / "runs"


class AuditLog:
    """Append-only JSONL audit log for a single sync run.

    Usage:
        audit = AuditLog.create_run()
        audit.log(AuditEvent.create("run_started", metadata={"label": "Wedding RSVPs"}))
        log_appended(audit, message_id="abc123", record=record)
    """

    def __init__(self, run_dir: Path):
        """Initialize audit log for a specific run directory.

        Args:
            run_dir: Directory for this run (created if doesn't exist)
        """
        self.run_dir = run_dir
        self.events_file = run_dir / "events.jsonl"
        self._ensure_dir()

    def _ensure_dir(self) -> None:
        """Create run directory if it doesn't exist."""
        self.run_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def create_run(cls, base_dir: Path | None = None) -> "AuditLog":
        """Create a new audit log for a sync run.

        Args:
            base_dir: Base directory for runs (default: ~/.rsvp-sheets/runs/)

        Returns:
            AuditLog instance for the new run
        """
        if base_dir is None:
            base_dir = DEFAULT_RUNS_DIR

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d-%H%M%S")
        run_dir = base_dir / f"rsvp-{timestamp}"

        return cls(run_dir)

    @classmethod
    def from_existing(cls, run_dir: Path) -> "AuditLog":
        """Load an existing audit log.

        Raises:
            FileNotFoundError: If run_dir doesn't exist
        """
        if not run_dir.exists():
            raise FileNotFoundError(f"Run directory not found: {run_dir}")
        return cls(run_dir)

    def log(self, event: "AuditEvent") -> None:
        """Append an event to the audit log."""
        line = json.dumps(event.to_jsonl_dict(), ensure_ascii=False)
        with open(self.events_file, "a", encoding="utf-8") as f:
            f.write(line + "\n")

    def read_events(self) -> list[dict]:
        """Read all events from the audit log.

        Returns:
            List of event dicts (most recent last)
        """
        if not self.events_file.exists():
            return []

        events = []
        with open(self.events_file, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    events.append(json.loads(line))
        return events

    def get_run_summary(self) -> dict:
        """Get summary statistics for this run.

        Returns:
            Dict with counts by stage and number of errors
        """
        events = self.read_events()

        summary = {
            "run_dir": str(self.run_dir),
            "total_events": len(events),
            "by_stage": {},
            "errors": 0,
        }

        for event in events:
            stage = event.get("stage", "unknown")
            summary["by_stage"][stage] = summary["by_stage"].get(stage, 0) + 1

            if event.get("error"):
                summary["errors"] += 1

        return summary


# Convenience functions for common logging patterns

def log_appended(audit: AuditLog, message_id: str, record: "RsvpRecord") -> None:
    """Log that a record was written to the sheet."""
    from rsvp_sheets.models import AuditEvent
    audit.log(AuditEvent.create("appended", message_id=message_id, record=record.to_dict()))


def log_duplicate(audit: AuditLog, message_id: str, record: "RsvpRecord") -> None:
    """Log that a record was skipped because its name is already present."""
    from rsvp_sheets.models import AuditEvent
    audit.log(AuditEvent.create("duplicate", message_id=message_id, record=record.to_dict()))


def log_append_failed(
    audit: AuditLog,
    message_id: str,
    record: "RsvpRecord",
    error: str,
) -> None:
    """Log that a record could not be written."""
    from rsvp_sheets.models import AuditEvent
    audit.log(AuditEvent.create(
        "append_failed",
        message_id=message_id,
        record=record.to_dict(),
        error=error,
    ))


def log_run_failed(audit: AuditLog, error: str, **metadata) -> None:
    """Log a failure that aborts the whole run."""
    from rsvp_sheets.models import AuditEvent
    audit.log(AuditEvent.create("run_failed", error=error, metadata=metadata))


def log_skipped(audit: AuditLog, skipped: "SkippedMail") -> None:
    """Log a thread or message that could not be read from Gmail."""
    from rsvp_sheets.models import AuditEvent
    audit.log(AuditEvent.create(
        "skipped",
        message_id=skipped.message_id,
        error=skipped.error,
        metadata={"thread_id": skipped.thread_id},
    ))
