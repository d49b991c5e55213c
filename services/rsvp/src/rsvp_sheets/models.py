"""Data shapes shared by the rsvp-sheets pipeline.

- MailMessage: What ingestion produces (from Gmail API)
- SkippedMail: A thread or message ingestion could not read
- RsvpRecord: What the body parser produces and the sheet receives
- AuditEvent: What gets logged to JSONL

Row order in the sheet follows RsvpRecord.FIELDS.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal
import uuid


# =============================================================================
# MailMessage: What ingestion produces
# =============================================================================

@dataclass
class MailMessage:
    """A single message pulled from a labeled Gmail thread.

    Read-only from the pipeline's point of view: only the body and the
    timestamp feed into an RSVP record.
    """
    message_id: str
    thread_id: str
    body: str
    timestamp: datetime
    subject: str | None = None

    def get_body(self) -> str:
        """Return the message body text."""
        return self.body

    def get_timestamp(self) -> datetime:
        """Return when the message was received."""
        return self.timestamp


@dataclass
class SkippedMail:
    """A thread or message that was left out of the run.

    message_id is None when the whole thread could not be fetched.
    """
    thread_id: str
    error: str
    message_id: str | None = None


# =============================================================================
# RsvpRecord: What the parser produces
# =============================================================================

@dataclass
class RsvpRecord:
    """Fixed-schema RSVP entry.

    Every field is a string and may be empty. Keys parsed from the body that
    are not part of the schema land in `extra` and are never written to the
    sheet.
    """
    date: str = ""
    name: str = ""
    email: str = ""
    number_of_guests: str = ""
    events: str = ""
    can_attend: str = ""

    # Overflow for body keys outside the schema (not serialized)
    extra: dict[str, str] = field(default_factory=dict)

    FIELDS = ("date", "name", "email", "number_of_guests", "events", "can_attend")

    def set_field(self, key: str, value: str) -> None:
        """Assign a schema field by key, or keep the pair in `extra`."""
        if key in self.FIELDS:
            setattr(self, key, value)
        else:
            self.extra[key] = value

    def to_row(self) -> list[str]:
        """Serialize to a sheet row in fixed column order."""
        return [getattr(self, name) for name in self.FIELDS]

    def to_dict(self) -> dict[str, str]:
        """Schema fields as a mapping (for logging and validation)."""
        return {name: getattr(self, name) for name in self.FIELDS}


# =============================================================================
# AuditEvent: What gets logged to JSONL
# =============================================================================

AuditStage = Literal[
    "run_started",     # Settings resolved, run begins
    "label_missing",   # Gmail label not found
    "discovered",      # Threads/messages collected from the label
    "skipped",         # Thread or message could not be read from Gmail
    "filtered",        # Messages at or before the cutoff dropped
    "appended",        # Record written to the sheet
    "duplicate",       # Record skipped, name already present
    "append_failed",   # Record skipped, validation or API error
    "run_failed",      # Label listing failed or store could not be opened
    "run_completed",   # All messages handled
]


@dataclass
class AuditEvent:
    """Immutable event for the JSONL run log.

    Logged to ~/.rsvp-sheets/runs/rsvp-YYYY-MM-DD-HHMMSS/events.jsonl
    """
    event_id: str  # UUID
    timestamp: datetime
    stage: AuditStage
    message_id: str | None = None

    # Stage-specific data
    record: dict[str, str] | None = None
    error: str | None = None

    # Extra metadata (counts, label name, spreadsheet id)
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        stage: str,
        message_id: str | None = None,
        **kwargs
    ) -> "AuditEvent":
        """Factory method to create audit event with auto-generated ID and timestamp."""
        return cls(
            event_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            stage=stage,
            message_id=message_id,
            **kwargs
        )

    def to_jsonl_dict(self) -> dict:
        """Convert to dict for JSONL serialization."""
        d = {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "stage": self.stage,
        }
        # Only include non-None optional fields
        if self.message_id:
            d["message_id"] = self.message_id
        if self.record is not None:
            d["record"] = self.record
        if self.error:
            d["error"] = self.error
        if self.metadata:
            d["metadata"] = self.metadata
        return d
