"""RSVP sync pipeline: labeled Gmail threads → parsed records → sheet rows.

Pipeline flow:

    find_label ──► get_threads (30 at a time) ──► get_messages
                                                    │
                                  filter_messages (cutoff)
                                                    │
    open_by_id ──► get_first_sheet ──► read_header_row   (once per run)
                                                    │
               per message: build_record ──► validate_record
                                         ──► record_exists ──► append_row

Nothing is retried. A label that cannot be listed, or a store that cannot
be opened or read, aborts the run before any record is handled. A thread
or message that cannot be read, or a record that fails, only skips itself.
"""

from dataclasses import dataclass, field
from typing import Callable, Literal

from googleapiclient.errors import HttpError
from jsonschema import ValidationError

from rsvp_sheets.audit import (
    AuditLog,
    log_append_failed,
    log_appended,
    log_duplicate,
    log_run_failed,
    log_skipped,
)
from rsvp_sheets.config import Settings
from rsvp_sheets.dedupe import LOOKUP_COLUMN, find_column, record_exists
from rsvp_sheets.filters import filter_messages
from rsvp_sheets.models import AuditEvent, RsvpRecord, SkippedMail
from rsvp_sheets.parser import build_record
from rsvp_sheets.sheets.client import SheetsError
from rsvp_sheets.validator import validate_record


THREAD_BATCH_SIZE = 30

# Position of the name in RsvpRecord.to_row()
NAME_INDEX = RsvpRecord.FIELDS.index(LOOKUP_COLUMN)


@dataclass
class RecordOutcome:
    """What happened to one message's record."""
    status: Literal["appended", "duplicate", "failed"]
    message_id: str
    record: RsvpRecord
    error: str | None = None


@dataclass
class SyncResult:
    """Summary of one sync run."""
    outcomes: list[RecordOutcome] = field(default_factory=list)
    threads_seen: int = 0
    messages_seen: int = 0
    messages_filtered: int = 0
    skipped: list[SkippedMail] = field(default_factory=list)
    aborted: bool = False
    abort_reason: str | None = None

    @property
    def appended(self) -> list[RecordOutcome]:
        return [o for o in self.outcomes if o.status == "appended"]

    @property
    def duplicates(self) -> list[RecordOutcome]:
        return [o for o in self.outcomes if o.status == "duplicate"]

    @property
    def failed(self) -> list[RecordOutcome]:
        return [o for o in self.outcomes if o.status == "failed"]


class RsvpSession:
    """Sheet handle and cached header for the duration of one run."""

    def __init__(self, sheet, header: list[str]):
        self.sheet = sheet
        self.header = header
        self.name_column = find_column(header, LOOKUP_COLUMN)

    @classmethod
    def open(cls, store, spreadsheet_id: str) -> "RsvpSession":
        """Open the spreadsheet's first sheet and read its header once.

        Raises:
            LookupError: If the spreadsheet or its first sheet is missing
            SheetsError: If the header cannot be read
        """
        spreadsheet = store.open_by_id(spreadsheet_id)
        if spreadsheet is None:
            raise LookupError(f"Spreadsheet not found: {spreadsheet_id}")

        sheet = spreadsheet.get_first_sheet()
        if sheet is None:
            raise LookupError(f"Spreadsheet {spreadsheet_id} has no sheets")

        return cls(sheet, sheet.read_header_row())

    def lookup_names(self) -> list[str]:
        """Current contents of the name column, header excluded."""
        if self.name_column is None:
            return []
        return self.sheet.read_column(self.name_column, 2)

    def exists(self, record: RsvpRecord) -> bool:
        return record_exists(record, self.header, self.lookup_names())

    def append(self, record: RsvpRecord) -> None:
        # Names are matched as exact text on later runs
        self.sheet.append_row(record.to_row(), literal_columns=(NAME_INDEX,))


def discover_threads(label, batch_size: int = THREAD_BATCH_SIZE) -> list:
    """Return every thread under a label.

    Threads are fetched `batch_size` at a time until an empty batch comes
    back. A missing label (None) yields an empty list.
    """
    if label is None:
        return []

    threads = []
    start = 0
    while True:
        batch = label.get_threads(start, batch_size)
        if not batch:
            break
        threads.extend(batch)
        start += batch_size

    return threads


@dataclass
class CollectedMessages:
    """Messages read from a label's threads, plus what could not be read."""
    messages: list = field(default_factory=list)
    threads_read: int = 0
    # First-message subject of each thread that could be fetched
    subjects: list[str] = field(default_factory=list)
    skipped: list[SkippedMail] = field(default_factory=list)


def collect_messages(threads: list, max_threads: int = 0) -> CollectedMessages:
    """Flatten threads into their messages, in order.

    A thread that cannot be fetched, or a message that cannot be parsed,
    is recorded in `skipped` and the rest are still collected.

    Args:
        threads: Threads exposing get_messages(), get_first_message_subject()
            and `skipped`
        max_threads: Stop after this many threads (0 = no cap)
    """
    collected = CollectedMessages()
    for thread in threads:
        if max_threads > 0 and collected.threads_read >= max_threads:
            break
        collected.threads_read += 1

        try:
            messages = thread.get_messages()
        except HttpError as e:
            collected.skipped.append(SkippedMail(thread_id=thread.thread_id, error=str(e)))
            continue

        collected.messages.extend(messages)
        collected.subjects.append(thread.get_first_message_subject())
        collected.skipped.extend(thread.skipped)
    return collected


def _audit(audit: AuditLog | None, stage: str, **kwargs) -> None:
    if audit is not None:
        audit.log(AuditEvent.create(stage, **kwargs))


def process_rsvps(
    mailbox,
    store,
    settings: Settings,
    audit: AuditLog | None = None,
    on_outcome: Callable[[RecordOutcome], None] | None = None,
) -> SyncResult:
    """Run one sync: read labeled RSVP emails and append new ones to the sheet.

    Args:
        mailbox: Mail source exposing find_label() (e.g. GmailClient)
        store: Tabular store exposing open_by_id() (e.g. SheetsClient)
        settings: Label, spreadsheet id, cutoff and thread cap
        audit: Run log to write events to (None = no audit log)
        on_outcome: Called once per record after it is handled

    Returns:
        SyncResult with one outcome per message newer than the cutoff
    """
    result = SyncResult()
    _audit(audit, "run_started", metadata={
        "label": settings.label,
        "spreadsheet_id": settings.spreadsheet_id,
        "cutoff": settings.cutoff.isoformat(),
        "max_threads": settings.max_threads,
    })

    try:
        label = mailbox.find_label(settings.label)
        if label is None:
            _audit(audit, "label_missing", metadata={"label": settings.label})
            return result
        threads = discover_threads(label)
    except HttpError as e:
        result.aborted = True
        result.abort_reason = f"Could not list threads for {settings.label}: {e}"
        if audit is not None:
            log_run_failed(audit, result.abort_reason, label=settings.label)
        return result

    collected = collect_messages(threads, settings.max_threads)
    messages = collected.messages
    result.threads_seen = collected.threads_read
    result.messages_seen = len(messages)
    result.skipped = collected.skipped
    _audit(audit, "discovered", metadata={
        "threads": result.threads_seen,
        "messages": result.messages_seen,
        "subjects": collected.subjects,
    })
    if audit is not None:
        for skipped in collected.skipped:
            log_skipped(audit, skipped)

    messages = filter_messages(messages, settings.cutoff)
    result.messages_filtered = result.messages_seen - len(messages)
    _audit(audit, "filtered", metadata={
        "dropped": result.messages_filtered,
        "remaining": len(messages),
    })

    try:
        session = RsvpSession.open(store, settings.spreadsheet_id)
    except (LookupError, SheetsError) as e:
        result.aborted = True
        result.abort_reason = str(e)
        if audit is not None:
            log_run_failed(audit, str(e), spreadsheet_id=settings.spreadsheet_id)
        return result

    for message in messages:
        outcome = _process_message(session, message)
        result.outcomes.append(outcome)

        if audit is not None:
            if outcome.status == "appended":
                log_appended(audit, outcome.message_id, outcome.record)
            elif outcome.status == "duplicate":
                log_duplicate(audit, outcome.message_id, outcome.record)
            else:
                log_append_failed(audit, outcome.message_id, outcome.record, outcome.error or "")

        if on_outcome is not None:
            on_outcome(outcome)

    _audit(audit, "run_completed", metadata={
        "appended": len(result.appended),
        "duplicates": len(result.duplicates),
        "failed": len(result.failed),
    })
    return result


def _process_message(session: RsvpSession, message) -> RecordOutcome:
    """Build, check and append the record for a single message."""
    message_id = getattr(message, "message_id", "")
    record = build_record(message.get_body(), message.get_timestamp())

    try:
        validate_record(record.to_dict())
    except ValidationError as e:
        return RecordOutcome("failed", message_id, record, f"Invalid record: {e.message}")

    try:
        if session.exists(record):
            return RecordOutcome("duplicate", message_id, record)
        session.append(record)
    except SheetsError as e:
        return RecordOutcome("failed", message_id, record, str(e))

    return RecordOutcome("appended", message_id, record)
