"""CLI entry point for rsvp-sheets.

Main commands:
- sync: Read labeled RSVP emails from Gmail and append new ones to the sheet
- parse: Parse a saved email body or Gmail JSON fixture (no network)
- report: Summarize the audit log of a past sync run
- version: Show version information
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from rsvp_sheets.audit import AuditLog
from rsvp_sheets.config import Settings, parse_cutoff, runs_dir_from_env
from rsvp_sheets.ingestion.gmail import parse_gmail_message
from rsvp_sheets.ingestion.gmail_client import GmailClient
from rsvp_sheets.models import RsvpRecord, SkippedMail
from rsvp_sheets.parser import build_record
from rsvp_sheets.sheets.client import SheetsClient, SheetsError
from rsvp_sheets.sync import RecordOutcome, SyncResult, process_rsvps

app = typer.Typer(
    name="rsvp-sheets",
    help="Copy wedding RSVP emails from Gmail into a Google Sheet",
    no_args_is_help=True,
)
console = Console()


def _status_color(status: str) -> str:
    """Return Rich color for a record outcome."""
    colors = {
        "appended": "green",
        "duplicate": "yellow",
        "failed": "red",
    }
    return colors.get(status, "white")


def _print_outcome(outcome: RecordOutcome) -> None:
    """One line per record, as it is handled."""
    color = _status_color(outcome.status)
    name = escape(outcome.record.name) or "(no name)"
    line = f"[{color}]{outcome.status.upper():<9}[/{color}] {name} [dim]{outcome.record.date}[/dim]"
    if outcome.error:
        line += f" [red]{escape(outcome.error)}[/red]"
    console.print(line)


def _print_skipped(skipped: SkippedMail) -> None:
    """One line per thread or message that could not be read."""
    what = f"message {skipped.message_id}" if skipped.message_id else f"thread {skipped.thread_id}"
    console.print(f"[magenta]{'SKIPPED':<9}[/magenta] {escape(what)} [red]{escape(skipped.error)}[/red]")


def _record_table(record: RsvpRecord) -> Table:
    """Format a record as a two-column Rich table."""
    table = Table(show_header=False, box=None)
    table.add_column("field", style="bold")
    table.add_column("value")
    for name, value in record.to_dict().items():
        table.add_row(name, escape(value))
    for name, value in record.extra.items():
        table.add_row(f"[dim]{escape(name) or '(empty key)'}[/dim]", f"[dim]{escape(value)}[/dim]")
    return table


def _print_summary(result: SyncResult, settings: Settings) -> None:
    lines = [
        f"Label: {escape(settings.label)}",
        f"Threads: {result.threads_seen}  Messages: {result.messages_seen}  "
        f"Older than cutoff: {result.messages_filtered}",
        f"[green]Appended: {len(result.appended)}[/green]  "
        f"[yellow]Duplicates: {len(result.duplicates)}[/yellow]  "
        f"[red]Failed: {len(result.failed)}[/red]  "
        f"[magenta]Unreadable: {len(result.skipped)}[/magenta]",
    ]
    if result.aborted:
        lines.append(f"[red]Aborted: {escape(result.abort_reason or '')}[/red]")

    console.print(Panel(
        "\n".join(lines),
        title="[bold]RSVP Sync Summary[/bold]",
        border_style="red" if result.aborted else "green",
    ))


@app.command()
def sync(
    label: Optional[str] = typer.Option(
        None,
        "--label",
        "-l",
        help="Gmail label holding RSVP emails (default: RSVP_LABEL)",
    ),
    spreadsheet_id: Optional[str] = typer.Option(
        None,
        "--spreadsheet-id",
        "-s",
        help="Target spreadsheet id (default: RSVP_SPREADSHEET_ID)",
    ),
    cutoff: Optional[str] = typer.Option(
        None,
        "--cutoff",
        "-c",
        help="Skip messages at or before this ISO-8601 time (default: RSVP_CUTOFF)",
    ),
    max_threads: Optional[int] = typer.Option(
        None,
        "--max-threads",
        "-n",
        min=0,
        help="Process at most this many threads, 0 for all (default: RSVP_MAX_THREADS)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="No audit log or per-record output",
    ),
) -> None:
    """Append new RSVP emails to the spreadsheet.

    Reads every thread under the label, skips messages at or before the
    cutoff, and appends one row per RSVP whose name is not already in the
    sheet.

    Examples:
        rsvp-sheets sync
        rsvp-sheets sync -l "Wedding RSVPs" -c 2015-08-22T00:00:00 -n 2
    """
    env = {}
    if spreadsheet_id:
        env["RSVP_SPREADSHEET_ID"] = spreadsheet_id

    try:
        settings = Settings.from_env({**os.environ, **env})
        if label:
            settings.label = label
        if cutoff:
            settings.cutoff = parse_cutoff(cutoff)
        if max_threads is not None:
            settings.max_threads = max_threads
        if quiet:
            settings.logging_enabled = False
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    mailbox = GmailClient(settings.config_dir)
    store = SheetsClient(settings.config_dir)

    if not mailbox.is_authenticated():
        console.print(f"[red]Not authenticated. No token at {mailbox.token_path}[/red]")
        raise typer.Exit(1)

    audit = AuditLog.create_run(settings.runs_dir) if settings.logging_enabled else None
    on_outcome = _print_outcome if settings.logging_enabled else None

    console.print(f"[bold]Label: {escape(settings.label)}[/bold]")
    console.print(f"[dim]Cutoff: {settings.cutoff.isoformat()}[/dim]\n")

    try:
        result = process_rsvps(mailbox, store, settings, audit=audit, on_outcome=on_outcome)
    except (FileNotFoundError, SheetsError) as e:
        console.print(f"[red]Sync failed: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if settings.logging_enabled:
        for skipped in result.skipped:
            _print_skipped(skipped)

    console.print()
    _print_summary(result, settings)

    if audit is not None:
        summary = audit.get_run_summary()
        console.print(f"\n[dim]Audit log: {audit.run_dir}[/dim]")
        console.print(f"[dim]Events logged: {summary['total_events']}[/dim]")

    if result.aborted:
        raise typer.Exit(1)


@app.command()
def parse(
    path: Path = typer.Argument(
        ...,
        help="Email body (.txt) or Gmail API message JSON (.json)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
) -> None:
    """Parse a saved RSVP email and show the resulting record.

    Text files are parsed as a raw body, stamped with the file's
    modification time. JSON files are read as Gmail API messages
    (format="full").

    Example:
        rsvp-sheets parse tests/fixtures/rsvp.json
    """
    try:
        if path.suffix.lower() == ".json":
            with open(path, "r", encoding="utf-8") as f:
                message = parse_gmail_message(json.load(f))
            body, timestamp = message.get_body(), message.get_timestamp()
        else:
            body = path.read_text(encoding="utf-8")
            timestamp = datetime.fromtimestamp(path.stat().st_mtime)
    except (ValueError, OSError) as e:
        console.print(f"[red]Error reading {path.name}: {e}[/red]")
        raise typer.Exit(1)

    record = build_record(body, timestamp)
    console.print(Panel(_record_table(record), title=f"[bold]{path.name}[/bold]"))


@app.command()
def report(
    run_dir: Optional[Path] = typer.Option(
        None,
        "--run",
        "-r",
        help="Specific run directory (default: latest under RSVP_RUNS_DIR)",
    ),
) -> None:
    """Summarize the audit log of a sync run.

    Example:
        rsvp-sheets report
        rsvp-sheets report --run ~/.rsvp-sheets/runs/rsvp-2015-09-01-100503
    """
    if run_dir is None:
        runs_dir = runs_dir_from_env()
        runs = sorted(runs_dir.glob("rsvp-*"), reverse=True) if runs_dir.exists() else []
        if not runs:
            console.print("[red]No runs found. Run 'rsvp-sheets sync' first.[/red]")
            raise typer.Exit(1)
        run_dir = runs[0]
        console.print(f"[dim]Using latest run: {run_dir.name}[/dim]")

    try:
        audit = AuditLog.from_existing(run_dir)
    except FileNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    summary = audit.get_run_summary()

    table = Table(title=f"Run {run_dir.name}")
    table.add_column("Stage")
    table.add_column("Events", justify="right")
    for stage, count in summary["by_stage"].items():
        table.add_row(stage, str(count))
    console.print(table)

    console.print(f"Events: {summary['total_events']}  Errors: {summary['errors']}")
    for event in audit.read_events():
        if event.get("error"):
            subject = event.get("message_id") or event["stage"]
            console.print(f"[red]{escape(subject)}: {escape(event['error'])}[/red]")


@app.command()
def version() -> None:
    """Show version information."""
    from rsvp_sheets import __version__
    console.print(f"rsvp-sheets version {__version__}")


if __name__ == "__main__":
    app()
