"""Run settings for rsvp-sheets, read from environment variables.

Usage:
    settings = Settings.from_env()

Env vars:
    RSVP_LABEL:            Gmail label holding RSVP emails (default: "Wedding RSVPs")
    RSVP_SPREADSHEET_ID:   Target spreadsheet id (required)
    RSVP_CUTOFF:           ISO-8601 timestamp; older messages are skipped
    RSVP_MAX_THREADS:      Process at most this many threads (0 = all)
    RSVP_LOGGING_ENABLED:  "true"/"false", audit log + per-record output
    RSVP_CONFIG_DIR:       Directory holding token.json
    RSVP_RUNS_DIR:         Directory for audit run logs
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


DEFAULT_LABEL = "Wedding RSVPs"
DEFAULT_CUTOFF = "2015-08-22T00:00:00"
DEFAULT_CONFIG_DIR = Path.home() / ".rsvp-sheets"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_cutoff(value: str) -> datetime:
    """Parse an ISO-8601 cutoff timestamp.

    Naive values are taken as local time and made timezone-aware so they
    compare cleanly with Gmail message timestamps.

    Raises:
        ValueError: If the value is not ISO-8601
    """
    try:
        cutoff = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Invalid cutoff timestamp: {value!r} (expected ISO-8601)")

    if cutoff.tzinfo is None:
        cutoff = cutoff.astimezone()
    return cutoff


def parse_bool(value: str) -> bool:
    """Parse a boolean env var value.

    Raises:
        ValueError: If the value is not a recognized boolean
    """
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def parse_max_threads(value: str) -> int:
    """Parse the thread cap; must be a non-negative integer."""
    try:
        max_threads = int(value)
    except ValueError:
        raise ValueError(f"Invalid RSVP_MAX_THREADS: {value!r} (expected integer)")
    if max_threads < 0:
        raise ValueError(f"RSVP_MAX_THREADS must be >= 0, got {max_threads}")
    return max_threads


def runs_dir_from_env(environ: dict[str, str] | None = None) -> Path:
    """Resolve the audit runs directory from RSVP_RUNS_DIR / RSVP_CONFIG_DIR."""
    env = os.environ if environ is None else environ
    config_dir = Path(env.get("RSVP_CONFIG_DIR", str(DEFAULT_CONFIG_DIR))).expanduser()
    return Path(env.get("RSVP_RUNS_DIR", str(config_dir / "runs"))).expanduser()


@dataclass
class Settings:
    """Everything one sync run needs to know."""
    spreadsheet_id: str
    label: str = DEFAULT_LABEL
    cutoff: datetime = field(default_factory=lambda: parse_cutoff(DEFAULT_CUTOFF))
    max_threads: int = 0
    logging_enabled: bool = True
    config_dir: Path = DEFAULT_CONFIG_DIR
    runs_dir: Path = DEFAULT_CONFIG_DIR / "runs"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Create settings from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Raises:
            ValueError: If RSVP_SPREADSHEET_ID is missing or a value is malformed
        """
        env = os.environ if environ is None else environ

        spreadsheet_id = env.get("RSVP_SPREADSHEET_ID", "").strip()
        if not spreadsheet_id:
            raise ValueError("RSVP_SPREADSHEET_ID environment variable required")

        config_dir = Path(env.get("RSVP_CONFIG_DIR", str(DEFAULT_CONFIG_DIR))).expanduser()
        runs_dir = runs_dir_from_env(env)

        return cls(
            spreadsheet_id=spreadsheet_id,
            label=env.get("RSVP_LABEL", DEFAULT_LABEL),
            cutoff=parse_cutoff(env.get("RSVP_CUTOFF", DEFAULT_CUTOFF)),
            max_threads=parse_max_threads(env.get("RSVP_MAX_THREADS", "0")),
            logging_enabled=parse_bool(env.get("RSVP_LOGGING_ENABLED", "true")),
            config_dir=config_dir,
            runs_dir=runs_dir,
        )
