"""RSVP email body parser.

RSVP notifications arrive as one "Label: value" pair per line:

    From: John Doe
    Subject: Wedding RSVP
    Name: John Doe & Jane Doe
    Email: jdoe123@gmail.com
    Number of Guest(s): 1
    Events:
    Can Attend: No

"Can Attend" is always the last field we care about; anything after it
(signatures, footers) is ignored.

Usage:
    from rsvp_sheets.parser import build_record

    record = build_record(message.get_body(), message.get_timestamp())
"""

from datetime import datetime

from rsvp_sheets.models import RsvpRecord
from rsvp_sheets.normalize import normalize_key, strip_html_breaks


# Key that ends field extraction (inclusive)
TERMINAL_KEY = "can_attend"

# Header-like lines repeated in the body that are not part of the record
SKIP_KEYS = frozenset(["from", "subject"])


def parse_lines(body: str) -> list[tuple[str, str]]:
    """Split a message body into ordered (key, value) pairs.

    Each line is split on ":". The text before the first colon becomes the
    key (normalized); the remaining fragments are joined back together with
    no separator and stripped. Scanning stops right after the first
    "can_attend" pair.

    Lines without a colon produce an empty value. Lines with an empty key
    are still returned.

    Args:
        body: Raw message body (plain text or Gmail HTML with <br />)

    Returns:
        List of (normalized_key, value) tuples in source order
    """
    pairs: list[tuple[str, str]] = []

    for line in strip_html_breaks(body).split("\n"):
        raw_key, *fragments = line.split(":")
        key = normalize_key(raw_key)
        value = "".join(fragments).strip()

        pairs.append((key, value))

        if key == TERMINAL_KEY:
            break

    return pairs


def format_timestamp(timestamp: datetime) -> str:
    """Format a timestamp as "M/D/YYYY H:M:S" with no zero padding.

    >>> format_timestamp(datetime(2015, 9, 1, 10, 5, 3))
    '9/1/2015 10:5:3'
    """
    return (
        f"{timestamp.month}/{timestamp.day}/{timestamp.year} "
        f"{timestamp.hour}:{timestamp.minute}:{timestamp.second}"
    )


def build_record(body: str, message_timestamp: datetime) -> RsvpRecord:
    """Build an RsvpRecord from a message body.

    "from" and "subject" lines are skipped. The record's date always comes
    from the message timestamp, never from the body.

    Args:
        body: Raw message body
        message_timestamp: When the message was received

    Returns:
        RsvpRecord with every field found in the body populated
    """
    record = RsvpRecord()

    for key, value in parse_lines(body):
        if key in SKIP_KEYS:
            continue
        record.set_field(key, value)

    record.date = format_timestamp(message_timestamp)
    return record
