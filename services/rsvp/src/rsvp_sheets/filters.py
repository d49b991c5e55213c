"""Cutoff filtering for RSVP messages.

Messages received at or before the cutoff are assumed to have been handled
by an earlier run and are skipped.
"""

from datetime import datetime
from typing import Iterable, Protocol


class TimestampedMessage(Protocol):
    def get_timestamp(self) -> datetime: ...


def is_after_cutoff(message: TimestampedMessage, cutoff: datetime) -> bool:
    """Return True if the message arrived strictly after the cutoff."""
    return message.get_timestamp() > cutoff


def filter_messages(messages: Iterable, cutoff: datetime) -> list:
    """Return the messages received strictly after `cutoff`.

    Builds a new list; the input is never modified. Order is preserved.

    Args:
        messages: Messages exposing get_timestamp()
        cutoff: Messages with timestamp <= cutoff are dropped

    Returns:
        List of messages newer than the cutoff
    """
    return [message for message in messages if is_after_cutoff(message, cutoff)]
