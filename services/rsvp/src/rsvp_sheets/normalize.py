"""
Text normalization for RSVP field keys and email bodies.

Two separate operations live here:
- normalize_key: pattern-based canonicalization of a field label
- strip_html_breaks: literal removal of HTML line breaks from a body

Keys from email lines and from spreadsheet header cells both go through
normalize_key so they compare by equality.
"""

import re


HTML_BREAK = "<br />"

_SPACE_RUN = re.compile(r" +")
_NON_KEY_CHARS = re.compile(r"[^a-z0-9_]")


def normalize_key(raw: str) -> str:
    """
    Convert a raw field label into its canonical key form.

    Steps, in order:
    1. Lowercase
    2. Replace every run of spaces with a single underscore
    3. Drop every character outside [a-z0-9_]

    Args:
        raw: Raw label text (e.g. "Number of Guest(s)")

    Returns:
        Canonical key (e.g. "number_of_guests")

    Examples:
        >>> normalize_key("Number of Guest(s)")
        'number_of_guests'

        >>> normalize_key("Can Attend")
        'can_attend'
    """
    if not raw:
        return ""

    key = raw.lower()
    key = _SPACE_RUN.sub("_", key)
    return _NON_KEY_CHARS.sub("", key)


def strip_html_breaks(body: str) -> str:
    """
    Remove literal HTML line breaks ("<br />") from a message body.

    Gmail hands back HTML bodies where each line ends with "<br />" before
    the newline. This is a plain substring removal, not a pattern match.
    """
    if not body:
        return ""
    return body.replace(HTML_BREAK, "")
