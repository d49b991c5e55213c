"""Duplicate detection against the RSVP sheet.

A record is a duplicate when its name already appears, exactly, in the
sheet's "name" column. Header cells go through normalize_key so "Name",
" NAME" and "name" all resolve to the same column.
"""

from typing import Sequence

from rsvp_sheets.models import RsvpRecord
from rsvp_sheets.normalize import normalize_key


LOOKUP_COLUMN = "name"


def find_column(header: Sequence[str], name: str) -> int | None:
    """Return the 0-based index of the first header cell matching `name`.

    Args:
        header: Raw header row cells
        name: Canonical key to look for (e.g. "name")

    Returns:
        Column index, or None if no cell normalizes to `name`
    """
    for index, cell in enumerate(header):
        if normalize_key(cell) == name:
            return index
    return None


def record_exists(
    record: RsvpRecord,
    header: Sequence[str],
    lookup_column_values: Sequence[str],
) -> bool:
    """Check whether a record is already present in the sheet.

    Fails safe: without a "name" column we cannot tell, so the record is
    treated as existing and never written.

    Args:
        record: Parsed RSVP record
        header: Raw header row cells
        lookup_column_values: Every value of the "name" column, header excluded

    Returns:
        True if the header lacks "name" or the name is already present
    """
    if find_column(header, LOOKUP_COLUMN) is None:
        return True

    for value in lookup_column_values:
        if value == record.name:
            return True

    return False
