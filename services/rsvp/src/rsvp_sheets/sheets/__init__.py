"""Google Sheets access for rsvp-sheets."""

from rsvp_sheets.sheets.client import (
    Sheet,
    SheetsClient,
    SheetsError,
    Spreadsheet,
    column_letter,
)

__all__ = ["Sheet", "SheetsClient", "SheetsError", "Spreadsheet", "column_letter"]
