"""Google Sheets client for the RSVP table.

Only three things ever happen to the sheet: read the header row, read one
column, append a row. Existing rows are never rewritten.

Usage:
    client = SheetsClient()
    spreadsheet = client.open_by_id("1Tqa...")
    sheet = spreadsheet.get_first_sheet()
    header = sheet.read_header_row()
    sheet.append_row(record.to_row())
"""

from pathlib import Path
from typing import Sequence

from googleapiclient.discovery import build, Resource
from googleapiclient.errors import HttpError

from rsvp_sheets.auth import load_credentials, token_path
from rsvp_sheets.config import DEFAULT_CONFIG_DIR


# Statuses that mean "no such spreadsheet" from our point of view
NOT_FOUND_STATUSES = {403, 404}


class SheetsError(Exception):
    """Sheets API read or write failure."""
    pass


def column_letter(index: int) -> str:
    """Convert a 0-based column index to A1 letters (0 -> A, 26 -> AA)."""
    if index < 0:
        raise ValueError(f"Column index must be >= 0, got {index}")

    letters = ""
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def _quote_title(title: str) -> str:
    """Quote a sheet title for use in an A1 range."""
    return "'" + title.replace("'", "''") + "'"


class Sheet:
    """One tab of a spreadsheet."""

    def __init__(self, service: Resource, spreadsheet_id: str, title: str):
        self._service = service
        self.spreadsheet_id = spreadsheet_id
        self.title = title

    def _range(self, a1: str) -> str:
        return f"{_quote_title(self.title)}!{a1}"

    def _get_values(self, a1: str, **kwargs) -> list[list]:
        try:
            result = self._service.spreadsheets().values().get(
                spreadsheetId=self.spreadsheet_id,
                range=self._range(a1),
                **kwargs,
            ).execute()
        except HttpError as e:
            raise SheetsError(f"Failed to read {self._range(a1)}: {e}") from e
        return result.get("values", [])

    def read_header_row(self) -> list[str]:
        """Return the cells of row 1 (empty list for an empty sheet)."""
        rows = self._get_values("1:1")
        if not rows:
            return []
        return [str(cell) for cell in rows[0]]

    def read_column(
        self,
        column_index: int,
        from_row: int,
        row_count: int | None = None,
    ) -> list[str]:
        """Read a single column.

        Args:
            column_index: 0-based column index
            from_row: 1-based first row to read
            row_count: Number of rows, or None to read through the last row

        Returns:
            Cell values as strings; blank cells are ""
        """
        if row_count is not None and row_count <= 0:
            return []

        letter = column_letter(column_index)
        end = f"{letter}{from_row + row_count - 1}" if row_count else letter
        columns = self._get_values(f"{letter}{from_row}:{end}", majorDimension="COLUMNS")

        values = [str(cell) for cell in columns[0]] if columns else []
        if row_count is not None:
            # The API drops trailing blank cells
            values.extend([""] * (row_count - len(values)))
        return values

    def append_row(self, values: Sequence[str], literal_columns: Sequence[int] = ()) -> None:
        """Append one row after the last row with data.

        Values are parsed as if typed into the sheet, so dates become
        dates. Cells in `literal_columns` are kept as the exact text
        given (e.g. "007" or "=x") by prefixing the apostrophe Sheets
        strips on entry.

        Raises:
            SheetsError: If the API call fails
        """
        row = [
            f"'{value}" if index in literal_columns and value else value
            for index, value in enumerate(values)
        ]
        try:
            self._service.spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=self._range("A1"),
                valueInputOption="USER_ENTERED",
                insertDataOption="INSERT_ROWS",
                body={"values": [row]},
            ).execute()
        except HttpError as e:
            raise SheetsError(f"Failed to append to {self.title}: {e}") from e


class Spreadsheet:
    """An opened spreadsheet and its tab titles."""

    def __init__(self, service: Resource, spreadsheet_id: str, title: str, sheet_titles: list[str]):
        self._service = service
        self.spreadsheet_id = spreadsheet_id
        self.title = title
        self.sheet_titles = sheet_titles

    def get_first_sheet(self) -> Sheet | None:
        """Return the first tab, or None if the spreadsheet has no tabs."""
        if not self.sheet_titles:
            return None
        return Sheet(self._service, self.spreadsheet_id, self.sheet_titles[0])


class SheetsClient:
    """Minimal Sheets v4 client sharing the Gmail OAuth token."""

    def __init__(self, config_dir: Path | None = None, service: Resource | None = None):
        self.config_dir = config_dir or DEFAULT_CONFIG_DIR
        self.token_path = token_path(self.config_dir)
        self._service = service

    def get_service(self) -> Resource:
        """Get authenticated Sheets API service.

        Raises:
            FileNotFoundError: If no token has been stored
        """
        if self._service:
            return self._service

        credentials = load_credentials(self.config_dir)
        self._service = build("sheets", "v4", credentials=credentials)
        return self._service

    def open_by_id(self, spreadsheet_id: str) -> Spreadsheet | None:
        """Open a spreadsheet by id.

        Returns:
            Spreadsheet, or None if it does not exist or is not shared with us

        Raises:
            SheetsError: For any other API failure
        """
        service = self.get_service()
        try:
            metadata = service.spreadsheets().get(
                spreadsheetId=spreadsheet_id,
                fields="properties.title,sheets.properties.title",
            ).execute()
        except HttpError as e:
            if e.resp.status in NOT_FOUND_STATUSES:
                return None
            raise SheetsError(f"Failed to open spreadsheet {spreadsheet_id}: {e}") from e

        sheet_titles = [
            sheet["properties"]["title"]
            for sheet in metadata.get("sheets", [])
            if sheet.get("properties", {}).get("title")
        ]
        return Spreadsheet(
            service,
            spreadsheet_id,
            metadata.get("properties", {}).get("title", ""),
            sheet_titles,
        )
