"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a storage backend because:
1. Users can view and share their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (fine for a personal ledger)
- No transactions (ids are allocated as max existing id + 1)
- Limited query capabilities (we filter and sort in Python with the
  same functions the analytics engine uses)
"""

from datetime import date, datetime, timezone
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from sales_tracker.analytics.filters import apply_range
from sales_tracker.analytics.sorting import SortDirective, sort_entries
from sales_tracker.config import get_settings
from sales_tracker.models.entry import (
    CreateEntry,
    DateRange,
    EntryType,
    FinancialEntry,
    UpdateEntry,
)
from sales_tracker.services.storage.interface import (
    EntryStorageInterface,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)


# Column mappings for the entries sheet
ENTRY_COLUMNS = [
    "id",
    "type",
    "amount",
    "date",
    "category",
    "created_at",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_entries_sheet(self) -> gspread.Worksheet:
        """Get or create the entries worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.entries_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.entries_sheet_name,
                rows=1000,
                cols=len(ENTRY_COLUMNS),
            )
            sheet.append_row(ENTRY_COLUMNS)
        return sheet


def entry_to_row(entry: FinancialEntry) -> list:
    """Convert a FinancialEntry to a spreadsheet row."""
    return [
        str(entry.id),
        entry.type.value,
        str(entry.amount),
        entry.date.isoformat(),
        entry.category,
        entry.created_at.isoformat(),
    ]


def row_to_entry(row: list) -> FinancialEntry:
    """Convert a spreadsheet row to a FinancialEntry."""
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default

    return FinancialEntry(
        id=int(safe_get(0)),
        type=EntryType(safe_get(1)),
        amount=int(safe_get(2)),
        date=date.fromisoformat(safe_get(3)),
        category=safe_get(4),
        created_at=datetime.fromisoformat(safe_get(5)),
    )


class GoogleSheetsEntryStorage(EntryStorageInterface):
    """
    Google Sheets implementation of entry storage.

    Entries are stored as rows in a worksheet with one entry per row,
    under a header row matching ENTRY_COLUMNS.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _read_rows(self) -> list[list]:
        sheet = self._client.get_entries_sheet()
        return sheet.get_all_values()[1:]  # Skip header

    def _find_row(self, entry_id: int) -> tuple[int, list]:
        """Locate an entry; returns (1-based sheet row index, row values)."""
        sheet = self._client.get_entries_sheet()
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
            if row and row[0] == str(entry_id):
                return idx, row
        raise NotFoundError(entry_id)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def create_entry(self, payload: CreateEntry) -> FinancialEntry:
        """Append a new entry row."""
        try:
            ids = [int(row[0]) for row in self._read_rows() if row and row[0]]
            entry = FinancialEntry(
                id=max(ids, default=0) + 1,
                created_at=datetime.now(timezone.utc),
                **payload.model_dump(),
            )
            sheet = self._client.get_entries_sheet()
            sheet.append_row(entry_to_row(entry), value_input_option="RAW")
            return entry
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to create entry: {e}")

    async def get_entry(self, entry_id: int) -> Optional[FinancialEntry]:
        """Retrieve an entry by its ID."""
        try:
            _, row = self._find_row(entry_id)
            return row_to_entry(row)
        except NotFoundError:
            return None
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to get entry: {e}")

    async def update_entry(
        self,
        entry_id: int,
        payload: UpdateEntry,
    ) -> FinancialEntry:
        """Rewrite the row of an existing entry."""
        try:
            idx, row = self._find_row(entry_id)
            updated = payload.apply_to(row_to_entry(row))
            sheet = self._client.get_entries_sheet()
            sheet.update(
                range_name=f"A{idx}",
                values=[entry_to_row(updated)],
                value_input_option="RAW",
            )
            return updated
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update entry: {e}")

    async def delete_entry(self, entry_id: int) -> None:
        """Delete the row of an entry."""
        try:
            idx, _ = self._find_row(entry_id)
            sheet = self._client.get_entries_sheet()
            sheet.delete_rows(idx)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete entry: {e}")

    async def list_entries(
        self,
        sort: Optional[SortDirective] = None,
        date_range: Optional[DateRange] = None,
    ) -> list[FinancialEntry]:
        """List entries, filtered and ordered in Python."""
        try:
            entries = [
                row_to_entry(row)
                for row in self._read_rows()
                if row and row[0]
            ]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list entries: {e}")

        entries.sort(key=lambda entry: entry.id)
        selected = apply_range(entries, date_range)
        return sort_entries(selected, sort or ())
