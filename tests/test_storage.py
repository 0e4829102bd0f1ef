"""
Tests for the storage backends.

Google Sheets is exercised against an in-process fake worksheet; no
network calls are made.
"""

import asyncio
from datetime import date, datetime, timezone

import pytest

from sales_tracker.analytics import SortDirective, parse_date_range, resolve_sort
from sales_tracker.models.entry import CreateEntry, EntryType, UpdateEntry
from sales_tracker.services.storage import (
    ENTRY_COLUMNS,
    GoogleSheetsEntryStorage,
    InMemoryEntryStorage,
    NotFoundError,
    StorageError,
)
from sales_tracker.services.storage.google_sheets import entry_to_row, row_to_entry
from tests.conftest import make_entry


def run(coro):
    return asyncio.run(coro)


def payload(entry_type="income", amount=100, entry_date="2023-01-01", category="test"):
    return CreateEntry(type=entry_type, amount=amount, date=entry_date, category=category)


class FakeWorksheet:
    """Minimal stand-in for gspread.Worksheet."""

    def __init__(self, rows=None):
        self.rows = [list(ENTRY_COLUMNS)] + [list(row) for row in rows or []]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, values, value_input_option=None):
        self.rows.append(list(values))

    def update(self, range_name, values, value_input_option=None):
        index = int(range_name[1:]) - 1
        self.rows[index] = list(values[0])

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:
    def __init__(self, sheet):
        self.sheet = sheet

    def get_entries_sheet(self):
        return self.sheet


class BrokenSheetsClient:
    def get_entries_sheet(self):
        raise RuntimeError("quota exceeded")


# =============================================================================
# In-memory storage
# =============================================================================

class TestInMemoryStorage:
    """Tests for InMemoryEntryStorage."""

    def test_create_assigns_sequential_ids(self):
        storage = InMemoryEntryStorage()
        first = run(storage.create_entry(payload()))
        second = run(storage.create_entry(payload(entry_type="expense", amount=50)))
        assert (first.id, second.id) == (1, 2)
        assert second.type is EntryType.EXPENSE
        assert first.created_at.tzinfo is not None

    def test_seeded_entries_advance_ids(self):
        storage = InMemoryEntryStorage([make_entry(entry_id=7)])
        created = run(storage.create_entry(payload()))
        assert created.id == 8

    def test_get_entry(self):
        storage = InMemoryEntryStorage([make_entry(entry_id=3)])
        assert run(storage.get_entry(3)).id == 3
        assert run(storage.get_entry(4)) is None

    def test_update_entry(self):
        storage = InMemoryEntryStorage([make_entry(entry_id=1, amount=100)])
        updated = run(storage.update_entry(1, UpdateEntry(amount=120, category="bonus")))
        assert updated.amount == 120
        assert updated.category == "bonus"
        assert run(storage.get_entry(1)) == updated

    def test_update_missing_entry(self):
        storage = InMemoryEntryStorage()
        with pytest.raises(NotFoundError, match="There is no entry with id 9"):
            run(storage.update_entry(9, UpdateEntry(amount=1)))

    def test_delete_entry(self):
        storage = InMemoryEntryStorage([make_entry(entry_id=1)])
        run(storage.delete_entry(1))
        assert run(storage.list_entries()) == []

    def test_delete_missing_entry(self):
        storage = InMemoryEntryStorage()
        with pytest.raises(NotFoundError) as exc_info:
            run(storage.delete_entry(5))
        assert exc_info.value.entry_id == 5

    def test_list_defaults_to_id_order(self):
        storage = InMemoryEntryStorage([
            make_entry(entry_id=2),
            make_entry(entry_id=1),
        ])
        assert [entry.id for entry in run(storage.list_entries())] == [1, 2]

    def test_list_applies_sort_and_range(self):
        storage = InMemoryEntryStorage([
            make_entry(1, amount=300, entry_date=date(2023, 1, 1)),
            make_entry(2, amount=100, entry_date=date(2023, 1, 2)),
            make_entry(3, amount=200, entry_date=date(2023, 2, 1)),
        ])
        entries = run(storage.list_entries(
            sort=resolve_sort(["amount"]),
            date_range=parse_date_range("2023-01-01", "2023-01-31"),
        ))
        assert [entry.id for entry in entries] == [2, 1]

    def test_list_returns_snapshot(self):
        storage = InMemoryEntryStorage([make_entry(entry_id=1)])
        snapshot = run(storage.list_entries())
        run(storage.create_entry(payload()))
        assert len(snapshot) == 1
        assert len(run(storage.list_entries())) == 2


# =============================================================================
# Google Sheets storage
# =============================================================================

class TestRowConversion:
    """Tests for the spreadsheet row mapping."""

    def test_entry_to_row(self):
        assert entry_to_row(make_entry()) == [
            "1", "income", "100", "2023-01-01", "test", "2023-01-01T12:00:00+00:00",
        ]

    def test_row_to_entry(self):
        entry = row_to_entry(
            ["4", "expense", "75", "2023-03-05", "food", "2023-03-05T08:30:00+00:00"]
        )
        assert entry.id == 4
        assert entry.type is EntryType.EXPENSE
        assert entry.amount == 75
        assert entry.date == date(2023, 3, 5)
        assert entry.created_at == datetime(2023, 3, 5, 8, 30, tzinfo=timezone.utc)

    def test_conversion_preserves_entry(self):
        entry = make_entry(entry_id=12, entry_type=EntryType.EXPENSE, category="rent, flat")
        assert row_to_entry(entry_to_row(entry)) == entry


class TestGoogleSheetsStorage:
    """Tests for GoogleSheetsEntryStorage over a fake worksheet."""

    def _storage(self, entries=()):
        sheet = FakeWorksheet([entry_to_row(entry) for entry in entries])
        return GoogleSheetsEntryStorage(FakeSheetsClient(sheet)), sheet

    def test_create_appends_row(self):
        storage, sheet = self._storage([make_entry(entry_id=4)])
        created = run(storage.create_entry(payload(amount=20)))
        assert created.id == 5
        assert sheet.rows[-1][:5] == ["5", "income", "20", "2023-01-01", "test"]

    def test_create_on_empty_sheet(self):
        storage, _ = self._storage()
        assert run(storage.create_entry(payload())).id == 1

    def test_get_entry(self):
        storage, _ = self._storage([make_entry(entry_id=1), make_entry(entry_id=2)])
        assert run(storage.get_entry(2)).id == 2
        assert run(storage.get_entry(3)) is None

    def test_update_rewrites_row(self):
        storage, sheet = self._storage([make_entry(entry_id=1), make_entry(entry_id=2)])
        updated = run(storage.update_entry(2, UpdateEntry(type="expense")))
        assert updated.type is EntryType.EXPENSE
        assert sheet.rows[2][1] == "expense"
        assert sheet.rows[1][1] == "income"

    def test_update_missing(self):
        storage, _ = self._storage()
        with pytest.raises(NotFoundError):
            run(storage.update_entry(1, UpdateEntry(amount=3)))

    def test_delete_removes_row(self):
        storage, sheet = self._storage([make_entry(entry_id=1), make_entry(entry_id=2)])
        run(storage.delete_entry(1))
        assert [row[0] for row in sheet.rows[1:]] == ["2"]

    def test_list_sorts_and_filters(self):
        storage, _ = self._storage([
            make_entry(2, amount=10, entry_date=date(2023, 1, 2)),
            make_entry(1, amount=30, entry_date=date(2023, 1, 1)),
            make_entry(3, amount=20, entry_date=date(2023, 5, 1)),
        ])
        assert [entry.id for entry in run(storage.list_entries())] == [1, 2, 3]
        directive: SortDirective = resolve_sort(["amount"])
        window = parse_date_range(None, "2023-01-31")
        entries = run(storage.list_entries(sort=directive, date_range=window))
        assert [entry.id for entry in entries] == [2, 1]

    def test_backend_failure_is_storage_error(self):
        storage = GoogleSheetsEntryStorage(BrokenSheetsClient())
        with pytest.raises(StorageError, match="quota exceeded"):
            run(storage.list_entries())

    def test_row_without_timezone_is_storage_error(self):
        sheet = FakeWorksheet([
            entry_to_row(make_entry(entry_id=1)),
            ["2", "income", "1", "2023-01-01", "a", "2023-01-02T00:00:00"],
        ])
        storage = GoogleSheetsEntryStorage(FakeSheetsClient(sheet))
        with pytest.raises(StorageError):
            run(storage.list_entries(sort=resolve_sort(["created_at"])))

    def test_row_without_timezone_cannot_be_read(self):
        with pytest.raises(ValueError):
            row_to_entry(["2", "income", "1", "2023-01-01", "a", "2023-01-02T00:00:00"])

    def test_corrupt_row_is_storage_error(self):
        sheet = FakeWorksheet([["1", "transfer", "10", "2023-01-01", "x", "2023-01-01T00:00:00"]])
        storage = GoogleSheetsEntryStorage(FakeSheetsClient(sheet))
        with pytest.raises(StorageError):
            run(storage.list_entries())
