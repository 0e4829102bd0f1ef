"""Shared fixtures for the Sales Tracker test suite."""

from datetime import date, datetime, timezone

import pytest

from sales_tracker.models.entry import EntryType, FinancialEntry


def make_entry(
    entry_id: int = 1,
    entry_type: EntryType = EntryType.INCOME,
    amount: int = 100,
    entry_date: date = date(2023, 1, 1),
    category: str = "test",
    created_at: datetime = datetime(2023, 1, 1, 12, 0, tzinfo=timezone.utc),
) -> FinancialEntry:
    return FinancialEntry(
        id=entry_id,
        type=entry_type,
        amount=amount,
        date=entry_date,
        category=category,
        created_at=created_at,
    )


@pytest.fixture
def income_and_expense() -> list[FinancialEntry]:
    """The two-entry ledger used across analytics tests."""
    return [
        make_entry(1, EntryType.INCOME, 100, date(2023, 1, 1)),
        make_entry(2, EntryType.EXPENSE, 50, date(2023, 1, 2)),
    ]
