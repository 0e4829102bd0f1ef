"""
In-Memory Storage Implementation

Keeps entries in a dict keyed by id. Used for local runs without
Google credentials and throughout the test suite.

Reads return snapshots: the returned list is independent of later
writes, so the analytics engine always sees a consistent set.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from sales_tracker.analytics.filters import apply_range
from sales_tracker.analytics.sorting import SortDirective, sort_entries
from sales_tracker.models.entry import (
    CreateEntry,
    DateRange,
    FinancialEntry,
    UpdateEntry,
)
from sales_tracker.services.storage.interface import (
    EntryStorageInterface,
    NotFoundError,
)


class InMemoryEntryStorage(EntryStorageInterface):
    """Process-local entry storage with sequential ids starting at 1."""

    def __init__(self, entries: Optional[list[FinancialEntry]] = None):
        self._entries: dict[int, FinancialEntry] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()
        for entry in entries or []:
            self._entries[entry.id] = entry
            self._next_id = max(self._next_id, entry.id + 1)

    async def create_entry(self, payload: CreateEntry) -> FinancialEntry:
        async with self._lock:
            entry = FinancialEntry(
                id=self._next_id,
                created_at=datetime.now(timezone.utc),
                **payload.model_dump(),
            )
            self._entries[entry.id] = entry
            self._next_id += 1
            return entry

    async def get_entry(self, entry_id: int) -> Optional[FinancialEntry]:
        return self._entries.get(entry_id)

    async def update_entry(
        self,
        entry_id: int,
        payload: UpdateEntry,
    ) -> FinancialEntry:
        async with self._lock:
            current = self._entries.get(entry_id)
            if current is None:
                raise NotFoundError(entry_id)
            updated = payload.apply_to(current)
            self._entries[entry_id] = updated
            return updated

    async def delete_entry(self, entry_id: int) -> None:
        async with self._lock:
            if self._entries.pop(entry_id, None) is None:
                raise NotFoundError(entry_id)

    async def list_entries(
        self,
        sort: Optional[SortDirective] = None,
        date_range: Optional[DateRange] = None,
    ) -> list[FinancialEntry]:
        snapshot = [self._entries[key] for key in sorted(self._entries)]
        selected = apply_range(snapshot, date_range)
        return sort_entries(selected, sort or ())
