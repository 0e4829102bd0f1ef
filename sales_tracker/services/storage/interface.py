"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the analytics engine decoupled from any query dialect

Listing accepts the sort directive and date range produced by the
analytics layer and applies them; no caller string ever reaches the
backend directly.
"""

from abc import ABC, abstractmethod
from typing import Optional

from sales_tracker.analytics.sorting import SortDirective
from sales_tracker.models.entry import (
    CreateEntry,
    DateRange,
    FinancialEntry,
    UpdateEntry,
)


class EntryStorageInterface(ABC):
    """
    Abstract interface for entry storage operations.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def create_entry(self, payload: CreateEntry) -> FinancialEntry:
        """
        Persist a new entry.

        The backend assigns the id and created_at timestamp.

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_entry(self, entry_id: int) -> Optional[FinancialEntry]:
        """
        Retrieve an entry by its ID.

        Returns:
            The entry if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_entry(
        self,
        entry_id: int,
        payload: UpdateEntry,
    ) -> FinancialEntry:
        """
        Apply a partial update to an existing entry.

        Returns:
            The entry as stored after the update

        Raises:
            NotFoundError: If entry doesn't exist
            StorageError: If update fails
        """
        pass

    @abstractmethod
    async def delete_entry(self, entry_id: int) -> None:
        """
        Delete an entry by ID.

        Raises:
            NotFoundError: If entry doesn't exist
            StorageError: If delete fails
        """
        pass

    @abstractmethod
    async def list_entries(
        self,
        sort: Optional[SortDirective] = None,
        date_range: Optional[DateRange] = None,
    ) -> list[FinancialEntry]:
        """
        Snapshot of stored entries.

        Args:
            sort: Resolved ordering; None or empty keeps id order
            date_range: Inclusive window; None means all entries

        Returns:
            List of matching entries
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"There is no entry with id {entry_id}")


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
