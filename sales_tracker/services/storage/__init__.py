"""
Storage Services Package

Provides the abstract storage interface and concrete implementations.
In-memory storage for local runs and tests, Google Sheets for persistence.
"""

from sales_tracker.services.storage.interface import (
    EntryStorageInterface,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)
from sales_tracker.services.storage.memory import InMemoryEntryStorage
from sales_tracker.services.storage.google_sheets import (
    ENTRY_COLUMNS,
    GoogleSheetsClient,
    GoogleSheetsEntryStorage,
)

__all__ = [
    # Interfaces
    "EntryStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "ENTRY_COLUMNS",
    "GoogleSheetsClient",
    "GoogleSheetsEntryStorage",
    "InMemoryEntryStorage",
]
