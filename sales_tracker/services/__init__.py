"""Services package."""

from sales_tracker.services.storage import (
    EntryStorageInterface,
    GoogleSheetsClient,
    GoogleSheetsEntryStorage,
    InMemoryEntryStorage,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "EntryStorageInterface",
    "GoogleSheetsClient",
    "GoogleSheetsEntryStorage",
    "InMemoryEntryStorage",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
]
