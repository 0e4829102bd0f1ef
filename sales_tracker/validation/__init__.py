"""Payload validation package."""

from sales_tracker.validation.validator import EntryValidationError, EntryValidator

__all__ = ["EntryValidationError", "EntryValidator"]
