"""
Data Models Package

This package contains all Pydantic models used in the Sales Tracker system.
All data flowing through the system must conform to these schemas.
"""

from sales_tracker.models.entry import (
    AggregatedEntry,
    AggregateStats,
    CreateEntry,
    DateRange,
    EntryType,
    FinancialEntry,
    SortField,
    UpdateEntry,
    ValidationIssue,
    ValidationResult,
)
from sales_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entry models
    "AggregatedEntry",
    "AggregateStats",
    "CreateEntry",
    "DateRange",
    "EntryType",
    "FinancialEntry",
    "SortField",
    "UpdateEntry",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
