"""
Audit Models for Sales Tracker

Every request handled by the tracker produces an audit event.
This provides:
1. Traceability of every change to the ledger
2. Debugging information when a request fails
3. A record of which exports and reports were produced

DESIGN DECISION: The analytics engine itself never logs. Events are
built and emitted by the service layer that calls it.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each service operation has its own success event type.
    """
    # Ledger changes
    ENTRY_CREATED = "entry_created"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_DELETED = "entry_deleted"

    # Reads
    LISTING_SERVED = "listing_served"
    STATISTICS_SERVED = "statistics_served"
    EXPORT_RENDERED = "export_rendered"

    # Failures
    REQUEST_REJECTED = "request_rejected"
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which entry is this about?
    entity_id: Optional[int] = Field(
        default=None,
        description="ID of the entry this event relates to"
    )

    # Correlation - for tracking the events of one request
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one request"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_created(entry_id, "expense", 500, correlation_id)
        event = AuditEventBuilder.request_rejected("InvalidSortFieldError", msg, correlation_id)
    """

    @staticmethod
    def entry_created(
        entry_id: int,
        entry_type: str,
        amount: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_CREATED,
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Entry created: {entry_type} of {amount}",
            details={
                "type": entry_type,
                "amount": amount,
            },
        )

    @staticmethod
    def entry_updated(
        entry_id: int,
        changed_fields: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_UPDATED,
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Entry {entry_id} updated",
            details={
                "changed_fields": changed_fields,
            },
        )

    @staticmethod
    def entry_deleted(
        entry_id: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_DELETED,
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Entry {entry_id} deleted",
        )

    @staticmethod
    def listing_served(
        sort_by: list[str],
        result_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LISTING_SERVED,
            correlation_id=correlation_id,
            description=f"Listing returned {result_count} entries",
            details={
                "sort_by": sort_by,
                "result_count": result_count,
            },
        )

    @staticmethod
    def statistics_served(
        date_from: Optional[str],
        date_to: Optional[str],
        result_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATISTICS_SERVED,
            correlation_id=correlation_id,
            description=f"Statistics computed over {result_count} entries",
            details={
                "date_from": date_from,
                "date_to": date_to,
                "result_count": result_count,
            },
        )

    @staticmethod
    def export_rendered(
        schema: str,
        row_count: int,
        size_bytes: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_RENDERED,
            correlation_id=correlation_id,
            description=f"{schema.capitalize()} CSV rendered with {row_count} rows",
            details={
                "schema": schema,
                "row_count": row_count,
                "size_bytes": size_bytes,
            },
        )

    @staticmethod
    def request_rejected(
        error_code: str,
        error_message: str,
        correlation_id: UUID,
        details: Optional[dict] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REQUEST_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Request rejected: {error_code}",
            error_code=error_code,
            error_message=error_message,
            details=details or {},
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
