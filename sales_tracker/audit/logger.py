"""
Audit Logger

DESIGN DECISION: Every request handled by the service layer is logged.
This provides:
1. Complete traceability of ledger changes
2. Debugging capability when a request fails
3. A record of produced reports and exports

The analytics engine never logs; it raises, and the service layer
reports the outcome here.
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from sales_tracker.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Emits every event as a structured log line at the level matching
    its severity.
    """

    def __init__(self, logger_name: str = "sales_tracker.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_entry_created(
        self,
        entry_id: int,
        entry_type: str,
        amount: int,
        correlation_id: UUID,
    ) -> None:
        """Log entry creation."""
        self.log(AuditEventBuilder.entry_created(
            entry_id=entry_id,
            entry_type=entry_type,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_entry_updated(
        self,
        entry_id: int,
        changed_fields: list[str],
        correlation_id: UUID,
    ) -> None:
        """Log entry update."""
        self.log(AuditEventBuilder.entry_updated(
            entry_id=entry_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    def log_entry_deleted(
        self,
        entry_id: int,
        correlation_id: UUID,
    ) -> None:
        """Log entry deletion."""
        self.log(AuditEventBuilder.entry_deleted(
            entry_id=entry_id,
            correlation_id=correlation_id,
        ))

    def log_listing_served(
        self,
        sort_by: list[str],
        result_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log a served entry listing."""
        self.log(AuditEventBuilder.listing_served(
            sort_by=sort_by,
            result_count=result_count,
            correlation_id=correlation_id,
        ))

    def log_statistics_served(
        self,
        date_from: Optional[str],
        date_to: Optional[str],
        result_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log served analytics."""
        self.log(AuditEventBuilder.statistics_served(
            date_from=date_from,
            date_to=date_to,
            result_count=result_count,
            correlation_id=correlation_id,
        ))

    def log_export_rendered(
        self,
        schema: str,
        row_count: int,
        size_bytes: int,
        correlation_id: UUID,
    ) -> None:
        """Log a rendered CSV export."""
        self.log(AuditEventBuilder.export_rendered(
            schema=schema,
            row_count=row_count,
            size_bytes=size_bytes,
            correlation_id=correlation_id,
        ))

    def log_request_rejected(
        self,
        error: Exception,
        correlation_id: UUID,
        details: Optional[dict] = None,
    ) -> None:
        """Log a client error."""
        self.log(AuditEventBuilder.request_rejected(
            error_code=type(error).__name__,
            error_message=str(error),
            correlation_id=correlation_id,
            details=details,
        ))

    def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a storage backend failure."""
        self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a request and pass it through
    all subsequent operations.
    """
    return uuid4()
