"""
Main Orchestrator for Sales Tracker

This module ties together storage, the analytics engine and the audit
logger, and defines the request-level operations:
1. Ledger changes (create, update, delete)
2. Listings (sorted, optionally exported as plain CSV)
3. Analytics (statistics over a date range, optionally exported as
   aggregated CSV)

DESIGN DECISION: The orchestrator owns the boundaries:
- Request parameters are resolved before storage is touched
- The engine only ever sees snapshots fetched here
- Every outcome, success or failure, is audited here, never in the engine

Errors are re-raised after logging so the front-end can present them.
"""

from typing import Any, Optional, Sequence
from uuid import UUID

from sales_tracker.analytics import (
    AnalyticsError,
    ClientError,
    CsvSchema,
    aggregate,
    annotate,
    parse_date_range,
    render_csv,
    resolve_sort,
)
from sales_tracker.audit import AuditLogger, create_correlation_id
from sales_tracker.config import get_settings
from sales_tracker.models.entry import (
    AggregatedEntry,
    AggregateStats,
    FinancialEntry,
)
from sales_tracker.services.storage import (
    EntryStorageInterface,
    GoogleSheetsClient,
    GoogleSheetsEntryStorage,
    InMemoryEntryStorage,
    NotFoundError,
    StorageError,
)
from sales_tracker.validation import EntryValidationError, EntryValidator


class TrackerService:
    """
    Request-handling layer over entry storage.

    Flow for every read:
    1. Resolve request parameters (sort keys, date range)
    2. Fetch a snapshot from storage with the resolved directive
    3. Run the analytics engine on the snapshot
    4. Audit the outcome
    """

    def __init__(
        self,
        storage: EntryStorageInterface,
        validator: Optional[EntryValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._validator = validator or EntryValidator()
        self._audit_logger = audit_logger or AuditLogger()

    def _reject(self, error: Exception, correlation_id: UUID, **details: Any) -> None:
        self._audit_logger.log_request_rejected(
            error=error,
            correlation_id=correlation_id,
            details=details or None,
        )

    # -------------------------------------------------------------------------
    # Ledger changes
    # -------------------------------------------------------------------------

    async def create_entry(
        self,
        data: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> FinancialEntry:
        """
        Validate and store a new entry.

        Raises:
            EntryValidationError: If the payload fails schema validation
            StorageError: If the backend fails
        """
        correlation_id = correlation_id or create_correlation_id()

        payload, result = self._validator.validate_create(data)
        if payload is None:
            error = EntryValidationError(result)
            self._reject(error, correlation_id)
            raise error

        try:
            entry = await self._storage.create_entry(payload)
        except StorageError as e:
            self._audit_logger.log_storage_error("create_entry", str(e), correlation_id)
            raise

        self._audit_logger.log_entry_created(
            entry_id=entry.id,
            entry_type=entry.type.value,
            amount=entry.amount,
            correlation_id=correlation_id,
        )
        return entry

    async def update_entry(
        self,
        entry_id: int,
        data: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> FinancialEntry:
        """
        Apply a partial update to an entry.

        Raises:
            EntryValidationError: If the payload fails schema validation
            NotFoundError: If no entry has this id
            StorageError: If the backend fails
        """
        correlation_id = correlation_id or create_correlation_id()

        payload, result = self._validator.validate_update(data)
        if payload is None:
            error = EntryValidationError(result)
            self._reject(error, correlation_id, entry_id=entry_id)
            raise error

        try:
            entry = await self._storage.update_entry(entry_id, payload)
        except NotFoundError as e:
            self._reject(e, correlation_id, entry_id=entry_id)
            raise
        except StorageError as e:
            self._audit_logger.log_storage_error("update_entry", str(e), correlation_id)
            raise

        self._audit_logger.log_entry_updated(
            entry_id=entry_id,
            changed_fields=sorted(payload.model_dump(exclude_none=True)),
            correlation_id=correlation_id,
        )
        return entry

    async def delete_entry(
        self,
        entry_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Raises:
            NotFoundError: If no entry has this id
            StorageError: If the backend fails
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            await self._storage.delete_entry(entry_id)
        except NotFoundError as e:
            self._reject(e, correlation_id, entry_id=entry_id)
            raise
        except StorageError as e:
            self._audit_logger.log_storage_error("delete_entry", str(e), correlation_id)
            raise

        self._audit_logger.log_entry_deleted(entry_id, correlation_id)

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    async def _fetch_sorted(
        self,
        sort_by: Sequence[str],
        correlation_id: UUID,
    ) -> list[FinancialEntry]:
        try:
            directive = resolve_sort(sort_by)
        except ClientError as e:
            self._reject(e, correlation_id, sort_by=list(sort_by))
            raise

        try:
            return await self._storage.list_entries(sort=directive)
        except StorageError as e:
            self._audit_logger.log_storage_error("list_entries", str(e), correlation_id)
            raise

    async def list_entries(
        self,
        sort_by: Sequence[str] = (),
        correlation_id: Optional[UUID] = None,
    ) -> list[FinancialEntry]:
        """
        All entries ordered by the requested fields.

        Raises:
            InvalidSortFieldError: If a field is outside the whitelist
            StorageError: If the backend fails
        """
        correlation_id = correlation_id or create_correlation_id()

        entries = await self._fetch_sorted(sort_by, correlation_id)
        self._audit_logger.log_listing_served(
            sort_by=list(sort_by),
            result_count=len(entries),
            correlation_id=correlation_id,
        )
        return entries

    async def export_listing_csv(
        self,
        sort_by: Sequence[str] = (),
        correlation_id: Optional[UUID] = None,
    ) -> bytes:
        """
        Sorted listing rendered with the plain CSV schema.

        Raises:
            InvalidSortFieldError: If a field is outside the whitelist
            SerializationError: If the CSV cannot be rendered
            StorageError: If the backend fails
        """
        correlation_id = correlation_id or create_correlation_id()

        entries = await self._fetch_sorted(sort_by, correlation_id)
        return self._render(entries, CsvSchema.PLAIN, correlation_id)

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    async def _fetch_range(
        self,
        date_from: Optional[str],
        date_to: Optional[str],
        correlation_id: UUID,
    ) -> list[FinancialEntry]:
        try:
            date_range = parse_date_range(date_from, date_to)
        except ClientError as e:
            self._reject(e, correlation_id, date_from=date_from, date_to=date_to)
            raise

        try:
            return await self._storage.list_entries(date_range=date_range)
        except StorageError as e:
            self._audit_logger.log_storage_error("list_entries", str(e), correlation_id)
            raise

    async def get_statistics(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AggregateStats:
        """
        Whole-range statistics.

        Raises:
            InvalidDateRangeError: If the bounds are malformed or inverted
            NoDataError: If no entry falls inside the range
            StorageError: If the backend fails
        """
        correlation_id = correlation_id or create_correlation_id()

        entries = await self._fetch_range(date_from, date_to, correlation_id)
        try:
            stats = aggregate(entries)
        except AnalyticsError as e:
            self._reject(e, correlation_id, date_from=date_from, date_to=date_to)
            raise

        self._audit_logger.log_statistics_served(
            date_from=date_from,
            date_to=date_to,
            result_count=stats.count,
            correlation_id=correlation_id,
        )
        return stats

    async def get_aggregated(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[AggregatedEntry]:
        """
        Entries in range, each carrying the statistics of the whole range.

        Raises:
            InvalidDateRangeError: If the bounds are malformed or inverted
            StorageError: If the backend fails
        """
        correlation_id = correlation_id or create_correlation_id()

        entries = await self._fetch_range(date_from, date_to, correlation_id)
        rows = annotate(entries)
        self._audit_logger.log_statistics_served(
            date_from=date_from,
            date_to=date_to,
            result_count=len(rows),
            correlation_id=correlation_id,
        )
        return rows

    async def export_aggregated_csv(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> bytes:
        """
        Aggregated rows rendered with the aggregated CSV schema.
        An empty range produces a header-only document.

        Raises:
            InvalidDateRangeError: If the bounds are malformed or inverted
            SerializationError: If the CSV cannot be rendered
            StorageError: If the backend fails
        """
        correlation_id = correlation_id or create_correlation_id()

        entries = await self._fetch_range(date_from, date_to, correlation_id)
        return self._render(annotate(entries), CsvSchema.AGGREGATED, correlation_id)

    def render_export(
        self,
        rows: Sequence,
        schema: CsvSchema,
        correlation_id: Optional[UUID] = None,
    ) -> bytes:
        """
        Render rows the caller already fetched, so a page can show and
        download the same snapshot without reading storage again.

        Raises:
            SerializationError: If the CSV cannot be rendered
        """
        correlation_id = correlation_id or create_correlation_id()
        return self._render(rows, CsvSchema(schema), correlation_id)

    def _render(
        self,
        rows: Sequence,
        schema: CsvSchema,
        correlation_id: UUID,
    ) -> bytes:
        try:
            payload = render_csv(rows, schema)
        except AnalyticsError as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"schema": schema.value},
                correlation_id=correlation_id,
            )
            raise

        self._audit_logger.log_export_rendered(
            schema=schema.value,
            row_count=len(rows),
            size_bytes=len(payload),
            correlation_id=correlation_id,
        )
        return payload


def create_storage(backend: Optional[str] = None) -> EntryStorageInterface:
    """
    Build the configured storage backend.

    Args:
        backend: Override for the configured storage_backend setting
    """
    backend = backend or get_settings().app.storage_backend
    if backend == "google_sheets":
        return GoogleSheetsEntryStorage(GoogleSheetsClient())
    return InMemoryEntryStorage()


def create_app_components(
    backend: Optional[str] = None,
) -> tuple[TrackerService, AuditLogger]:
    """
    Factory function to create all application components.

    Falls back to in-memory storage if the configured backend
    cannot be initialized.

    Returns:
        (tracker_service, audit_logger)
    """
    audit_logger = AuditLogger()

    try:
        storage = create_storage(backend)
    except Exception as e:
        # Storage not configured - continue without persistence
        audit_logger.log_error(
            error_type="storage_unavailable",
            error_message=str(e),
        )
        storage = InMemoryEntryStorage()

    service = TrackerService(
        storage=storage,
        audit_logger=audit_logger,
    )
    return service, audit_logger
