"""Tests for the request-handling service over in-memory storage."""

import asyncio
import csv
import io
from datetime import date

import pytest

from sales_tracker.analytics import (
    CsvSchema,
    InvalidDateRangeError,
    InvalidSortFieldError,
    NoDataError,
    SerializationError,
)
from sales_tracker.audit import AuditLogger
from sales_tracker.config import AppSettings
from sales_tracker.models.audit import AuditEventType, AuditSeverity
from sales_tracker.models.entry import EntryType
from sales_tracker.orchestrator import TrackerService, create_app_components
from sales_tracker.services.storage import (
    InMemoryEntryStorage,
    NotFoundError,
    StorageConnectionError,
)
from sales_tracker.validation import EntryValidationError, EntryValidator
from tests.conftest import make_entry


def run(coro):
    return asyncio.run(coro)


class RecordingAuditLogger(AuditLogger):
    """Keeps emitted events for inspection."""

    def __init__(self):
        super().__init__()
        self.events = []

    def log(self, event):
        self.events.append(event)

    @property
    def event_types(self):
        return [event.event_type for event in self.events]


class UnavailableStorage(InMemoryEntryStorage):
    async def list_entries(self, sort=None, date_range=None):
        raise StorageConnectionError("backend offline")


@pytest.fixture
def audit():
    return RecordingAuditLogger()


@pytest.fixture
def service(audit):
    storage = InMemoryEntryStorage([
        make_entry(1, EntryType.INCOME, 100, date(2023, 1, 1), "salary"),
        make_entry(2, EntryType.EXPENSE, 50, date(2023, 1, 2), "food"),
        make_entry(3, EntryType.EXPENSE, 20, date(2023, 3, 1), "travel"),
    ])
    validator = EntryValidator(AppSettings(_env_file=None))
    return TrackerService(storage, validator=validator, audit_logger=audit)


def parse(payload: bytes) -> list[list[str]]:
    return list(csv.reader(io.StringIO(payload.decode("utf-8"))))


class TestLedgerChanges:
    """Create, update and delete through the service."""

    def test_create_entry(self, service, audit):
        entry = run(service.create_entry({
            "type": "expense", "amount": 30, "date": "2023-04-01", "category": "books",
        }))
        assert entry.id == 4
        assert entry.type is EntryType.EXPENSE
        assert audit.event_types == [AuditEventType.ENTRY_CREATED]
        assert audit.events[0].entity_id == 4

    def test_create_rejects_invalid_payload(self, service, audit):
        with pytest.raises(EntryValidationError) as exc_info:
            run(service.create_entry({"type": "gift", "amount": -5, "date": "2023-04-01"}))
        fields = {issue.field for issue in exc_info.value.result.issues}
        assert {"type", "amount", "category"} <= fields
        assert audit.event_types == [AuditEventType.REQUEST_REJECTED]
        assert len(run(service.list_entries())) == 3

    def test_update_entry(self, service, audit):
        entry = run(service.update_entry(2, {"amount": 75}))
        assert entry.amount == 75
        assert entry.category == "food"
        assert audit.events[0].event_type == AuditEventType.ENTRY_UPDATED
        assert audit.events[0].details["changed_fields"] == ["amount"]

    def test_update_empty_payload(self, service):
        with pytest.raises(EntryValidationError):
            run(service.update_entry(2, {}))

    def test_update_missing_entry(self, service, audit):
        with pytest.raises(NotFoundError):
            run(service.update_entry(99, {"amount": 1}))
        assert audit.events[0].severity == AuditSeverity.WARNING
        assert audit.events[0].error_code == "NotFoundError"

    def test_delete_entry(self, service, audit):
        run(service.delete_entry(3))
        assert [entry.id for entry in run(service.list_entries())] == [1, 2]
        assert audit.event_types[0] == AuditEventType.ENTRY_DELETED

    def test_delete_missing_entry(self, service):
        with pytest.raises(NotFoundError):
            run(service.delete_entry(42))


class TestListings:
    """Sorted listings and the plain export."""

    def test_default_order(self, service):
        assert [entry.id for entry in run(service.list_entries())] == [1, 2, 3]

    def test_sorted_listing(self, service, audit):
        entries = run(service.list_entries(["amount"]))
        assert [entry.id for entry in entries] == [3, 2, 1]
        assert audit.events[-1].event_type == AuditEventType.LISTING_SERVED
        assert audit.events[-1].details["result_count"] == 3

    def test_invalid_sort_field(self, service, audit):
        with pytest.raises(InvalidSortFieldError):
            run(service.list_entries(["amount", "createdAt"]))
        assert audit.event_types == [AuditEventType.REQUEST_REJECTED]
        assert audit.events[0].details == {"sort_by": ["amount", "createdAt"]}

    def test_listing_export(self, service, audit):
        rows = parse(run(service.export_listing_csv(["category"])))
        assert rows[0] == ["id", "type", "amount", "date", "category", "created_at"]
        assert [row[4] for row in rows[1:]] == ["food", "salary", "travel"]
        assert audit.events[-1].event_type == AuditEventType.EXPORT_RENDERED
        assert audit.events[-1].details["schema"] == "plain"

    def test_storage_failure(self, audit):
        service = TrackerService(UnavailableStorage(), audit_logger=audit)
        with pytest.raises(StorageConnectionError):
            run(service.list_entries())
        assert audit.event_types == [AuditEventType.STORAGE_ERROR]


class TestAnalytics:
    """Range statistics and the aggregated export."""

    def test_statistics_over_range(self, service, audit):
        stats = run(service.get_statistics("2023-01-01", "2023-01-31"))
        assert stats.sum == 50
        assert stats.count == 2
        assert stats.median == pytest.approx(25.0)
        assert stats.percentile_90 == pytest.approx(85.0)
        assert audit.events[-1].event_type == AuditEventType.STATISTICS_SERVED

    def test_statistics_open_range(self, service):
        stats = run(service.get_statistics())
        assert stats.sum == 30
        assert stats.count == 3

    def test_statistics_empty_range(self, service, audit):
        with pytest.raises(NoDataError):
            run(service.get_statistics("2024-01-01", "2024-12-31"))
        assert audit.event_types == [AuditEventType.REQUEST_REJECTED]

    def test_invalid_range(self, service, audit):
        with pytest.raises(InvalidDateRangeError):
            run(service.get_statistics("2023-02-01", "2023-01-01"))
        assert audit.events[0].details == {"date_from": "2023-02-01", "date_to": "2023-01-01"}

    def test_malformed_date(self, service):
        with pytest.raises(InvalidDateRangeError):
            run(service.get_aggregated("01.01.2023", None))

    def test_aggregated_rows(self, service):
        rows = run(service.get_aggregated(None, "2023-01-31"))
        assert [row.entry.id for row in rows] == [1, 2]
        assert all(row.stats.sum == 50 for row in rows)

    def test_aggregated_empty_range(self, service):
        assert run(service.get_aggregated("2030-01-01", None)) == []

    def test_aggregated_export(self, service, audit):
        rows = parse(run(service.export_aggregated_csv("2023-01-01", "2023-01-31")))
        assert rows[0][6:] == ["sum", "average", "count", "median", "percentile_90"]
        assert [row[6:] for row in rows[1:]] == [["50", "25.00", "2", "25.00", "85.00"]] * 2
        assert audit.events[-1].details["schema"] == "aggregated"
        assert audit.events[-1].details["row_count"] == 2

    def test_aggregated_export_empty_range(self, service):
        rows = parse(run(service.export_aggregated_csv("2030-01-01", "2030-01-31")))
        assert len(rows) == 1


class CountingStorage(InMemoryEntryStorage):
    def __init__(self, entries):
        super().__init__(entries)
        self.reads = 0

    async def list_entries(self, sort=None, date_range=None):
        self.reads += 1
        return await super().list_entries(sort=sort, date_range=date_range)


class TestRenderExport:
    """Rendering rows that were already fetched."""

    def test_page_flow_reads_storage_once(self, audit):
        storage = CountingStorage([
            make_entry(1, EntryType.INCOME, 100, date(2023, 1, 1)),
            make_entry(2, EntryType.EXPENSE, 50, date(2023, 1, 2)),
        ])
        service = TrackerService(storage, audit_logger=audit)

        rows = run(service.get_aggregated("2023-01-01", "2023-01-31"))
        payload = service.render_export(rows, CsvSchema.AGGREGATED)

        assert storage.reads == 1
        assert rows[0].stats.median == pytest.approx(25.0)
        assert payload == run(service.export_aggregated_csv("2023-01-01", "2023-01-31"))
        assert audit.events[1].event_type == AuditEventType.EXPORT_RENDERED

    def test_plain_listing(self, service):
        entries = run(service.list_entries(["amount"]))
        rows = parse(service.render_export(entries, "plain"))
        assert [row[0] for row in rows[1:]] == ["3", "2", "1"]

    def test_schema_mismatch(self, service, audit):
        entries = run(service.list_entries())
        with pytest.raises(SerializationError):
            service.render_export(entries, CsvSchema.AGGREGATED)
        assert audit.events[-1].event_type == AuditEventType.SYSTEM_ERROR


class TestAppComponents:
    """Tests for the component factory."""

    def test_memory_backend(self):
        service, audit_logger = create_app_components("memory")
        assert isinstance(service, TrackerService)
        assert isinstance(audit_logger, AuditLogger)
        assert run(service.list_entries()) == []
