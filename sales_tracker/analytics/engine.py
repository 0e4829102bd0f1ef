"""
Analytics Engine Boundary

The storage-free entry points: each takes the full set of entries and
the raw request parameters, and does parsing, filtering, aggregation or
ordering in one call. Nothing here touches storage, logs, or keeps state
between calls, so concurrent requests need no coordination.

TrackerService does not go through these functions. It resolves the
same parameters first and pushes the range and sort down to storage,
then runs the aggregator and serializer on the snapshot it gets back.
Use these when the entries are already in hand.

Errors are raised as AnalyticsError subclasses for the caller to
present and log.
"""

from collections.abc import Iterable, Sequence
from typing import Optional

from sales_tracker.analytics.aggregator import aggregate, annotate
from sales_tracker.analytics.csv_export import CsvSchema, Row
from sales_tracker.analytics.csv_export import render_csv as _render_csv
from sales_tracker.analytics.filters import filter_by_range, parse_date_range
from sales_tracker.analytics.sorting import resolve_sort, sort_entries
from sales_tracker.models.entry import (
    AggregatedEntry,
    AggregateStats,
    FinancialEntry,
)


def get_statistics(
    entries: Iterable[FinancialEntry],
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> AggregateStats:
    """
    Statistics over the entries inside an optional date range.

    Raises:
        InvalidDateRangeError: If the bounds are malformed or inverted
        NoDataError: If no entry falls inside the range
    """
    date_range = parse_date_range(date_from, date_to)
    selected = filter_by_range(entries, date_range.date_from, date_range.date_to)
    return aggregate(selected)


def get_aggregated(
    entries: Iterable[FinancialEntry],
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> list[AggregatedEntry]:
    """
    Entries inside an optional date range, each annotated with the
    statistics of the whole selection. An empty selection yields [].

    Raises:
        InvalidDateRangeError: If the bounds are malformed or inverted
    """
    date_range = parse_date_range(date_from, date_to)
    selected = filter_by_range(entries, date_range.date_from, date_range.date_to)
    return annotate(selected)


def get_sorted_listing(
    entries: Iterable[FinancialEntry],
    sort_fields: Sequence[str],
) -> list[FinancialEntry]:
    """
    Raises:
        InvalidSortFieldError: If any field is outside the whitelist
    """
    return sort_entries(entries, resolve_sort(sort_fields))


def render_csv(rows: Sequence[Row], schema: CsvSchema) -> bytes:
    """
    Raises:
        SerializationError: If the document cannot be rendered
    """
    return _render_csv(rows, schema)
