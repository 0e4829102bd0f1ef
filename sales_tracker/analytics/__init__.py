"""
Analytics Engine Package

Sign normalization, aggregation, date filtering, sort resolution and
CSV rendering over snapshots of financial entries.
"""

from sales_tracker.analytics.errors import (
    AnalyticsError,
    ClientError,
    InvalidDateRangeError,
    InvalidSortFieldError,
    NoDataError,
    SerializationError,
)
from sales_tracker.analytics.aggregator import (
    aggregate,
    annotate,
    percentile,
    signed_value,
)
from sales_tracker.analytics.filters import (
    apply_range,
    filter_by_range,
    parse_date_range,
)
from sales_tracker.analytics.sorting import (
    ALLOWED_SORT_FIELDS,
    SortDirective,
    resolve_sort,
    sort_entries,
)
from sales_tracker.analytics.csv_export import (
    AGGREGATED_COLUMNS,
    PLAIN_COLUMNS,
    CsvSchema,
    write_csv,
)
from sales_tracker.analytics.engine import (
    get_aggregated,
    get_sorted_listing,
    get_statistics,
    render_csv,
)

__all__ = [
    # Errors
    "AnalyticsError",
    "ClientError",
    "InvalidDateRangeError",
    "InvalidSortFieldError",
    "NoDataError",
    "SerializationError",
    # Aggregation
    "aggregate",
    "annotate",
    "percentile",
    "signed_value",
    # Filtering
    "apply_range",
    "filter_by_range",
    "parse_date_range",
    # Sorting
    "ALLOWED_SORT_FIELDS",
    "SortDirective",
    "resolve_sort",
    "sort_entries",
    # Export
    "AGGREGATED_COLUMNS",
    "PLAIN_COLUMNS",
    "CsvSchema",
    "render_csv",
    "write_csv",
    # Engine boundary
    "get_aggregated",
    "get_sorted_listing",
    "get_statistics",
]
