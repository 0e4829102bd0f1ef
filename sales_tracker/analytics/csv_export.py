"""
Tabular Serializer

Renders result sets as UTF-8 comma-separated values with one header row.

Two fixed schemas:
- PLAIN: the entry columns only
- AGGREGATED: the entry columns followed by the broadcast statistics

The header rows are a public contract; consumers may depend on the
exact column names and order.

DESIGN DECISION: Output is rendered completely in memory before it is
returned or written. A failure part-way through produces an error and
no bytes, never a truncated file.
"""

import csv
import io
from collections.abc import Sequence
from enum import Enum
from typing import BinaryIO, Union

from sales_tracker.analytics.errors import SerializationError
from sales_tracker.models.entry import AggregatedEntry, FinancialEntry

ENCODING = "utf-8"

PLAIN_COLUMNS = [
    "id",
    "type",
    "amount",
    "date",
    "category",
    "created_at",
]

AGGREGATED_COLUMNS = PLAIN_COLUMNS + [
    "sum",
    "average",
    "count",
    "median",
    "percentile_90",
]

Row = Union[FinancialEntry, AggregatedEntry]


class CsvSchema(str, Enum):
    """Column layout of an export."""
    PLAIN = "plain"
    AGGREGATED = "aggregated"

    @property
    def columns(self) -> list[str]:
        if self is CsvSchema.AGGREGATED:
            return list(AGGREGATED_COLUMNS)
        return list(PLAIN_COLUMNS)


def _format_decimal(value: float) -> str:
    return f"{value:.2f}"


def _entry_cells(entry: FinancialEntry) -> list[str]:
    return [
        str(entry.id),
        entry.type.value,
        str(entry.amount),
        entry.date.isoformat(),
        entry.category,
        entry.created_at.isoformat(),
    ]


def _row_cells(row: Row, schema: CsvSchema) -> list[str]:
    if schema is CsvSchema.PLAIN:
        entry = row.entry if isinstance(row, AggregatedEntry) else row
        return _entry_cells(entry)

    if not isinstance(row, AggregatedEntry):
        raise SerializationError(
            f"Aggregated schema requires annotated rows, got entry {row.id} without statistics"
        )
    stats = row.stats
    return _entry_cells(row.entry) + [
        str(stats.sum),
        _format_decimal(stats.average),
        str(stats.count),
        _format_decimal(stats.median),
        _format_decimal(stats.percentile_90),
    ]


def render_csv(rows: Sequence[Row], schema: CsvSchema) -> bytes:
    """
    Render rows under the given schema.

    Returns:
        The complete CSV document as UTF-8 bytes

    Raises:
        SerializationError: If any row cannot be rendered
    """
    schema = CsvSchema(schema)
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    try:
        writer.writerow(schema.columns)
        for row in rows:
            writer.writerow(_row_cells(row, schema))
        return buffer.getvalue().encode(ENCODING)
    except SerializationError:
        raise
    except (csv.Error, UnicodeError) as e:
        raise SerializationError(f"Could not render {schema.value} CSV: {e}") from e


def write_csv(rows: Sequence[Row], schema: CsvSchema, stream: BinaryIO) -> int:
    """
    Render rows and write the finished document to a binary stream.

    Returns:
        Number of bytes written

    Raises:
        SerializationError: If rendering or writing fails
    """
    payload = render_csv(rows, schema)
    try:
        stream.write(payload)
        stream.flush()
    except (OSError, ValueError) as e:
        raise SerializationError(f"Could not write CSV output: {e}") from e
    return len(payload)
