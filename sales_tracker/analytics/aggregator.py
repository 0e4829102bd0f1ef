"""
Aggregator

Reduces a set of entries into whole-set statistics over signed
contributions: income counts as +amount, expense as -amount.

PERCENTILE DEFINITION: linear interpolation between order statistics.
For sorted values v[0..n-1] and 0 < p <= 1, the rank is r = p * (n - 1)
and the result is v[lo] + (r - lo) * (v[hi] - v[lo]) with lo = floor(r),
hi = ceil(r). This matches PostgreSQL's percentile_cont. The median is
the p = 0.5 case of the same rule.
"""

import math
from collections.abc import Iterable, Sequence

from sales_tracker.analytics.errors import NoDataError
from sales_tracker.models.entry import (
    AggregatedEntry,
    AggregateStats,
    EntryType,
    FinancialEntry,
)

MEDIAN = 0.5
PERCENTILE_90 = 0.9


def signed_value(entry: FinancialEntry) -> int:
    """Contribution of an entry to the ledger: negative for expenses."""
    if entry.type is EntryType.EXPENSE:
        return -entry.amount
    return entry.amount


def percentile(values: Sequence[float], p: float) -> float:
    """
    Percentile of already-sorted values by linear interpolation.

    Raises:
        NoDataError: If values is empty
        ValueError: If p is outside (0, 1]
    """
    if not 0 < p <= 1:
        raise ValueError(f"Percentile must be in (0, 1], got {p}")
    if not values:
        raise NoDataError("Percentile of an empty set is undefined")

    rank = p * (len(values) - 1)
    lo = math.floor(rank)
    hi = math.ceil(rank)
    if lo == hi:
        return float(values[lo])
    return values[lo] + (rank - lo) * (values[hi] - values[lo])


def aggregate(entries: Iterable[FinancialEntry]) -> AggregateStats:
    """
    Compute sum, average, count, median and 90th percentile.

    Raises:
        NoDataError: If there are no entries
    """
    values = sorted(signed_value(entry) for entry in entries)
    if not values:
        raise NoDataError()

    total = sum(values)
    count = len(values)
    return AggregateStats(
        sum=total,
        average=total / count,
        count=count,
        median=percentile(values, MEDIAN),
        percentile_90=percentile(values, PERCENTILE_90),
    )


def annotate(entries: Sequence[FinancialEntry]) -> list[AggregatedEntry]:
    """
    Attach the statistics of the whole set to every entry.

    All rows share one AggregateStats value. An empty input has nothing
    to annotate and yields an empty list.
    """
    if not entries:
        return []
    stats = aggregate(entries)
    return [AggregatedEntry(entry=entry, stats=stats) for entry in entries]
