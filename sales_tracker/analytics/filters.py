"""
Date-Range Filter

Narrows a set of entries to an inclusive date window. A missing bound
leaves that side of the window open.

Bounds arriving from a request are parsed by parse_date_range, which is
the only place a malformed or inverted range is rejected. The filter
itself assumes well-formed dates.
"""

from collections.abc import Iterable
from datetime import date, datetime
from typing import Optional

from pydantic import ValidationError

from sales_tracker.analytics.errors import InvalidDateRangeError
from sales_tracker.models.entry import DateRange, FinancialEntry


def filter_by_range(
    entries: Iterable[FinancialEntry],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[FinancialEntry]:
    """Keep entries with date_from <= entry.date <= date_to."""
    selected = []
    for entry in entries:
        if date_from and entry.date < date_from:
            continue
        if date_to and entry.date > date_to:
            continue
        selected.append(entry)
    return selected


def apply_range(
    entries: Iterable[FinancialEntry],
    date_range: Optional[DateRange],
) -> list[FinancialEntry]:
    """Filter by a DateRange; None means no constraint."""
    if date_range is None:
        return list(entries)
    return filter_by_range(entries, date_range.date_from, date_range.date_to)


def _parse_bound(value: Optional[str], name: str) -> Optional[date]:
    if value is None or not value.strip():
        return None
    text = value.strip()
    try:
        parsed = datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        parsed = None
    # strptime tolerates missing zero padding; only the canonical form is accepted
    if parsed is None or parsed.isoformat() != text:
        raise InvalidDateRangeError(
            f"Invalid date format for '{name}': {value!r}, must be YYYY-MM-DD"
        )
    return parsed


def parse_date_range(
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> DateRange:
    """
    Parse request bounds into a DateRange.

    Blank or missing bounds are treated as absent.

    Raises:
        InvalidDateRangeError: If a bound is not YYYY-MM-DD or from > to
    """
    start = _parse_bound(date_from, "from")
    end = _parse_bound(date_to, "to")
    try:
        return DateRange(date_from=start, date_to=end)
    except ValidationError:
        raise InvalidDateRangeError(
            f"Invalid date range: 'from' ({start}) is after 'to' ({end})"
        )
