"""
Sort Resolver

Turns caller-supplied field names into a SortDirective: an ordered tuple
of SortField values, first field being the primary key. All keys sort
ascending.

Duplicate names are accepted and collapsed; only the first occurrence
of a field affects ordering.
"""

from collections.abc import Iterable
from typing import Any

from sales_tracker.analytics.errors import InvalidSortFieldError
from sales_tracker.models.entry import FinancialEntry, SortField

SortDirective = tuple[SortField, ...]

ALLOWED_SORT_FIELDS = frozenset(field.value for field in SortField)


def resolve_sort(requested: Iterable[str]) -> SortDirective:
    """
    Validate requested field names against the whitelist.

    Raises:
        InvalidSortFieldError: On the first name outside the whitelist
    """
    resolved: list[SortField] = []
    for name in requested:
        if name not in ALLOWED_SORT_FIELDS:
            raise InvalidSortFieldError(name)
        field = SortField(name)
        if field not in resolved:
            resolved.append(field)
    return tuple(resolved)


def _sort_key(entry: FinancialEntry, field: SortField) -> Any:
    value = getattr(entry, field.value)
    if field is SortField.TYPE:
        return value.value
    return value


def sort_entries(
    entries: Iterable[FinancialEntry],
    directive: SortDirective,
) -> list[FinancialEntry]:
    """
    Order entries by a resolved directive.

    An empty directive keeps the incoming order. The sort is stable and
    the input is left untouched.
    """
    if not directive:
        return list(entries)
    return sorted(
        entries,
        key=lambda entry: tuple(_sort_key(entry, field) for field in directive),
    )
