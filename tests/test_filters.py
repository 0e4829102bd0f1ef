"""Tests for the inclusive date-range filter and bound parsing."""

import pytest
from datetime import date

from sales_tracker.analytics import (
    InvalidDateRangeError,
    apply_range,
    filter_by_range,
    parse_date_range,
)
from sales_tracker.models.entry import DateRange
from tests.conftest import make_entry


@pytest.fixture
def january():
    return [
        make_entry(1, entry_date=date(2022, 12, 31)),
        make_entry(2, entry_date=date(2023, 1, 1)),
        make_entry(3, entry_date=date(2023, 1, 15)),
        make_entry(4, entry_date=date(2023, 1, 31)),
        make_entry(5, entry_date=date(2023, 2, 1)),
    ]


def ids(entries):
    return [entry.id for entry in entries]


class TestFilterByRange:
    """Tests for filter_by_range."""

    def test_bounds_are_inclusive(self, january):
        selected = filter_by_range(january, date(2023, 1, 1), date(2023, 1, 31))
        assert ids(selected) == [2, 3, 4]

    def test_single_day(self, january):
        selected = filter_by_range(january, date(2023, 1, 15), date(2023, 1, 15))
        assert ids(selected) == [3]

    def test_open_start(self, january):
        assert ids(filter_by_range(january, date_to=date(2023, 1, 1))) == [1, 2]

    def test_open_end(self, january):
        assert ids(filter_by_range(january, date_from=date(2023, 1, 31))) == [4, 5]

    def test_no_bounds_keeps_everything(self, january):
        assert ids(filter_by_range(january)) == [1, 2, 3, 4, 5]

    def test_empty_window(self, january):
        assert filter_by_range(january, date(2024, 1, 1), date(2024, 12, 31)) == []

    def test_apply_range_none(self, january):
        selected = apply_range(january, None)
        assert selected == january
        assert selected is not january

    def test_apply_range_model(self, january):
        window = DateRange(date_from=date(2023, 1, 2), date_to=date(2023, 1, 31))
        assert ids(apply_range(january, window)) == [3, 4]


class TestParseDateRange:
    """Tests for request bound parsing."""

    def test_both_bounds(self):
        window = parse_date_range("2023-01-01", "2023-01-31")
        assert window.date_from == date(2023, 1, 1)
        assert window.date_to == date(2023, 1, 31)

    def test_missing_bounds(self):
        assert parse_date_range().is_unbounded

    def test_blank_bounds_are_absent(self):
        window = parse_date_range("", "  ")
        assert window.date_from is None
        assert window.date_to is None

    def test_equal_bounds(self):
        window = parse_date_range("2023-05-01", "2023-05-01")
        assert window.date_from == window.date_to

    @pytest.mark.parametrize("value", ["2023-1-5", "01/05/2023", "2023-02-30", "yesterday"])
    def test_malformed_from(self, value):
        with pytest.raises(InvalidDateRangeError, match="'from'"):
            parse_date_range(value, None)

    def test_malformed_to(self):
        with pytest.raises(InvalidDateRangeError, match="'to'"):
            parse_date_range(None, "2023-13-01")

    def test_inverted_range(self):
        with pytest.raises(InvalidDateRangeError, match="after"):
            parse_date_range("2023-02-01", "2023-01-31")
