"""Exceptions raised by the analytics engine."""


class AnalyticsError(Exception):
    """Base exception for analytics operations."""
    pass


class ClientError(AnalyticsError):
    """The request itself is invalid and should be reported to the caller."""
    pass


class InvalidSortFieldError(ClientError):
    """A requested sort key is not in the allowed set."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Invalid field name for sorting: {field!r}")


class InvalidDateRangeError(ClientError):
    """A date bound is malformed or the range is inverted."""
    pass


class NoDataError(AnalyticsError):
    """Statistics were requested over an empty set of entries."""

    def __init__(self, message: str = "No entries to aggregate"):
        super().__init__(message)


class SerializationError(AnalyticsError):
    """Tabular output could not be produced or written."""
    pass
