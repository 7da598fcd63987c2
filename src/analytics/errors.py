"""Analytics error taxonomy.

Empty results are not errors: callers get an empty list or a ``None``
trend summary instead.
"""

from datetime import date


class AnalyticsError(Exception):
    """Base class for analytics engine errors."""


class InvalidFilterRange(AnalyticsError, ValueError):
    """Raised at compile time when date_from is after date_to."""

    def __init__(self, date_from: date, date_to: date):
        self.date_from = date_from
        self.date_to = date_to
        super().__init__(
            f"Invalid date range: date_from {date_from.isoformat()} is after date_to {date_to.isoformat()}"
        )


class DataUnavailable(AnalyticsError):
    """Raised when the record store could not return rows."""

    DEFAULT_MESSAGE = "Failed to fetch analytics data"

    def __init__(self, message: str = DEFAULT_MESSAGE):
        self.message = message
        super().__init__(message)
