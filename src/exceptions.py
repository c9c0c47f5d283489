# src/exceptions.py

"""Custom exceptions for the price monitor.

Collaborators raise these at their seams so the run orchestrator can
tell fatal failures apart from the ones it only reports.
"""


class PriceMonitorError(Exception):
    """Base exception for all price monitor errors."""


class ConfigError(PriceMonitorError):
    """Raised when an environment setting cannot be parsed."""


class FetchError(PriceMonitorError):
    """Raised when the upstream price source is unreachable or malformed."""


class PersistenceError(PriceMonitorError):
    """Raised when a stored record cannot be read or safely replaced."""


class AggregationError(PriceMonitorError):
    """Raised for degenerate trend input (empty series, zero first price)."""


class NotificationError(PriceMonitorError):
    """Raised when a notification could not be delivered."""
