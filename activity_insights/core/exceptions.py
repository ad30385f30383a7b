"""
Custom exceptions for the activity insight engine.

An empty event list is never an error; these cover the cases where the
computation cannot run or its inputs cannot be trusted.
"""


class InsightError(Exception):
    """Base exception for insight computation failures."""
    pass


class SourceFetchError(InsightError):
    """Raised when the event source cannot be read (network, auth, 5xx, bad payload)."""
    pass


class DataValidationError(InsightError):
    """Raised when caller-supplied data fails validation."""
    pass


class ConfigurationError(InsightError):
    """Raised when configuration is invalid or missing."""
    pass
