"""
Core module: Configuration, logging, and exception handling.
"""

from .config import Config, config
from .exceptions import (
    ConfigurationError,
    DataValidationError,
    InsightError,
    SourceFetchError,
)

__all__ = [
    "Config",
    "config",
    "InsightError",
    "SourceFetchError",
    "DataValidationError",
    "ConfigurationError",
]
