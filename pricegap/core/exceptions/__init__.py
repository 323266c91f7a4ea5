"""Exception handling module."""

from pricegap.core.exceptions.base import (
    BackfillError,
    DataValidationError,
    InvalidDateRangeError,
    InvalidTransitionError,
    NetworkError,
    PriceGapError,
    ProviderError,
    RateLimitError,
    StorageError,
    format_error,
)
from pricegap.core.exceptions.codes import ErrorCode

__all__ = [
    "PriceGapError",
    "DataValidationError",
    "InvalidDateRangeError",
    "ProviderError",
    "RateLimitError",
    "NetworkError",
    "StorageError",
    "BackfillError",
    "InvalidTransitionError",
    "ErrorCode",
    "format_error",
]
