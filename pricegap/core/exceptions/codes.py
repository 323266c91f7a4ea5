"""Standardized error codes."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes carried by every :class:`PriceGapError`."""

    GENERAL_ERROR = "GENERAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    PROVIDER_ERROR = "PROVIDER_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    NETWORK_ERROR = "NETWORK_ERROR"

    STORAGE_ERROR = "STORAGE_ERROR"

    BACKFILL_ERROR = "BACKFILL_ERROR"
    INVALID_TRANSITION = "INVALID_TRANSITION"


__all__ = ["ErrorCode"]
