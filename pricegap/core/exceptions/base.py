"""pricegap core exception classes."""

from typing import Any

from pricegap.core.exceptions.codes import ErrorCode


class PriceGapError(Exception):
    """Base exception for pricegap."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GENERAL_ERROR.value,
        details: dict[str, Any] | None = None,
    ):
        """Initialise the exception.

        Args:
            message: Human readable message.
            error_code: Code from :class:`ErrorCode`.
            details: Extra structured context.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class DataValidationError(PriceGapError):
    """Invalid input handed to a pure classification or aggregation step."""

    def __init__(
        self,
        message: str,
        validation_errors: dict[str, Any] | None = None,
        details: dict[str, Any] | None = None,
        error_code: str = ErrorCode.VALIDATION_ERROR.value,
    ):
        super_details = details or {}
        if validation_errors:
            super_details["validation_errors"] = validation_errors
        super().__init__(message, error_code, super_details)
        self.validation_errors = validation_errors or {}


class InvalidDateRangeError(DataValidationError):
    """Raised when a date range is inverted or cannot be parsed."""

    def __init__(self, message: str, start: object = None, end: object = None):
        super().__init__(
            message,
            validation_errors={"start": str(start), "end": str(end)},
            error_code=ErrorCode.INVALID_DATE_RANGE.value,
        )
        self.start = start
        self.end = end


class ProviderError(PriceGapError):
    """Price provider failure."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        error_code: str = ErrorCode.PROVIDER_ERROR.value,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code, details)
        self.provider_name = provider_name


class RateLimitError(ProviderError):
    """The provider (or the local request budget) refused another call."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        retry_after: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if retry_after is not None:
            super_details["retry_after"] = retry_after
        super().__init__(message, provider_name, ErrorCode.RATE_LIMIT.value, super_details)
        self.retry_after = retry_after


class NetworkError(ProviderError):
    """Transport level failure talking to a provider."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if status_code is not None:
            super_details["status_code"] = status_code
        super().__init__(message, provider_name, ErrorCode.NETWORK_ERROR.value, super_details)
        self.status_code = status_code


class StorageError(PriceGapError):
    """Observation store failure."""

    def __init__(self, message: str, table: str | None = None, details: dict[str, Any] | None = None):
        super_details = details or {}
        if table:
            super_details["table"] = table
        super().__init__(message, ErrorCode.STORAGE_ERROR.value, super_details)


class BackfillError(PriceGapError):
    """Backfill orchestration misuse."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.BACKFILL_ERROR.value,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code, details)


class InvalidTransitionError(BackfillError):
    """A bulk progress row was asked to move to a state it cannot reach."""

    def __init__(self, symbol: str, current: str, target: str):
        super().__init__(
            f"{symbol}: cannot move from {current} to {target}",
            ErrorCode.INVALID_TRANSITION.value,
            {"symbol": symbol, "current": current, "target": target},
        )
        self.symbol = symbol
        self.current = current
        self.target = target


def format_error(error: BaseException) -> str:
    """Render an exception as ``CODE: message`` for user facing reports."""

    if isinstance(error, PriceGapError):
        return f"{error.error_code}: {error.message}"
    message = str(error) or type(error).__name__
    return f"{ErrorCode.GENERAL_ERROR.value}: {message}"
