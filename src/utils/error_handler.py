"""Error types for the monitoring core with user-friendly messages."""
from __future__ import annotations

import sys
from typing import Any, Optional

import structlog

logger = structlog.get_logger(__name__)


class SmsCoreError(Exception):
    """Base class for monitoring core errors with user-friendly messaging."""

    def __init__(self, error_type: str, message: str, details: str = "", is_retryable: bool = False):
        self.error_type = error_type
        self.message = message
        self.details = details
        self.is_retryable = is_retryable
        super().__init__(self.message)

    def get_user_message(self) -> str:
        """Return a user-friendly error message."""
        msg = f"\n{self.message}"
        if self.details:
            msg += f"\n   Details: {self.details}"
        if self.is_retryable:
            msg += "\n   Tip: This is a temporary issue. It will be retried on the next trigger."
        return msg


class InvalidRank(SmsCoreError):
    """Risk likelihood/severity input outside the 1-5 ordinal range."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(
            error_type="INVALID_RANK",
            message=f"Invalid {field}: {value!r}",
            details="Ranks must be whole numbers from 1 to 5",
            is_retryable=False,
        )


class InvalidThresholdOrder(SmsCoreError):
    """SPI thresholds are not ordered consistently with the target direction."""

    def __init__(self, direction: str, thresholds: tuple[float, ...]):
        self.direction = direction
        self.thresholds = thresholds
        expected = "ascending" if direction == "lower_is_better" else "descending"
        super().__init__(
            error_type="INVALID_THRESHOLD_ORDER",
            message="SPI thresholds are not consistently ordered",
            details=f"direction={direction} expects {expected} target/alert2/alert3/alert4, got {thresholds}",
            is_retryable=False,
        )


class MalformedDate(SmsCoreError):
    """A compliance fact carries a date that cannot be parsed."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            error_type="MALFORMED_DATE",
            message=f"Unparseable date: {value!r}",
            details="Expected an ISO-8601 date (YYYY-MM-DD) or datetime",
            is_retryable=False,
        )


class StoreUnavailable(SmsCoreError):
    """The record or alert store could not be reached."""

    def __init__(self, operation: str, reason: str = ""):
        self.operation = operation
        super().__init__(
            error_type="STORE_UNAVAILABLE",
            message=f"Store unavailable during {operation}",
            details=reason or "The store did not respond",
            is_retryable=True,
        )


class InvalidConfiguration(SmsCoreError):
    """A tenant or deployment configuration value is inconsistent."""

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        super().__init__(
            error_type="INVALID_CONFIGURATION",
            message=f"Invalid configuration for {setting}",
            details=reason,
            is_retryable=False,
        )


def exit_with_error(error: SmsCoreError, context: str = "") -> int:
    """Log error and exit gracefully with user-friendly message."""
    logger.error(
        "command_failed",
        error_type=error.error_type,
        message=error.message,
        details=error.details,
        context=context,
    )

    print(error.get_user_message(), file=sys.stderr)

    if error.is_retryable:
        print("\nNext steps:", file=sys.stderr)
        print("   1. Check that the snapshot/store is reachable", file=sys.stderr)
        print("   2. Run the same command again", file=sys.stderr)
    else:
        print("\nNext steps:", file=sys.stderr)
        print("   1. Correct the input values shown above", file=sys.stderr)
        print("   2. Run the same command again", file=sys.stderr)

    print("", file=sys.stderr)
    return 1


def describe_error(error: Optional[BaseException]) -> str:
    """Short single-line description used in scan reports."""
    if error is None:
        return ""
    if isinstance(error, SmsCoreError):
        return f"{error.error_type}: {error.message}"
    return f"{type(error).__name__}: {error}"
