"""
Custom exception classes for the filesystem watch bridge.

Every error knows the close reason ("problem") reported to the peer when it
terminates a session, so the session layer never has to map exception types
to wire codes by hand.
"""

from typing import Any

PROTOCOL_ERROR = "protocol-error"
INTERNAL_ERROR = "internal-error"


class BaseError(Exception):
    """
    Base exception class for all bridge errors.

    All custom exceptions in the system should inherit from this base class
    to enable consistent error handling, logging and close-reason reporting.
    """

    problem: str = INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize the bridge error.

        Args:
            message: Human-readable error description, forwarded to the peer
            error_code: Optional error code for programmatic handling
            context: Optional dictionary with error context information
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation including error code if present."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"problem='{self.problem}', "
            f"context={self.context})"
        )


class ConfigurationError(BaseError):
    """Raised when there are configuration or settings issues."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        expected_type: str | None = None,
        actual_value: Any | None = None,
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key
        if expected_type:
            context["expected_type"] = expected_type
        if actual_value is not None:
            context["actual_value"] = str(actual_value)

        super().__init__(message, error_code="CONFIG_ERROR", context=context)


class ProtocolError(BaseError):
    """Raised when a channel is opened with bad options or receives unexpected data."""

    problem = PROTOCOL_ERROR

    def __init__(
        self,
        message: str,
        option: str | None = None,
        payload: str | None = None,
    ):
        context = {}
        if option:
            context["option"] = option
        if payload:
            context["payload"] = payload

        super().__init__(message, error_code="PROTOCOL_ERROR", context=context)


class MonitoringError(BaseError):
    """Raised when a change-notification subscription cannot be established."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        operation: str | None = None,
        underlying_error: Exception | None = None,
    ):
        context = {}
        if path:
            context["path"] = path
        if operation:
            context["operation"] = operation

        super().__init__(
            message,
            error_code="MONITORING_ERROR",
            context=context,
            cause=underlying_error,
        )


class EnumerationError(BaseError):
    """Raised when a directory listing cannot be opened or read."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        entries_listed: int | None = None,
        underlying_error: Exception | None = None,
    ):
        context = {}
        if path:
            context["path"] = path
        if entries_listed is not None:
            context["entries_listed"] = entries_listed

        super().__init__(
            message,
            error_code="ENUMERATION_ERROR",
            context=context,
            cause=underlying_error,
        )


def describe_os_error(error: OSError) -> str:
    """Return the human-readable part of an OS error, without errno noise."""
    return error.strerror or str(error)
