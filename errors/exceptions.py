"""
Exception classes for the session gateway.

AppException carries a standardized error code and HTTP status. Each error
kind of the login flow and session layer is a subclass with its own default
code, so callers can catch a specific kind (``except StoreError``) while the
FastAPI handlers render all of them the same way.
"""

from typing import Any, Optional

from errors.codes import ErrorCode, get_default_status_code


class AppException(Exception):
    """
    Base exception class for all application-specific errors.

    This exception provides structured error information including:
    - error_code: A standardized error code from the ErrorCode enum
    - message: A human-readable error message
    - status_code: The HTTP status code to return
    - details: Optional additional context

    Example:
        raise AppException(
            error_code=ErrorCode.RESOURCE_NOT_FOUND,
            message="Unknown provider",
            details={"provider": "gitlab"}
        )
    """

    default_error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        error_code: Optional[ErrorCode] = None,
        message: str = "",
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None
    ):
        """
        Initialize an AppException.

        Args:
            error_code: The error code (defaults to the class's default code)
            message: A human-readable error message
            status_code: The HTTP status code (defaults to the error code's default)
            details: Optional dictionary with additional error context
        """
        self.error_code = error_code or self.default_error_code
        self.message = message
        self.status_code = status_code or get_default_status_code(self.error_code)
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the exception to a dictionary for JSON serialization.

        Returns:
            Dictionary containing error_code, message, and details
        """
        result = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(error_code={self.error_code.value!r}, "
            f"message={self.message!r}, status_code={self.status_code}, "
            f"details={self.details!r})"
        )


class ConfigError(AppException):
    """Required configuration, secret or request header is missing."""

    default_error_code = ErrorCode.CONFIG_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, details=details)


class StoreError(AppException):
    """A key-value operation failed or a stored payload could not be decoded."""

    default_error_code = ErrorCode.STORE_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, details=details)


class ProviderError(AppException):
    """The OAuth provider could not be reached or returned an undecodable response."""

    default_error_code = ErrorCode.PROVIDER_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, details=details)


class AuthError(AppException):
    """
    Logical authorization failure.

    Raised for a missing authorization code, a token scope that differs
    from the requested one, or a profile without a primary verified email.
    Distinct from ProviderError: the dependency worked, the identity was
    rejected.
    """

    default_error_code = ErrorCode.AUTH_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, details=details)


class MalformedInput(AppException):
    """Cookie absent, unparseable or unknown. Absorbed into a deny, never escalated."""

    default_error_code = ErrorCode.MALFORMED_INPUT

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, details=details)


def resource_not_found(
    message: str,
    details: Optional[dict[str, Any]] = None
) -> AppException:
    """Create a resource not found exception."""
    return AppException(
        error_code=ErrorCode.RESOURCE_NOT_FOUND,
        message=message,
        details=details
    )
