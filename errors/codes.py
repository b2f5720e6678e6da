"""
Error code catalog for the session gateway.

This module defines all error codes used throughout the application,
covering configuration problems, session store failures, OAuth provider
failures, rejected identities and malformed client input.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """
    Enumeration of all error codes used in the application.

    Each error code maps to a specific HTTP status code and error category:
    - Client errors (4xx): malformed input, unknown routes, rejected identities
    - Dependency errors (5xx): session store and OAuth provider failures
    - Internal errors (5xx): missing configuration, unexpected failures
    """

    # Client errors (4xx)
    MALFORMED_INPUT = "MALFORMED_INPUT"
    """Cookie absent, unparseable or unknown (HTTP 400)"""

    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    """Unknown provider or flow action (HTTP 404)"""

    AUTH_ERROR = "AUTH_ERROR"
    """Identity rejected: missing code or state, scope mismatch, no verified email (HTTP 401)"""

    # Dependency errors (5xx)
    PROVIDER_ERROR = "PROVIDER_ERROR"
    """Token exchange or profile fetch failed (HTTP 502)"""

    STORE_ERROR = "STORE_ERROR"
    """Key-value operation or payload decoding failed (HTTP 503)"""

    # Internal errors (5xx)
    CONFIG_ERROR = "CONFIG_ERROR"
    """Required configuration or secret missing (HTTP 500)"""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """Unexpected server error (HTTP 500)"""


# Mapping of error codes to their default HTTP status codes
ERROR_CODE_STATUS_MAP: dict[ErrorCode, int] = {
    ErrorCode.MALFORMED_INPUT: 400,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.AUTH_ERROR: 401,
    ErrorCode.PROVIDER_ERROR: 502,
    ErrorCode.STORE_ERROR: 503,
    ErrorCode.CONFIG_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


def get_default_status_code(error_code: ErrorCode) -> int:
    """
    Get the default HTTP status code for an error code.

    Args:
        error_code: The error code to look up

    Returns:
        The default HTTP status code for the error code
    """
    return ERROR_CODE_STATUS_MAP.get(error_code, 500)
