"""
Error handling module for the session gateway.

This module provides structured error handling with:
- ErrorCode enum for standardized error codes
- AppException and its per-kind subclasses
- Error response model and FastAPI exception handlers
"""

from errors.codes import ErrorCode
from errors.exceptions import (
    AppException,
    AuthError,
    ConfigError,
    MalformedInput,
    ProviderError,
    StoreError,
)
from errors.handlers import (
    ErrorResponse,
    handle_app_exception,
    handle_unexpected_exception,
    handle_validation_exception,
    register_exception_handlers,
)

__all__ = [
    "ErrorCode",
    "AppException",
    "AuthError",
    "ConfigError",
    "MalformedInput",
    "ProviderError",
    "StoreError",
    "ErrorResponse",
    "handle_app_exception",
    "handle_unexpected_exception",
    "handle_validation_exception",
    "register_exception_handlers",
]
