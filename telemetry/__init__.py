"""
Telemetry module for structured logging.

This module provides:
- JSONFormatter for structured JSON log output
- TelemetryService for logging setup and auth event records
"""

from telemetry.service import (
    JSONFormatter,
    TelemetryService,
    initialize_telemetry,
    log_auth_event,
)

__all__ = [
    "JSONFormatter",
    "TelemetryService",
    "initialize_telemetry",
    "log_auth_event",
]
