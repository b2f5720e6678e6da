"""
Telemetry service for structured logging.

This module provides structured JSON logging with request correlation and
a helper for auth outcome events (login success, authorizer deny reasons),
so operators can tell deny causes apart even though clients cannot.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Optional, Dict

from middleware.request_id import request_id_var


class JSONFormatter(logging.Formatter):
    """
    Log formatter that outputs logs in JSON format.

    Each log entry contains:
    - timestamp: ISO 8601 formatted UTC timestamp
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - message: The log message
    - logger: Name of the logger that produced the entry
    - request_id: Correlation ID for request tracing

    Additional fields can be included via the 'extra_data' attribute
    on the log record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as a JSON string.

        Args:
            record: The log record to format

        Returns:
            JSON-formatted string containing the log entry
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "request_id": request_id_var.get(""),
        }

        if record.module:
            log_data["module"] = record.module
        if record.funcName and record.funcName != "<module>":
            log_data["function"] = record.funcName
        if record.lineno:
            log_data["line"] = record.lineno

        if hasattr(record, "extra_data") and record.extra_data:
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_trace"] = record.stack_info

        return json.dumps(log_data, default=str)


class TelemetryService:
    """
    Centralized logging setup for the gateway.

    Configures the root logger with JSONFormatter at the level from
    settings, and records auth events with a uniform shape.
    """

    def __init__(self, settings: Optional[Any] = None):
        """
        Initialize the telemetry service.

        Args:
            settings: Application settings containing log_level
        """
        self.settings = settings
        self._logger = None
        self._setup_logging()

    def _setup_logging(self) -> None:
        """Install a stdout handler with JSONFormatter on the root logger."""
        log_level_str = "INFO"
        if self.settings and hasattr(self.settings, "log_level"):
            log_level_str = self.settings.log_level

        log_level = getattr(logging, log_level_str.upper(), logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        # Remove existing handlers to avoid duplicate logs
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setLevel(log_level)
        stdout_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(stdout_handler)

        # boto3 is chatty at DEBUG and may log request payloads
        for noisy in ("botocore", "boto3", "urllib3"):
            logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))

        self._logger = logging.getLogger("telemetry")
        self._logger.info("Telemetry service initialized", extra={
            "extra_data": {"log_level": log_level_str}
        })

    def log_auth_event(
        self,
        event: str,
        outcome: str,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log an authentication or authorization outcome.

        Args:
            event: What happened (e.g. "login", "authorize")
            outcome: "accept", "deny", "success" or "failure"
            reason: Machine-readable cause for denies and failures
            details: Additional context; must not contain cookie values or secrets
        """
        _write_auth_event(self._logger, event, outcome, reason, details)


def _write_auth_event(
    logger: logging.Logger,
    event: str,
    outcome: str,
    reason: Optional[str],
    details: Optional[Dict[str, Any]]
) -> None:
    event_data: Dict[str, Any] = {"auth_event": event, "outcome": outcome}
    if reason:
        event_data["reason"] = reason
    if details:
        event_data["details"] = details

    level = logging.INFO if outcome in ("accept", "success") else logging.WARNING
    logger.log(level, f"Auth: {event} {outcome}", extra={"extra_data": event_data})


_telemetry_service: Optional[TelemetryService] = None


def initialize_telemetry(settings: Optional[Any] = None) -> TelemetryService:
    """
    Initialize the global telemetry service.

    Args:
        settings: Application settings for configuration

    Returns:
        The initialized telemetry service
    """
    global _telemetry_service
    _telemetry_service = TelemetryService(settings)
    return _telemetry_service


def log_auth_event(
    event: str,
    outcome: str,
    reason: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """
    Record an auth event through the global service, or the module logger
    when telemetry has not been initialized (e.g. in unit tests).
    """
    if _telemetry_service is not None:
        _telemetry_service.log_auth_event(event, outcome, reason, details)
        return

    _write_auth_event(logging.getLogger("telemetry"), event, outcome, reason, details)
