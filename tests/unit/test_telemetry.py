"""
Unit tests for the telemetry service and JSON log formatting.
"""

import json
import logging

import pytest

from middleware.request_id import request_id_var
import telemetry.service as telemetry_service
from telemetry.service import JSONFormatter, TelemetryService, log_auth_event


def make_record(message="hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="session.kv_store",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_base_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["logger"] == "session.kv_store"
        assert data["timestamp"].endswith("Z")
        assert data["request_id"] == ""

    def test_includes_request_id_from_context(self):
        token = request_id_var.set("req-42")
        try:
            data = json.loads(JSONFormatter().format(make_record()))
        finally:
            request_id_var.reset(token)

        assert data["request_id"] == "req-42"

    def test_merges_extra_data(self):
        record = make_record(extra_data={"auth_event": "authorize", "outcome": "deny"})

        data = json.loads(JSONFormatter().format(record))

        assert data["auth_event"] == "authorize"
        assert data["outcome"] == "deny"

    def test_non_serializable_values_are_stringified(self):
        record = make_record(extra_data={"value": object()})
        data = json.loads(JSONFormatter().format(record))
        assert data["value"].startswith("<object object")


class _Settings:
    log_level = "WARNING"


class TestTelemetryService:

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_configures_root_logger(self):
        TelemetryService(_Settings())
        root = logging.getLogger()

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_quiets_boto(self):
        TelemetryService(_Settings())
        assert logging.getLogger("botocore").level >= logging.WARNING

    def test_log_auth_event_levels(self, caplog):
        service = TelemetryService(_Settings())
        logging.getLogger().addHandler(caplog.handler)

        service.log_auth_event("authorize", "deny", reason="expired")
        service.log_auth_event("login", "success")

        records = [r for r in caplog.records if r.name == "telemetry"]
        assert [r.levelno for r in records] == [logging.WARNING]
        assert records[0].extra_data == {
            "auth_event": "authorize", "outcome": "deny", "reason": "expired"
        }


class TestLogAuthEventWithoutService:

    @pytest.fixture(autouse=True)
    def no_service(self, monkeypatch):
        monkeypatch.setattr(telemetry_service, "_telemetry_service", None)

    def test_levels_match_service(self, caplog):
        with caplog.at_level(logging.INFO, logger="telemetry"):
            log_auth_event("authorize", "deny", reason="no_cookie")
            log_auth_event("login", "failure", reason="AUTH_ERROR")
            log_auth_event("authorize", "accept")

        levels = [r.levelno for r in caplog.records if r.name == "telemetry"]
        assert levels == [logging.WARNING, logging.WARNING, logging.INFO]

    def test_details_are_attached(self, caplog):
        with caplog.at_level(logging.INFO, logger="telemetry"):
            log_auth_event("authorize", "deny", reason="load_error", details={"message": "RuntimeError"})

        assert caplog.records[-1].extra_data == {
            "auth_event": "authorize",
            "outcome": "deny",
            "reason": "load_error",
            "details": {"message": "RuntimeError"},
        }
