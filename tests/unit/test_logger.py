"""
Unit tests for the structlog-based ErrorLogger and logging configuration.

Log events are captured with structlog.testing.capture_logs; loggers are
created inside the capture block so they pick up the capturing config.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs

from railbridge import InternalError, NotFoundError, StructuredError
from railbridge import logger as logger_module
from railbridge.config import BridgeSettings
from railbridge.logger import (
    REDACTED,
    ErrorLogger,
    configure_logging,
    get_error_logger,
    initialize_error_logger,
    redact_keys,
)


# ─────────────────────── log_error severity ───────────────────────


class TestLogErrorSeverity:
    def test_operational_error_logged_at_error(self):
        err = NotFoundError("User not found", metadata={"userId": "999"})
        with capture_logs() as logs:
            ErrorLogger().log_error(err, path="/users/999")

        assert len(logs) == 1
        entry = logs[0]
        assert entry["log_level"] == "error"
        assert entry["event"] == "operational_error"
        assert entry["error_name"] == "NotFoundError"
        assert entry["error_message"] == "User not found"
        assert entry["error_context"]["metadata"] == {"userId": "999"}
        assert entry["path"] == "/users/999"
        assert entry["exc_info"] is err

    def test_defect_logged_at_critical(self):
        with capture_logs() as logs:
            ErrorLogger().log_error(InternalError("invariant broken"))

        assert logs[0]["log_level"] == "critical"
        assert logs[0]["event"] == "programming_error"

    def test_unclassified_exception_is_a_defect(self):
        with capture_logs() as logs:
            ErrorLogger().log_error(RuntimeError("boom"))

        assert logs[0]["log_level"] == "critical"
        assert logs[0]["error_name"] == "RuntimeError"
        assert "error_context" not in logs[0]

    def test_explicit_recoverable_overrides_error(self):
        with capture_logs() as logs:
            ErrorLogger().log_error(NotFoundError("x"), recoverable=False)

        assert logs[0]["log_level"] == "critical"

    def test_cause_is_logged(self):
        err = StructuredError("Could not save", cause=OSError("disk gone"))
        with capture_logs() as logs:
            ErrorLogger().log_error(err)

        assert logs[0]["cause"] == {"name": "OSError", "message": "disk gone"}


class TestErrorLoggerPassthrough:
    def test_info_warning_debug(self):
        with capture_logs() as logs:
            log = ErrorLogger()
            log.info("order.created", order_id="7")
            log.warning("order.slow", elapsed_ms=900)
            log.debug("order.detail")

        assert [(e["event"], e["log_level"]) for e in logs] == [
            ("order.created", "info"),
            ("order.slow", "warning"),
            ("order.detail", "debug"),
        ]
        assert logs[0]["order_id"] == "7"

    def test_bindings_are_attached(self):
        with capture_logs() as logs:
            ErrorLogger(service="billing").child(request_id="r-1").info("invoice.created")

        assert logs[0]["service"] == "billing"
        assert logs[0]["request_id"] == "r-1"

    def test_wraps_injected_logger(self):
        inner = MagicMock()
        ErrorLogger(inner).log_error(NotFoundError("x"))
        inner.error.assert_called_once()
        assert inner.error.call_args.args == ("operational_error",)


# ─────────────────────── Redaction & configuration ───────────────────────


class TestRedaction:
    def test_redacts_sensitive_keys_case_insensitively(self):
        processor = redact_keys(["password", "token"])
        event = processor(None, "info", {"event": "login", "Password": "hunter2", "user": "bob"})
        assert event == {"event": "login", "Password": REDACTED, "user": "bob"}

    def test_redacts_nested_values(self):
        processor = redact_keys(["authorization"])
        event = processor(
            None,
            "info",
            {"event": "call", "headers": {"Authorization": "Bearer x"}, "items": [{"authorization": "y"}]},
        )
        assert event["headers"] == {"Authorization": REDACTED}
        assert event["items"] == [{"authorization": REDACTED}]


class TestConfigureLogging:
    def test_json_output_is_redacted(self, capsys: pytest.CaptureFixture[str]):
        configure_logging(level="INFO", json_logs=True, redact=["secret"])

        ErrorLogger().info("config.loaded", secret="s3cr3t", region="eu")

        line = json.loads(capsys.readouterr().out.strip())
        assert line["event"] == "config.loaded"
        assert line["secret"] == REDACTED
        assert line["region"] == "eu"
        assert line["level"] == "info"
        assert "timestamp" in line

    def test_level_filters_events(self, capsys: pytest.CaptureFixture[str]):
        configure_logging(level="WARNING", json_logs=True)

        log = ErrorLogger()
        log.info("hidden")
        log.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out


class TestDefaultLogger:
    def test_get_error_logger_is_a_singleton(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(logger_module, "_default_logger", None)
        assert get_error_logger() is get_error_logger()

    def test_initialize_replaces_default(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(logger_module, "_default_logger", None)
        settings = BridgeSettings(_env_file=None, log_level="ERROR", log_json=False)

        initialized = initialize_error_logger(settings)

        assert get_error_logger() is initialized
