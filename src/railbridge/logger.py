"""
Error logger — the logging collaborator consumed by the adapters.

A thin layer over structlog. The adapters only rely on the contract:

    log_error(error, **context)
    info(message, **context) / warning(...) / debug(...)

and every adapter takes the logger as a constructor argument, so tests
inject a fake. A process-wide default exists for convenience
(get_error_logger / initialize_error_logger).

Severity policy for log_error:
  - recoverable (operational) failure  → error    "operational_error"
  - defect (non-recoverable) failure   → critical "programming_error"
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from railbridge.config import DEFAULT_REDACT_KEYS, BridgeSettings
from railbridge.errors import StructuredError, is_operational_error

REDACTED = "[REDACTED]"


def redact_keys(keys: Iterable[str]) -> Processor:
    """
    Build a processor that masks the values of sensitive keys.

    Matching is case-insensitive and reaches into nested dicts and lists.
    """
    sensitive = frozenset(k.lower() for k in keys)

    def _redact(obj: Any, depth: int = 0) -> Any:
        if depth > 5:
            return obj
        if isinstance(obj, dict):
            return {
                k: REDACTED if str(k).lower() in sensitive else _redact(v, depth + 1)
                for k, v in obj.items()
            }
        if isinstance(obj, list):
            return [_redact(item, depth + 1) for item in obj]
        return obj

    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        return _redact(event_dict)

    return processor


def configure_logging(
    level: str = "INFO",
    json_logs: bool = True,
    redact: Iterable[str] = DEFAULT_REDACT_KEYS,
) -> None:
    """
    Configure structlog for structured logging.

    In production: JSON lines to stdout (machine-readable).
    In development: colored, human-readable console output.
    """
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.TimeStamper(fmt="iso"),
            redact_keys(redact),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


class ErrorLogger:
    """
    Structured error logger.

        log = ErrorLogger(service="billing")
        log.log_error(NotFoundError("Invoice not found"), path="/invoices/7")
        log.info("invoice.created", invoice_id="7")
    """

    def __init__(self, logger: Optional[Any] = None, **bindings: Any) -> None:
        base = logger if logger is not None else structlog.get_logger("railbridge")
        self._logger = base.bind(**bindings) if bindings else base

    def log_error(
        self,
        error: BaseException,
        *,
        recoverable: Optional[bool] = None,
        **context: Any,
    ) -> None:
        """
        Log an error with its structured context and cause.

        `recoverable` defaults to what the error says about itself; errors
        that say nothing are treated as defects.
        """
        if recoverable is None:
            recoverable = is_operational_error(error)

        fields: dict[str, Any] = {
            "error_name": type(error).__name__,
            "error_message": str(error),
            **context,
        }
        if isinstance(error, StructuredError):
            fields["error_name"] = error.name
            fields["error_context"] = error.context.to_dict()
        cause = error.__cause__
        if cause is not None:
            fields["cause"] = {"name": type(cause).__name__, "message": str(cause)}

        if recoverable:
            self._logger.error("operational_error", exc_info=error, **fields)
        else:
            self._logger.critical("programming_error", exc_info=error, **fields)

    def info(self, message: str, **context: Any) -> None:
        self._logger.info(message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._logger.warning(message, **context)

    def debug(self, message: str, **context: Any) -> None:
        self._logger.debug(message, **context)

    def child(self, **bindings: Any) -> ErrorLogger:
        """New logger carrying extra key/values on every event."""
        return ErrorLogger(self._logger, **bindings)


# ─────────────────────── Process-wide default ───────────────────────

_default_logger: Optional[ErrorLogger] = None


def initialize_error_logger(settings: Optional[BridgeSettings] = None) -> ErrorLogger:
    """Configure structlog from settings and replace the default logger."""
    global _default_logger
    settings = settings or BridgeSettings()
    configure_logging(
        level=settings.log_level,
        json_logs=settings.log_json,
        redact=settings.log_redact_keys,
    )
    _default_logger = ErrorLogger()
    return _default_logger


def get_error_logger() -> ErrorLogger:
    """Return the default logger, creating an unconfigured one on first use."""
    global _default_logger
    if _default_logger is None:
        _default_logger = ErrorLogger()
    return _default_logger
