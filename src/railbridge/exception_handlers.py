"""
Inbound adapter — every exception that escapes a request becomes one
canonical failure envelope.

This is the single place where failures are classified and given a
status code; the outbound adapter (outcome_route) only re-raises.

    handler raises ─────────────────────────┐
    handler returns Failure → re-raised ────┤
    router raises HTTPException (404/405) ──┤
    request body fails validation ──────────┤
                                            ▼
                                ErrorEnvelopeHandler
                   classify → render envelope → log (after send)

Registration follows FastAPI's exception-handler mechanism: specific types
are handled by Starlette's ExceptionMiddleware, the `Exception` catch-all
by ServerErrorMiddleware (which still re-raises for the server to see,
after our response has been sent).
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException

from railbridge.errors import ErrorCode, StructuredError, ValidationError
from railbridge.http_support import ErrorBody, ErrorResponse, HttpStatusMapper
from railbridge.logger import ErrorLogger

# Fallback for when the injected logger itself fails.
_fallback = logging.getLogger("railbridge.exception_handlers")


@dataclass(frozen=True, slots=True)
class Classification:
    """What the wire gets to know about an exception."""

    status_code: int
    code: str
    message: str
    recoverable: bool
    metadata: Mapping[str, Any] = field(default_factory=dict)
    headers: Optional[Mapping[str, str]] = None


class ErrorEnvelopeHandler:
    """
    Request-wide failure renderer, registered as a FastAPI exception handler.

        handler = ErrorEnvelopeHandler(ErrorLogger(), production=True)
        register_error_handlers(app, handler)

    `production` drives both redaction policies: stack traces are rendered
    only outside production, and defect details are replaced by the generic
    message only in production. `integration.install` derives it from
    BridgeSettings.environment.
    """

    def __init__(
        self,
        logger: ErrorLogger,
        *,
        production: bool = True,
        internal_message: str = "Internal server error",
    ) -> None:
        self._logger = logger
        self._production = production
        self._internal_message = internal_message

    async def __call__(self, request: Request, exc: Exception) -> JSONResponse:
        error = _promote(exc)
        classified = self.classify(error)
        body = ErrorBody(
            code=classified.code,
            message=classified.message,
            status_code=classified.status_code,
            path=request.url.path,
            context=jsonable_encoder(dict(classified.metadata)) or None,
            stack=_format_stack(error) if not self._production else None,
        )
        return JSONResponse(
            status_code=classified.status_code,
            content=ErrorResponse(body).to_dict(),
            headers=dict(classified.headers) if classified.headers else None,
            background=BackgroundTask(
                self._log,
                error,
                recoverable=classified.recoverable,
                method=request.method,
                path=request.url.path,
                status_code=classified.status_code,
            ),
        )

    def classify(self, exc: BaseException) -> Classification:
        """
        Map an exception to status, code, message and metadata.

        - framework HTTPException → its own status and detail
        - StructuredError         → its http_status / code / message / metadata
        - anything else           → 500 INTERNAL_ERROR, generic message
        """
        match exc:
            case StarletteHTTPException():
                return Classification(
                    status_code=exc.status_code,
                    code=HttpStatusMapper.code_for_status(exc.status_code),
                    message=_detail_message(exc.detail, exc.status_code),
                    recoverable=exc.status_code < 500,
                    headers=exc.headers,
                )
            case StructuredError():
                if not exc.is_recoverable and self._production:
                    # Defects keep their status but not their details.
                    return Classification(
                        status_code=exc.http_status or 500,
                        code=exc.code or ErrorCode.INTERNAL_ERROR.value,
                        message=self._internal_message,
                        recoverable=False,
                    )
                return Classification(
                    status_code=exc.http_status or 500,
                    code=exc.code or ErrorCode.INTERNAL_ERROR.value,
                    message=exc.message,
                    recoverable=exc.is_recoverable,
                    metadata=exc.metadata,
                )
            case _:
                return Classification(
                    status_code=500,
                    code=ErrorCode.INTERNAL_ERROR.value,
                    message=self._internal_message,
                    recoverable=False,
                )

    def _log(self, error: BaseException, *, recoverable: bool, **context: Any) -> None:
        try:
            self._logger.log_error(error, recoverable=recoverable, **context)
        except Exception:
            _fallback.exception("error logger failed while logging %r", error)


def _promote(exc: Exception) -> Exception:
    """Turn FastAPI's request validation failure into a taxonomy error."""
    if isinstance(exc, RequestValidationError):
        return ValidationError(
            "Request validation failed",
            metadata={"errors": jsonable_encoder(exc.errors())},
            cause=exc,
        )
    return exc


def _detail_message(detail: Any, status_code: int) -> str:
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, Mapping) and isinstance(detail.get("message"), str):
        return detail["message"]
    return f"HTTP {status_code}"


def _format_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(error))


def register_error_handlers(app: FastAPI, handler: ErrorEnvelopeHandler) -> None:
    """
    Register the handler for every exception type that can reach the boundary.

    Usage:
        app = FastAPI()
        register_error_handlers(app, ErrorEnvelopeHandler(get_error_logger()))
    """
    app.add_exception_handler(StarletteHTTPException, handler)
    app.add_exception_handler(RequestValidationError, handler)
    app.add_exception_handler(StructuredError, handler)
    app.add_exception_handler(Exception, handler)
