"""
HTTP support — canonical envelopes and status/code mapping.

Framework-agnostic: both FastAPI adapters build on this module, and it is
the only place that knows the wire shape.

Success:
    {"success": true, "data": <T>, "timestamp": "2026-02-17T10:30:00+00:00"}

Failure:
    {
        "success": false,
        "error": {
            "code": "NOT_FOUND",
            "message": "User not found",
            "statusCode": 404,
            "timestamp": "2026-02-17T10:30:00+00:00",
            "path": "/users/999",
            "context": {"userId": "999"},     # only when metadata is non-empty
            "stack": "Traceback ..."          # only outside production
        }
    }
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from http import HTTPStatus
from typing import Any, Optional

from railbridge.errors import ErrorCode


def utc_timestamp() -> str:
    """ISO-8601 timestamp for 'now', in UTC."""
    return datetime.now(UTC).isoformat()


# ──────────────────────── Status ↔ Code Mapping ────────────────────────


class HttpStatusMapper:
    """Maps bare HTTP status codes back to wire codes."""

    _STATUS_TO_CODE: dict[int, ErrorCode] = {code.http_status: code for code in ErrorCode}

    @classmethod
    def code_for_status(cls, status: int) -> str:
        """
        Wire code for a bare status (framework-native exceptions).

        Taxonomy codes first, then the standard reason phrase name:
            404 → "NOT_FOUND", 405 → "METHOD_NOT_ALLOWED", 599 → "HTTP_ERROR"
        """
        code = cls._STATUS_TO_CODE.get(status)
        if code is not None:
            return code.value
        try:
            return HTTPStatus(status).name
        except ValueError:
            return "HTTP_ERROR"


# ──────────────────────── Envelopes ────────────────────────


@dataclass(frozen=True, slots=True)
class SuccessResponse:
    """Canonical success envelope."""

    data: Any
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {"success": True, "data": self.data, "timestamp": self.timestamp}


@dataclass(frozen=True, slots=True)
class ErrorBody:
    """The `error` object of a failure envelope."""

    code: str
    message: str
    status_code: int
    path: str
    timestamp: str = field(default_factory=utc_timestamp)
    context: Optional[Mapping[str, Any]] = None
    stack: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "statusCode": self.status_code,
            "timestamp": self.timestamp,
            "path": self.path,
        }
        if self.context:
            body["context"] = dict(self.context)
        if self.stack is not None:
            body["stack"] = self.stack
        return body


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    """Canonical failure envelope."""

    error: ErrorBody

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.error.to_dict()}


def is_envelope(value: Any) -> bool:
    """True for anything already shaped as a canonical envelope."""
    if isinstance(value, (SuccessResponse, ErrorResponse)):
        return True
    return isinstance(value, Mapping) and isinstance(value.get("success"), bool)
