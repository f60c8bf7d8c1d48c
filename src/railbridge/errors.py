"""
Structured errors — the closed taxonomy carried on the failure track.

A StructuredError is an ordinary Python exception that also carries a code,
an HTTP status, free-form metadata and a recoverability flag. Business logic
returns it inside Failure(...); the request-boundary adapters turn it into the
canonical failure envelope.

    ┌───────────────────┐
    │  StructuredError  │  code / http_status from context, recoverable
    └─────────┬─────────┘
              │ pins code + http_status
    ┌─────────┴───────────────────────────────────────────────────────┐
    │ ValidationError 400   NotFoundError 404   UnauthorizedError 401 │
    │ ForbiddenError 403    ConflictError 409   OperationTimeoutError │
    │ InternalError 500 (non-recoverable)       ExternalServiceError  │
    └─────────────────────────────────────────────────────────────────┘

The taxonomy is closed: new failure meanings go into
`context.code` / `metadata` on the base kind, so the inbound classification
stays a single lookup.
"""

from __future__ import annotations

import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum, unique
from types import MappingProxyType
from typing import Any, ClassVar, Optional


@unique
class ErrorCode(str, Enum):
    """
    Taxonomy codes, one per concrete error kind.

    The value is the wire code rendered in `error.code`.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Invalid input format, missing fields, type mismatches (→ 400)."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """Missing or invalid credentials (→ 401)."""

    FORBIDDEN = "FORBIDDEN"
    """Authenticated but not allowed (→ 403)."""

    NOT_FOUND = "NOT_FOUND"
    """Resource doesn't exist (→ 404)."""

    TIMEOUT = "TIMEOUT"
    """A caller-imposed deadline elapsed (→ 408)."""

    CONFLICT = "CONFLICT"
    """State conflict, duplicate resource (→ 409)."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """Programming error / defect (→ 500)."""

    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    """Upstream dependency failed (→ 502)."""

    @property
    def http_status(self) -> int:
        return _CODE_TO_STATUS[self]


_CODE_TO_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.TIMEOUT: 408,
    ErrorCode.CONFLICT: 409,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.EXTERNAL_SERVICE_ERROR: 502,
}


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """
    Immutable context attached to a StructuredError.

    >>> ctx = ErrorContext(metadata={"user_id": "999"}, operation="find_user")
    >>> ctx.metadata["user_id"]
    '999'
    """

    code: Optional[str] = None
    http_status: Optional[int] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    operation: Optional[str] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self) -> None:
        # Freeze a private copy so the caller's dict can't change us later.
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @staticmethod
    def of(value: ErrorContext | Mapping[str, Any] | None) -> ErrorContext:
        """Coerce None, a mapping with ErrorContext keys, or an ErrorContext."""
        if value is None:
            return ErrorContext()
        if isinstance(value, ErrorContext):
            return value
        return ErrorContext(**value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "http_status": self.http_status,
            "metadata": dict(self.metadata),
            "operation": self.operation,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


class StructuredError(Exception):
    """
    Base of the taxonomy.

    Everything is stamped at construction and exposed read-only:

        >>> err = StructuredError("Quota exhausted", {"code": "QUOTA", "http_status": 429})
        >>> err.code, err.http_status, err.is_recoverable
        ('QUOTA', 429, True)

    The base kind takes code/status from its context. Subclasses pin their
    own via `error_code`.
    """

    error_code: ClassVar[Optional[ErrorCode]] = None
    recoverable: ClassVar[bool] = True

    def __init__(
        self,
        message: str,
        context: ErrorContext | Mapping[str, Any] | None = None,
        cause: Optional[BaseException] = None,
        *,
        metadata: Optional[Mapping[str, Any]] = None,
        operation: Optional[str] = None,
        is_recoverable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        ctx = ErrorContext.of(context)
        captured_at = datetime.now(UTC)
        overrides: dict[str, Any] = {"timestamp": captured_at}
        if metadata is not None:
            overrides["metadata"] = {**ctx.metadata, **metadata}
        if operation is not None:
            overrides["operation"] = operation
        if self.error_code is not None:
            overrides["code"] = self.error_code.value
            overrides["http_status"] = self.error_code.http_status
        self._message = message
        self._context = replace(ctx, **overrides)
        self._cause = cause
        self._captured_at = captured_at
        self._is_recoverable = self.recoverable if is_recoverable is None else is_recoverable
        if cause is not None:
            self.__cause__ = cause

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def message(self) -> str:
        return self._message

    @property
    def context(self) -> ErrorContext:
        return self._context

    @property
    def code(self) -> Optional[str]:
        return self._context.code

    @property
    def http_status(self) -> Optional[int]:
        return self._context.http_status

    @property
    def metadata(self) -> Mapping[str, Any]:
        return self._context.metadata

    @property
    def operation(self) -> Optional[str]:
        return self._context.operation

    @property
    def captured_at(self) -> datetime:
        return self._captured_at

    @property
    def cause(self) -> Optional[BaseException]:
        return self._cause

    @property
    def is_recoverable(self) -> bool:
        return self._is_recoverable

    def full_stack_trace(self) -> str:
        """Formatted traceback of this error, including the cause chain."""
        return "".join(traceback.format_exception(self))

    def to_dict(self) -> dict[str, Any]:
        """Diagnostic view used by the logger. Not a wire format."""
        return {
            "name": self.name,
            "message": self.message,
            "context": self._context.to_dict(),
            "is_recoverable": self.is_recoverable,
            "stack": self.full_stack_trace(),
            "cause": (
                {"name": type(self._cause).__name__, "message": str(self._cause)}
                if self._cause is not None
                else None
            ),
        }

    def __repr__(self) -> str:
        return f"{self.name}({self.code}: {self.message!r})"


class ValidationError(StructuredError):
    """Invalid input — missing fields, wrong format, type mismatch."""

    error_code = ErrorCode.VALIDATION_ERROR


class NotFoundError(StructuredError):
    """Resource doesn't exist."""

    error_code = ErrorCode.NOT_FOUND


class UnauthorizedError(StructuredError):
    """Missing or invalid credentials."""

    error_code = ErrorCode.UNAUTHORIZED


class ForbiddenError(StructuredError):
    """Insufficient permissions."""

    error_code = ErrorCode.FORBIDDEN


class ConflictError(StructuredError):
    error_code = ErrorCode.CONFLICT


class InternalError(StructuredError):
    """Defect-class failure. Logged as fatal, redacted in production."""

    error_code = ErrorCode.INTERNAL_ERROR
    recoverable = False


class ExternalServiceError(StructuredError):
    """Upstream API call failure."""

    error_code = ErrorCode.EXTERNAL_SERVICE_ERROR


class OperationTimeoutError(StructuredError):
    """
    A caller-imposed deadline elapsed.

    Represents the timeout, does not enforce it: wrap the awaited call in
    `asyncio.timeout(...)` and convert the builtin TimeoutError yourself.
    """

    error_code = ErrorCode.TIMEOUT


# ──────────────────────── Wrapping helpers ────────────────────────


def wrap_error(
    raised: BaseException,
    message: str,
    context: ErrorContext | Mapping[str, Any] | None = None,
    *,
    is_recoverable: bool = True,
) -> StructuredError:
    """
    Re-describe a lower-level error at a higher abstraction level.

    The original is kept as `cause` and is not touched:

        except psycopg.OperationalError as e:
            return Result.failure(wrap_error(e, "Could not load orders"))
    """
    return StructuredError(message, context, raised, is_recoverable=is_recoverable)


def enhance_error(
    raised: BaseException,
    context: ErrorContext | Mapping[str, Any] | None = None,
) -> StructuredError:
    """
    Promote an arbitrary exception into the taxonomy.

    Idempotent: a StructuredError comes back unchanged. Anything else becomes
    a non-recoverable StructuredError, since nothing vouched for it.
    """
    if isinstance(raised, StructuredError):
        return raised
    return StructuredError(str(raised), context, raised, is_recoverable=False)


def is_operational_error(error: object) -> bool:
    """True only for errors that explicitly declare themselves recoverable."""
    return getattr(error, "is_recoverable", None) is True
