"""
Result — the two-slot outcome value at the heart of railbridge.

A Result[T, E] is either Success(value: T) or Failure(error: E), where E
defaults to StructuredError. Business logic returns Results instead of
raising; `.chain()` threads a workflow through several steps and skips every
step after the first failure, with no unwinding involved.

    ┌───────────┐    chain     ┌───────────┐    chain     ┌──────────┐
    │ validate  │──Success─────│   load    │──Success─────│  update  │──→ Result[T]
    └─────┬─────┘              └─────┬─────┘              └─────┬────┘
          │ Failure                  │ Failure                  │ Failure
          └──────────────────────────┴──────────────────────────┴──→ Result[T]

`unwrap()` is the one sanctioned way back into exception land: it raises
the contained error object itself.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Optional,
    cast,
)

from typing_extensions import TypeVar

from railbridge.errors import StructuredError

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", default=StructuredError)
F = TypeVar("F")
R = TypeVar("R")


class Result(Generic[T, E]):
    """
    Success(value) or Failure(error) — never both, never neither.

    Usage:
        >>> Result.success(21).map(lambda x: x * 2).unwrap()
        42

        >>> failed = Result.failure(NotFoundError("User not found"))
        >>> failed.map(lambda x: x * 2).is_failure()
        True
    """

    # ──────────────────────── Introspection ────────────────────────

    def is_success(self) -> bool:
        """Check if this Result is a Success."""
        return isinstance(self, Success)

    def is_failure(self) -> bool:
        """Check if this Result is a Failure."""
        return isinstance(self, Failure)

    def unwrap(self) -> T:
        """
        Extract the success value, raising the contained error on failure.

        The error object is raised as-is, no wrapping. A failure whose payload
        is not an exception (e.g. after `map_error(str)`) raises ValueError.
        """
        match self:
            case Success(v):
                return v
            case Failure(err):
                if isinstance(err, BaseException):
                    raise err
                raise ValueError(f"Cannot get value from a Failure: {err!r}")
        raise TypeError("unreachable")  # pragma: no cover

    def error(self) -> E:
        """
        Extract the failure payload. Raises ValueError if called on a Success.

        Prefer .either() or match/case for safe access.
        """
        match self:
            case Failure(err):
                return err
            case Success(v):
                raise ValueError(f"Cannot get error from a Success: {v!r}")
        raise TypeError("unreachable")  # pragma: no cover

    def unwrap_or(self, default: T) -> T:
        """Extract value or return a default on failure. Never raises."""
        match self:
            case Success(v):
                return v
            case _:
                return default

    def unwrap_or_else(self, fallback: Callable[[E], T]) -> T:
        """Extract value or compute a default from the error."""
        return self.either(lambda v: v, fallback)

    # ──────────────────────── Core Transformations ────────────────────────

    def either(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[E], R],
    ) -> R:
        """
        Apply one of two functions depending on the state.

            result.either(
                on_success=lambda user: f"Hello {user.name}",
                on_failure=lambda err: f"Error: {err.message}",
            )
        """
        match self:
            case Success(v):
                return on_success(v)
            case Failure(err):
                return on_failure(err)
        raise TypeError("unreachable")  # pragma: no cover

    def map(self, mapper: Callable[[T], U]) -> Result[U, E]:
        """
        Transform the success value. Failures pass through untouched.

            Result.success(5).map(lambda x: x * 2)     # → Success(10)
            Result.failure(err).map(lambda x: x * 2)   # → the same Failure

        Exceptions raised by `mapper` are not caught; use try_sync for that.
        """
        match self:
            case Success(v):
                return Success(mapper(v))
            case Failure():
                return cast("Result[U, E]", self)
        raise TypeError("unreachable")  # pragma: no cover

    def map_error(self, mapper: Callable[[E], F]) -> Result[T, F]:
        """
        Transform the failure payload. Successes pass through untouched.

            result.map_error(lambda err: wrap_error(err, "Checkout failed"))
        """
        match self:
            case Success():
                return cast("Result[T, F]", self)
            case Failure(err):
                return Failure(mapper(err))
        raise TypeError("unreachable")  # pragma: no cover

    def chain(self, mapper: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """
        Bind a Result-returning step. Short-circuits on failure.

        This is the operator that connects railway segments — Haskell's >>=,
        Rust's .and_then(). The returned Result replaces this one, it is not
        nested.

            def validate(x: int) -> Result[int]:
                if x > 0:
                    return Result.success(x)
                return Result.failure(ValidationError("Must be positive"))

            Result.success(5).chain(validate)   # → Success(5)
            Result.success(-1).chain(validate)  # → Failure(ValidationError)
        """
        match self:
            case Success(v):
                return mapper(v)
            case Failure():
                return cast("Result[U, E]", self)
        raise TypeError("unreachable")  # pragma: no cover

    def ensure(self, predicate: Callable[[T], bool], error: E) -> Result[T, E]:
        """
        Keep a success only if it satisfies `predicate`.

            Result.success(order).ensure(
                lambda o: o.total > 0,
                ValidationError("Order total must be positive"),
            )
        """
        return self.chain(
            lambda v: Success(v) if predicate(v) else Failure(error)
        )

    def recover(self, recovery_fn: Callable[[E], T]) -> Result[T, E]:
        """Turn a failure into a success computed from the error."""
        match self:
            case Success():
                return self
            case Failure(err):
                return Success(recovery_fn(err))
        raise TypeError("unreachable")  # pragma: no cover

    # ──────────────────────── Side Effects ────────────────────────

    def peek(self, action: Callable[[T], Any]) -> Result[T, E]:
        """
        Execute a side effect on the success value without altering the Result.

            result.peek(lambda user: log.info("user.created", user_id=user.id))
        """
        match self:
            case Success(v):
                action(v)
        return self

    def peek_failure(self, action: Callable[[E], Any]) -> Result[T, E]:
        """Execute a side effect on failure without altering the Result."""
        match self:
            case Failure(err):
                action(err)
        return self

    # ──────────────────────── Static Factories ────────────────────────

    @staticmethod
    def success(value: T) -> Result[T, Any]:
        """Create a successful Result wrapping the given value."""
        return Success(value)

    @staticmethod
    def failure(error: E) -> Result[Any, E]:
        """Create a failed Result carrying the given error."""
        return Failure(error)

    @staticmethod
    def from_optional(value: Optional[T], error: E) -> Result[T, E]:
        """
        Success unless the value is None.

            Result.from_optional(users.get(user_id), NotFoundError("User not found"))
        """
        if value is not None:
            return Success(value)
        return Failure(error)

    # ──────────────────────── Async Support ────────────────────────

    async def map_async(self, mapper: Callable[[T], U | Awaitable[U]]) -> Result[U, E]:
        """
        Async map — `mapper` may be a plain or an async function.

            result = await Result.success(user_id).map_async(fetch_profile)
        """
        match self:
            case Success(v):
                mapped = mapper(v)
                if inspect.isawaitable(mapped):
                    mapped = await mapped
                return Success(cast(U, mapped))
            case Failure():
                return cast("Result[U, E]", self)
        raise TypeError("unreachable")  # pragma: no cover

    async def chain_async(
        self,
        mapper: Callable[[T], Result[U, E] | Awaitable[Result[U, E]]],
    ) -> Result[U, E]:
        """
        Async chain — bind a step that returns (or awaits to) a Result.

            result = await Result.success(order).chain_async(persist_order)
        """
        match self:
            case Success(v):
                chained = mapper(v)
                if inspect.isawaitable(chained):
                    chained = await chained
                return cast("Result[U, E]", chained)
            case Failure():
                return cast("Result[U, E]", self)
        raise TypeError("unreachable")  # pragma: no cover

    # ──────────────────────── Dunder methods ────────────────────────

    def __bool__(self) -> bool:
        """Allow truthiness check: `if result: ...` succeeds only on Success."""
        return self.is_success()


@dataclass(frozen=True, slots=True)
class Success(Result[T, E]):
    """The success track — wraps a value of type T (None allowed)."""

    _value: T

    __match_args__ = ("_value",)

    def __init__(self, value: T) -> None:
        object.__setattr__(self, "_value", value)

    def __repr__(self) -> str:
        return f"Success({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Success):
            return self._value == other._value
        if isinstance(other, Failure):
            return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("Success", self._value))


@dataclass(frozen=True, slots=True)
class Failure(Result[T, E]):
    """The failure track — wraps an error of type E."""

    _error: E

    __match_args__ = ("_error",)

    def __init__(self, error: E) -> None:
        if error is None:
            raise TypeError("Failure error must not be None")
        object.__setattr__(self, "_error", error)

    def __repr__(self) -> str:
        return f"Failure({self._error!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Failure):
            return self._error is other._error or self._error == other._error
        if isinstance(other, Success):
            return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("Failure", id(self._error)))
