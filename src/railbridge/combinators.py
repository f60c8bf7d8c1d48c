"""
Combinators — aggregate, wrap and await Results.

The per-value operators live on Result itself (.map, .chain, ...). This
module holds the functions that work on several Results at once, and the
wrapping primitives that bring raise-based code onto the railway:

    try_sync(lambda: json.loads(raw))           # Result[Any, Exception]
    await try_async(lambda: client.get(url))    # Result[Response, Exception]
    combine([validate(i) for i in items])       # Result[list[Item]]
    await combine_async([fetch(i) for i in ids])

Every function here is total: the only exceptions that escape are the
ones raised by user-supplied transforms, and BaseExceptions that are not
errors (KeyboardInterrupt, SystemExit, cancellation).
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeAlias, TypeVar

from railbridge.result import Failure, Result, Success

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")

X = TypeVar("X")

MaybeAwaitable: TypeAlias = X | Awaitable[X]


# ──────────────────────── Wrapping primitives ────────────────────────


def try_sync(computation: Callable[[], T]) -> Result[T, Exception]:
    """
    Run a thunk that may raise and capture the outcome.

    The raised object is stored as-is, so a StructuredError raised inside
    arrives in the Failure unchanged (no double wrapping).

        try_sync(lambda: 5)             # → Success(5)
        try_sync(lambda: int("x"))      # → Failure(ValueError(...))
    """
    try:
        return Success(computation())
    except Exception as e:
        return Failure(e)


async def try_async(computation: Callable[[], Awaitable[T]]) -> Result[T, Exception]:
    """
    Async counterpart of try_sync — `computation` is a zero-argument async callable.

        result = await try_async(lambda: repo.find(user_id))

    Deadlines are the caller's business:

        async def load():
            async with asyncio.timeout(2):
                return await repo.find(user_id)
    """
    try:
        return Success(await computation())
    except Exception as e:
        return Failure(e)


async def wrap_awaitable(awaitable: Awaitable[T]) -> Result[T, Exception]:
    """try_async over an awaitable that already exists (a task, a coroutine)."""

    async def _await() -> T:
        return await awaitable

    return await try_async(_await)


# ──────────────────────── Aggregation ────────────────────────


def combine(results: Iterable[Result[T, E]]) -> Result[list[T], E]:
    """
    Collect Results into a Result of list, preserving order.

    Left-to-right scan: the first Failure is returned as-is and later
    elements are not inspected. Empty input gives Success([]).

        combine([Success(1), Failure(e), Success(2)])  # → Failure(e)
    """
    values: list[T] = []
    for r in results:
        match r:
            case Success(v):
                values.append(v)
            case Failure():
                return r  # type: ignore[return-value]
    return Success(values)


async def combine_async(
    pending: Iterable[Awaitable[Result[T, E]]],
) -> Result[list[T], E | Exception]:
    """
    Run Result-producing awaitables concurrently and combine them.

    All of them are joined before anything is decided — no sibling is
    cancelled because another one failed. The outcome is then read in the
    original list order, so the reported failure is the first one by
    position, not the first one to complete. An awaitable that raised
    counts as Failure(exc) at its position.

        result = await combine_async([fetch_user(i) for i in ids])
    """
    outcomes = await asyncio.gather(*pending, return_exceptions=True)
    resolved: list[Result[T, Any]] = []
    for outcome in outcomes:
        if isinstance(outcome, Exception):
            resolved.append(Failure(outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            resolved.append(outcome)
    return combine(resolved)


# ──────────────────────── Pending-Result operators ────────────────────────


async def _resolve(result: MaybeAwaitable[Result[T, E]]) -> Result[T, E]:
    if inspect.isawaitable(result):
        return await result
    return result


async def map_async(
    result: MaybeAwaitable[Result[T, E]],
    mapper: Callable[[T], MaybeAwaitable[U]],
) -> Result[U, E]:
    """
    Map over a Result that may still be pending.

        profile = await map_async(load_user(user_id), lambda u: u.profile)
    """
    return await (await _resolve(result)).map_async(mapper)


async def chain_async(
    result: MaybeAwaitable[Result[T, E]],
    mapper: Callable[[T], MaybeAwaitable[Result[U, E]]],
) -> Result[U, E]:
    """
    Chain a step onto a Result that may still be pending.

        saved = await chain_async(validate_order(cmd), persist_order)
    """
    return await (await _resolve(result)).chain_async(mapper)
