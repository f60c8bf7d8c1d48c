"""
Outbound adapter — a handler's return value becomes a canonical response.

    return value            →  what FastAPI serializes
    ──────────────────────────────────────────────────────────────────
    Response / envelope     →  unchanged
    Success(value)          →  {"success": true, "data": value, "timestamp": ...}
    Failure(error)          →  error is re-raised → exception_handlers
    anything else           →  {"success": true, "data": <it>, "timestamp": ...}

No classification happens here: failures go back to the inbound adapter
so status mapping has a single home.

Usage:
    app.router.route_class = OutcomeRoute         # or integration.install(app)
    router = APIRouter(route_class=OutcomeRoute)

    @app.get("/users/{user_id}")
    async def get_user(user_id: str) -> Result[User]:
        return await users.find(user_id)
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from typing import Any

from fastapi.datastructures import DefaultPlaceholder
from fastapi.routing import APIRoute
from starlette.responses import Response

from railbridge.http_support import SuccessResponse, is_envelope
from railbridge.result import Result


def render_outcome(value: Any) -> Any:
    """
    Translate a handler's return value into what goes on the wire.

    Raises the contained error for a Failure (via Result.unwrap).
    """
    if isinstance(value, Response):
        return value
    if is_envelope(value):
        return value.to_dict() if hasattr(value, "to_dict") else value
    if isinstance(value, Result):
        return SuccessResponse(value.unwrap()).to_dict()
    return SuccessResponse(value).to_dict()


def _resolved_signature(endpoint: Callable[..., Any]) -> inspect.Signature:
    """
    The endpoint's signature with string annotations evaluated in its own
    module, so FastAPI can read it through the wrapper.
    """
    try:
        signature = inspect.signature(endpoint, eval_str=True)
    except (NameError, TypeError):
        signature = inspect.signature(endpoint)
    return signature.replace(return_annotation=inspect.Signature.empty)


def with_outcome_rendering(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap an endpoint (sync or async) so its return value is rendered."""
    if inspect.iscoroutinefunction(endpoint):

        @functools.wraps(endpoint)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            return render_outcome(await endpoint(*args, **kwargs))

        wrapper: Callable[..., Any] = async_wrapper
    else:

        @functools.wraps(endpoint)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            return render_outcome(endpoint(*args, **kwargs))

        wrapper = sync_wrapper

    wrapper.__signature__ = _resolved_signature(endpoint)  # type: ignore[attr-defined]
    return wrapper


class OutcomeRoute(APIRoute):
    """
    APIRoute whose endpoint output goes through render_outcome.

    The inferred response_model is switched off: the return annotation
    describes the Result, not the envelope that is actually sent. An
    explicit response_model is kept and should describe the envelope.
    """

    def __init__(self, path: str, endpoint: Callable[..., Any], **kwargs: Any) -> None:
        if isinstance(kwargs.get("response_model"), DefaultPlaceholder) or "response_model" not in kwargs:
            kwargs["response_model"] = None
        super().__init__(path, with_outcome_rendering(endpoint), **kwargs)
