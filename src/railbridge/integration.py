"""
Wiring — install both adapters on a FastAPI application.

    from fastapi import FastAPI
    from railbridge.integration import install

    app = FastAPI()
    install(app)                 # before declaring routes

    @app.get("/users/{user_id}")
    def get_user(user_id: str) -> Result[dict]:
        ...

Routes declared on `app` after install() use OutcomeRoute. Routers created
separately opt in with APIRouter(route_class=OutcomeRoute).
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from railbridge.config import BridgeSettings
from railbridge.exception_handlers import ErrorEnvelopeHandler, register_error_handlers
from railbridge.logger import ErrorLogger, get_error_logger
from railbridge.outcome_route import OutcomeRoute


def install(
    app: FastAPI,
    settings: Optional[BridgeSettings] = None,
    logger: Optional[ErrorLogger] = None,
    *,
    outcome_routes: bool = True,
) -> ErrorEnvelopeHandler:
    """
    Register the inbound adapter and, unless disabled, the outbound one.

    Stack traces reach the wire only when settings.environment is not
    "production". Returns the registered handler.
    """
    settings = settings or BridgeSettings()
    handler = ErrorEnvelopeHandler(
        logger or get_error_logger(),
        production=settings.is_production,
        internal_message=settings.internal_error_message,
    )
    register_error_handlers(app, handler)
    if outcome_routes:
        app.router.route_class = OutcomeRoute
    return handler
