"""
railbridge — explicit Result values for an exception-driven web framework.

Business logic returns Success/Failure; two FastAPI adapters make that
coexist with exception-based request handling and render one canonical
JSON envelope for every response.

    from fastapi import FastAPI
    from railbridge import NotFoundError, Result
    from railbridge.integration import install

    def find_user(user_id: str) -> Result[dict]:
        user = USERS.get(user_id)
        if user is None:
            return Result.failure(NotFoundError("User not found", metadata={"userId": user_id}))
        return Result.success(user)

    app = FastAPI()
    install(app)

    @app.get("/users/{user_id}")
    def get_user(user_id: str) -> Result[dict]:
        return find_user(user_id)
"""

from railbridge.combinators import (
    chain_async,
    combine,
    combine_async,
    map_async,
    try_async,
    try_sync,
    wrap_awaitable,
)
from railbridge.errors import (
    ConflictError,
    ErrorCode,
    ErrorContext,
    ExternalServiceError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    OperationTimeoutError,
    StructuredError,
    UnauthorizedError,
    ValidationError,
    enhance_error,
    is_operational_error,
    wrap_error,
)
from railbridge.result import Failure, Result, Success

__all__ = [
    "Result",
    "Success",
    "Failure",
    "combine",
    "combine_async",
    "try_sync",
    "try_async",
    "wrap_awaitable",
    "map_async",
    "chain_async",
    "ErrorCode",
    "ErrorContext",
    "StructuredError",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "InternalError",
    "ExternalServiceError",
    "OperationTimeoutError",
    "wrap_error",
    "enhance_error",
    "is_operational_error",
]

__version__ = "0.1.0"
