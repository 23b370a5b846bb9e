"""
Global exception handlers.

Every error leaves the API as ``{"detail": ..., "success": false}``. Database
and unexpected errors are logged with their traceback but reach the client
only as a fixed message.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)

Handler = Callable[[Request, Exception], Awaitable[JSONResponse]]

# Most specific first; Starlette resolves handlers along the exception's MRO
_MASKED_ERRORS: list[tuple[type[Exception], int, str]] = [
    (IntegrityError, 409, "Database constraint violation"),
    (SQLAlchemyError, 500, "Internal database error"),
    (Exception, 500, "Internal server error"),
]


def error_response(
    status_code: int, detail: object, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "success": False},
        headers=headers,
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))


async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded for %s on %s", request.client, request.url.path)
    return error_response(429, f"Too many requests: {exc.detail}")


def _masked_handler(status_code: int, detail: str) -> Handler:
    async def _handle(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return error_response(status_code, detail)

    return _handle


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    for exc_type, status_code, detail in _MASKED_ERRORS:
        app.add_exception_handler(exc_type, _masked_handler(status_code, detail))
