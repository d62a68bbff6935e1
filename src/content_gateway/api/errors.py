"""Map domain errors to HTTP responses with a uniform JSON envelope.

Envelope::

    {"success": false, "code": "...", "name": "...", "message": "...",
     "details": {...}}
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from content_gateway.errors import (
    AuthenticationError,
    ConflictError,
    GatewayError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

logger = structlog.get_logger()

# First match wins; anything else is a 500.
STATUS_BY_ERROR: tuple[tuple[type[GatewayError], int], ...] = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (RateLimitError, 429),
)


def status_for(exc: GatewayError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def error_envelope(
    code: str,
    name: str,
    message: str,
    details: Any = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": False,
        "code": code,
        "name": name,
        "message": message,
    }
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return body


async def gateway_error_handler(
    request: Request, exc: GatewayError
) -> JSONResponse:
    status = status_for(exc)
    log = logger.bind(
        method=request.method,
        path=request.url.path,
        status_code=status,
        code=exc.code,
    )
    if status >= 500:
        log.error("gateway_error", error=exc.message)
    else:
        log.info("request_rejected", error=exc.message)

    headers = None
    if isinstance(exc, RateLimitError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=status,
        content=error_envelope(exc.code, exc.error_name, exc.message, exc.details),
        headers=headers,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=error_envelope(
            "invalid-request",
            "ValidationError",
            "Request failed validation",
            exc.errors(),
        ),
    )


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Catch-all handler for unhandled exceptions."""
    logger.error("unhandled_exception", exc_info=exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_envelope(
            "internal-error", "ServerError", "An unexpected error occurred"
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
