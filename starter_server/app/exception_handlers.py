"""Global exception handlers for FastAPI application.

GraphQL errors are answered inside the GraphQL response; these handlers cover
application errors raised outside of it, e.g. an uninitialized database.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from starter_server.core.exceptions import AppException, ConfigurationError

logger = logging.getLogger(__name__)


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert AppException into an RFC 7807 Problem Details response."""
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if isinstance(exc, ConfigurationError)
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    logger.error(
        f"Application exception: {exc.detail}",
        extra={
            "type": exc.type,
            "path": request.url.path,
            "request_id": _get_request_id(request),
        },
    )
    body: dict[str, Any] = {
        "type": exc.type,
        "title": "Service Unavailable" if status_code == 503 else "Internal Server Error",
        "status": status_code,
        "detail": exc.detail,
        "instance": request.url.path,
    }
    return JSONResponse(status_code=status_code, content=body, media_type="application/problem+json")


def configure_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
