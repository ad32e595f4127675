"""Middleware configuration.

Starlette runs the last added middleware first, so the order below yields:

    RequestIDMiddleware -> SessionMiddleware -> SessionUserMiddleware -> app
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.middleware.sessions import SessionMiddleware

from starter_server.app.middleware.request_id import RequestIDMiddleware
from starter_server.infra.auth.session import SessionUserMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI

    from starter_server.core.settings import SessionSettings
    from starter_server.infra.auth.session import SessionAuthenticator

logger = logging.getLogger(__name__)

__all__ = ["RequestIDMiddleware", "configure_middleware"]


def configure_middleware(
    app: FastAPI,
    session_settings: SessionSettings,
    authenticator: SessionAuthenticator | None = None,
) -> None:
    """Configure middleware for the application."""
    app.add_middleware(SessionUserMiddleware, authenticator=authenticator)
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_settings.secret.get_secret_value(),
        session_cookie=session_settings.cookie_name,
        max_age=session_settings.max_age,
        same_site=session_settings.same_site,
        https_only=session_settings.https_only,
    )
    app.add_middleware(RequestIDMiddleware)
    logger.debug(
        "Middleware configured",
        extra={"session_cookie": session_settings.cookie_name},
    )
