"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from starter_server.app.exception_handlers import configure_exception_handlers
from starter_server.app.lifespan import lifespan
from starter_server.app.middleware import configure_middleware
from starter_server.core.exceptions import ConfigurationError
from starter_server.core.settings import AppSettings, SessionSettings, get_app_settings, get_session_settings
from starter_server.features.graphql.install import install_graphql
from starter_server.features.graphql.options import GraphQLOptions
from starter_server.infra.auth.session import SessionAuthenticator


def check_session_secret(settings: AppSettings, session_settings: SessionSettings) -> None:
    """Refuse to sign production cookies with the built-in secret.

    Raises:
        ConfigurationError: If SECRET is unset in production.
    """
    if settings.environment == "production" and session_settings.uses_default_secret:
        msg = "SECRET must be set when NODE_ENV=production"
        raise ConfigurationError(msg)


def create_app(options: GraphQLOptions | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        options: GraphQL options; derived from settings when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_app_settings()
    session_settings = get_session_settings()
    check_session_secret(settings, session_settings)

    app = FastAPI(
        title=settings.title,
        version=settings.version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    configure_exception_handlers(app)

    authenticator = SessionAuthenticator()
    configure_middleware(app, session_settings, authenticator)

    install_graphql(app, options, authenticator)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
