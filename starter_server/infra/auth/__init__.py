"""Session-based authentication primitives."""

from starter_server.infra.auth.session import (
    SESSION_KEY,
    SessionAuthenticator,
    SessionUserMiddleware,
    get_request_user,
)

__all__ = ["SESSION_KEY", "SessionAuthenticator", "SessionUserMiddleware", "get_request_user"]
