"""Cookie-session login primitive.

The signed cookie itself is handled by Starlette's ``SessionMiddleware``; this
module decides what is stored in it. Only the database session id is kept,
under the ``passport`` key so sessions stay readable by the Node tooling that
shares the cookie format:

    {"passport": {"user": {"session_id": "<uuid>"}}}

``SessionUserMiddleware`` turns that payload back into a ``SessionUser`` on
``request.state.user`` for every HTTP and WebSocket connection.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from starter_server.core.exceptions import SessionLoginError
from starter_server.core.schemas.auth import SessionUser
from starter_server.core.utils.identifiers import uuid_or_none
from starter_server.infra.logging.context import remove_from_log_context, set_log_context

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection
    from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

SESSION_KEY = "passport"


class SessionAuthenticator:
    """Serialize principals into the cookie session and back."""

    def __init__(self, session_key: str = SESSION_KEY) -> None:
        self.session_key = session_key

    def serialize_user(self, user: SessionUser | Mapping[str, Any]) -> dict[str, str]:
        """Reduce a principal to the data stored in the session.

        Raises:
            SessionLoginError: If the principal carries no valid session id.
        """
        if isinstance(user, Mapping):
            raw = user.get("session_id")
        else:
            raw = getattr(user, "session_id", None)
        session_id = uuid_or_none(raw)
        if session_id is None:
            msg = "Principal has no valid session id"
            raise SessionLoginError(msg)
        return {"session_id": session_id}

    def deserialize_user(self, data: Any) -> SessionUser | None:
        """Rebuild the principal from session data; malformed data yields None."""
        if not isinstance(data, Mapping):
            return None
        user = data.get("user")
        if not isinstance(user, Mapping):
            return None
        session_id = uuid_or_none(user.get("session_id"))
        if session_id is None:
            return None
        return SessionUser(session_id=session_id)

    async def login(
        self, connection: HTTPConnection, user: SessionUser | Mapping[str, Any]
    ) -> SessionUser:
        """Store the principal in the session and attach it to the connection.

        Raises:
            SessionLoginError: If the session middleware is missing or the
                principal cannot be serialized.
        """
        if "session" not in connection.scope:
            msg = "Session middleware is not installed"
            raise SessionLoginError(msg)

        data = self.serialize_user(user)
        connection.session[self.session_key] = {"user": data}
        principal = SessionUser(**data)
        connection.state.user = principal
        set_log_context(session_id=principal.session_id)
        logger.info("Session established")
        return principal

    async def logout(self, connection: HTTPConnection) -> None:
        """Forget the principal. Never fails."""
        if "session" in connection.scope:
            connection.session.pop(self.session_key, None)
        connection.state.user = None
        remove_from_log_context("session_id")
        logger.info("Session cleared")


def get_request_user(connection: HTTPConnection) -> SessionUser | None:
    """Return the principal attached by SessionUserMiddleware, if any."""
    return getattr(connection.state, "user", None)


class SessionUserMiddleware:
    """Attach the session principal to ``scope["state"]["user"]``.

    Must run inside Starlette's SessionMiddleware (add it before
    SessionMiddleware, since the last added middleware is outermost).
    """

    def __init__(self, app: ASGIApp, authenticator: SessionAuthenticator | None = None) -> None:
        self.app = app
        self.authenticator = authenticator or SessionAuthenticator()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        session = scope.get("session") or {}
        user = self.authenticator.deserialize_user(session.get(self.authenticator.session_key))
        state = scope.setdefault("state", {})
        state["user"] = user

        if user is not None:
            set_log_context(session_id=user.session_id)
        try:
            await self.app(scope, receive, send)
        finally:
            remove_from_log_context("session_id")
