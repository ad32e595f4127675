"""Login and logout capabilities handed to resolvers.

Each capability is an async callable bound to the connection it was created
for and resolves to a tagged result instead of raising:

    result = await info.context.login({"session_id": session_id})
    if not result.ok:
        ...
    # or, for exception-style callers:
    (await info.context.login(user)).unwrap()
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, NoReturn, Union

from starter_server.core.exceptions import SessionLoginError

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection

    from starter_server.core.schemas.auth import SessionUser
    from starter_server.infra.auth.session import SessionAuthenticator

logger = logging.getLogger(__name__)

__all__ = [
    "AuthFailure",
    "AuthResult",
    "AuthSuccess",
    "LoginCapability",
    "LogoutCapability",
    "make_login",
    "make_logout",
]


@dataclass(frozen=True)
class AuthSuccess:
    ok: ClassVar[bool] = True

    def unwrap(self) -> None:
        return None


@dataclass(frozen=True)
class AuthFailure:
    """A failed login; ``reason`` is a stable tag, ``error`` the cause."""

    reason: str
    error: Exception
    ok: ClassVar[bool] = False

    def unwrap(self) -> NoReturn:
        raise self.error


AuthResult = Union[AuthSuccess, AuthFailure]

LoginCapability = Callable[["SessionUser | Mapping[str, Any]"], Awaitable[AuthResult]]
LogoutCapability = Callable[[], Awaitable[AuthResult]]


def make_login(authenticator: SessionAuthenticator, connection: HTTPConnection) -> LoginCapability:
    """Bind a login capability to one connection."""

    async def login(user: SessionUser | Mapping[str, Any]) -> AuthResult:
        try:
            await authenticator.login(connection, user)
        except SessionLoginError as exc:
            logger.warning("Session login failed", extra={"reason": exc.detail})
            return AuthFailure(reason="login_failed", error=exc)
        return AuthSuccess()

    return login


def make_logout(authenticator: SessionAuthenticator, connection: HTTPConnection) -> LogoutCapability:
    """Bind a logout capability to one connection. It always succeeds."""

    async def logout() -> AuthResult:
        await authenticator.logout(connection)
        return AuthSuccess()

    return logout
