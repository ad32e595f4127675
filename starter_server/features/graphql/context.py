"""GraphQL context for request-scoped dependencies.

The context is created once per HTTP request or WebSocket connection and
provides:
- The authenticator sessionmaker; ``PgTransactionExtension`` opens one
  session per operation and exposes it as ``context.session``
- The transaction-local settings identifying the caller
- The shared owner engine (``root_pg_pool``) for trusted resolvers
- Login/logout capabilities bound to this connection

Operations sharing a context (a WebSocket connection, a batched request) run
concurrently, so the operation's session is held in a ContextVar rather than
on the context itself.

Following Strawberry's FastAPI integration pattern:
https://strawberry.rocks/docs/integrations/fastapi#context_getter
"""

from __future__ import annotations

from collections.abc import Callable
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from strawberry.fastapi import BaseContext

from starter_server.core.settings.graphql import DEFAULT_PAGINATION_CAP

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
    from starlette.background import BackgroundTasks
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.websockets import WebSocket

    from starter_server.core.schemas.auth import SessionUser
    from starter_server.features.graphql.capabilities import LoginCapability, LogoutCapability

__all__ = ["GraphQLContext", "bind_operation_session", "reset_operation_session"]

_operation_session: ContextVar[AsyncSession | None] = ContextVar("graphql_operation_session", default=None)


def bind_operation_session(session: AsyncSession) -> Token[AsyncSession | None]:
    return _operation_session.set(session)


def reset_operation_session(token: Token[AsyncSession | None]) -> None:
    _operation_session.reset(token)


@dataclass
class GraphQLContext(BaseContext):
    """Request context for GraphQL operations.

    Example usage in resolver:
        async def resolve_current_user(info: Info) -> UserType | None:
            ctx: GraphQLContext = info.context
            row = await users.get_current_user(ctx.session, ctx.schema_name)
            return UserType.from_row(row) if row else None
    """

    # Standard Strawberry/FastAPI context fields
    request: Request | WebSocket | None = None
    response: Response | None = None
    background_tasks: BackgroundTasks | None = None

    # Custom application fields
    user: SessionUser | None = None
    pg_settings: dict[str, str | None] = field(default_factory=dict)
    sessionmaker: Callable[[], AsyncSession] | None = None
    root_pg_pool: AsyncEngine | None = None
    login: LoginCapability = field(default=None)  # type: ignore[assignment]
    logout: LogoutCapability = field(default=None)  # type: ignore[assignment]
    pagination_cap: int = DEFAULT_PAGINATION_CAP
    schema_name: str = "app_public"

    @property
    def session(self) -> AsyncSession:
        """The session of the operation currently executing.

        Raises:
            RuntimeError: Outside of an operation's transaction.
        """
        session = _operation_session.get()
        if session is None:
            msg = "No database session is bound to the current GraphQL operation"
            raise RuntimeError(msg)
        return session
