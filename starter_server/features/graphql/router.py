"""GraphQL router for FastAPI integration.

Provides:
- GraphQL endpoint at ``options.path`` (HTTP, batched HTTP and WebSocket)
- GraphiQL in development
- Request context with the auth sessionmaker, pg settings and the
  login/logout capabilities

Error formatting happens in ``ExtendedErrorExtension`` so every transport
returns the same error shape.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import HTTPConnection
from strawberry.fastapi import GraphQLRouter

from starter_server.core.exceptions import ConfigurationError
from starter_server.features.graphql.capabilities import make_login, make_logout
from starter_server.features.graphql.context import GraphQLContext
from starter_server.features.graphql.pg_settings import compute_pg_settings
from starter_server.infra.auth.session import get_request_user

if TYPE_CHECKING:
    import strawberry

    from starter_server.features.graphql.options import GraphQLOptions
    from starter_server.infra.auth.session import SessionAuthenticator

logger = logging.getLogger(__name__)

__all__ = [
    "create_graphql_router",
    "get_auth_sessionmaker",
    "make_context_getter",
]

SUBSCRIPTION_PROTOCOLS = ("graphql-transport-ws", "graphql-ws")


def get_auth_sessionmaker(connection: HTTPConnection) -> Callable[[], AsyncSession]:
    """Return the authenticator sessionmaker published by ``init_database``.

    Raises:
        ConfigurationError: If the database was never initialized.
    """
    sessionmaker = getattr(connection.app.state, "auth_sessionmaker", None)
    if sessionmaker is None:
        msg = "Database is not initialized; call init_database during startup"
        raise ConfigurationError(msg)
    return sessionmaker


def make_context_getter(
    options: GraphQLOptions,
    authenticator: SessionAuthenticator,
) -> Callable[..., Awaitable[GraphQLContext]]:
    """Create the context getter for one installation."""

    async def get_graphql_context(connection: HTTPConnection) -> GraphQLContext:
        return GraphQLContext(
            request=cast("Any", connection),
            user=get_request_user(connection),
            pg_settings=compute_pg_settings(connection, options.visitor_role),
            sessionmaker=get_auth_sessionmaker(connection),
            root_pg_pool=getattr(connection.app.state, "root_pg_pool", None),
            login=make_login(authenticator, connection),
            logout=make_logout(authenticator, connection),
            pagination_cap=options.pagination_cap,
            schema_name=options.schema_name,
        )

    return get_graphql_context


def create_graphql_router(
    schema: strawberry.Schema,
    options: GraphQLOptions,
    authenticator: SessionAuthenticator,
) -> GraphQLRouter:
    """Create the GraphQL router for the given options."""
    return GraphQLRouter(
        schema,
        path=options.path,
        context_getter=cast("Any", make_context_getter(options, authenticator)),
        subscription_protocols=SUBSCRIPTION_PROTOCOLS if options.subscriptions else (),
        graphql_ide="graphiql" if options.graphiql else None,
    )
