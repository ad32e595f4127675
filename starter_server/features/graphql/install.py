"""Mount the GraphQL API on a FastAPI application.

    app = FastAPI(lifespan=lifespan)
    install_graphql(app)  # options derived from settings

The host application owns the database engines (see
``starter_server.infra.database``); the installer only reads them from
``app.state`` at request time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starter_server.core.exceptions import GraphQLAlreadyInstalledError
from starter_server.features.graphql.export import export_schema
from starter_server.features.graphql.options import GraphQLOptions
from starter_server.features.graphql.router import create_graphql_router
from starter_server.features.graphql.schema import build_schema
from starter_server.infra.auth.session import SessionAuthenticator

if TYPE_CHECKING:
    import strawberry
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

__all__ = ["install_graphql", "refresh_schema_export"]


def install_graphql(
    app: FastAPI,
    options: GraphQLOptions | None = None,
    authenticator: SessionAuthenticator | None = None,
) -> strawberry.Schema:
    """Build the schema and attach the GraphQL router to ``app``.

    Raises:
        GraphQLAlreadyInstalledError: If GraphQL is already installed on ``app``.
        UnknownPluginError: If configured plugin names are not registered.
    """
    existing = getattr(app.state, "graphql_options", None)
    if existing is not None:
        raise GraphQLAlreadyInstalledError(existing.path)

    options = options or GraphQLOptions.from_settings()
    authenticator = authenticator or SessionAuthenticator()

    schema = build_schema(options)
    app.include_router(create_graphql_router(schema, options, authenticator))

    app.state.graphql_schema = schema
    app.state.graphql_options = options

    if options.exports_schema:
        refresh_schema_export(app)

    logger.info(
        "GraphQL installed",
        extra={
            "path": options.path,
            "graphiql": options.graphiql,
            "subscriptions": options.subscriptions,
        },
    )
    return schema


def refresh_schema_export(app: FastAPI) -> None:
    """Re-export the installed schema to the configured paths."""
    options: GraphQLOptions = app.state.graphql_options
    export_schema(
        app.state.graphql_schema,
        gql_path=options.export_gql_schema_path,
        json_path=options.export_json_schema_path,
    )
