"""GraphQL feature module using Strawberry.

This module mounts the GraphQL API on a FastAPI application with:
- Schema assembled from an ordered list of schema plugins
- One database transaction per operation, carrying the request identity
  into PostgreSQL through transaction-local settings
- Session login/logout capabilities available to resolvers
- Depth and cost limits, extended PostgreSQL error details
"""

from __future__ import annotations

from typing import Any

__all__ = ["GraphQLOptions", "build_schema", "install_graphql"]


def __getattr__(name: str) -> Any:
    if name == "install_graphql":
        from starter_server.features.graphql.install import install_graphql

        return install_graphql
    if name == "GraphQLOptions":
        from starter_server.features.graphql.options import GraphQLOptions

        return GraphQLOptions
    if name == "build_schema":
        from starter_server.features.graphql.schema import build_schema

        return build_schema
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
