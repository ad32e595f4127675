"""Explicit configuration for the GraphQL installer.

``GraphQLOptions`` collects everything ``install_graphql`` needs in one frozen
value. ``GraphQLOptions.from_settings`` derives it from the environment the
same way for every entry point, so tests can build options by hand instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from starter_server.core.settings import (
    get_app_settings,
    get_db_settings,
    get_graphql_settings,
)
from starter_server.core.settings.graphql import (
    DEFAULT_BATCH_MAX_OPERATIONS,
    DEFAULT_COST_LIMIT,
    DEFAULT_DEPTH_LIMIT,
    DEFAULT_PAGINATION_CAP,
)

if TYPE_CHECKING:
    from starter_server.core.settings import AppSettings, GraphQLSettings, PostgresSettings
    from starter_server.features.graphql.plugins.base import PluginRef, SchemaPlugin

__all__ = [
    "EXTENDED_ERRORS_FULL",
    "EXTENDED_ERRORS_MINIMAL",
    "GraphQLOptions",
]

EXTENDED_ERRORS_FULL: tuple[str, ...] = (
    "errcode",
    "severity",
    "detail",
    "hint",
    "position",
    "internalPosition",
    "internalQuery",
    "where",
    "schema",
    "table",
    "column",
    "dataType",
    "constraint",
    "file",
    "line",
    "routine",
)
EXTENDED_ERRORS_MINIMAL: tuple[str, ...] = ("errcode",)


@dataclass(frozen=True)
class GraphQLOptions:
    """Configuration for one GraphQL installation."""

    auth_database_url: str | None = None
    owner_database_url: str | None = None
    schema_name: str = "app_public"
    path: str = "/graphql"
    visitor_role: str = "visitor"

    subscriptions: bool = True
    graphiql: bool = False
    extended_errors: tuple[str, ...] = EXTENDED_ERRORS_MINIMAL
    show_error_stack: bool = False
    mask_internal_errors: bool = True

    # Several operations in one JSON array POST
    batching: bool = True
    batch_max_operations: int = DEFAULT_BATCH_MAX_OPERATIONS

    # Schema export; both None disables it
    export_gql_schema_path: Path | None = None
    export_json_schema_path: Path | None = None

    append_plugins: tuple[SchemaPlugin, ...] = field(default=())
    skip_plugins: tuple[PluginRef, ...] = field(default=())

    pagination_cap: int = DEFAULT_PAGINATION_CAP
    depth_limit: int = DEFAULT_DEPTH_LIMIT
    cost_limit: int = DEFAULT_COST_LIMIT
    expose_query_cost: bool = True

    @property
    def exports_schema(self) -> bool:
        return self.export_gql_schema_path is not None or self.export_json_schema_path is not None

    @classmethod
    def from_settings(
        cls,
        app_settings: AppSettings | None = None,
        db_settings: PostgresSettings | None = None,
        graphql_settings: GraphQLSettings | None = None,
    ) -> GraphQLOptions:
        """Build options from settings, applying the development/test switches.

        Development enables GraphiQL, error stacks, unmasked internal errors,
        schema export and the full extended-error list. Test enables only the full extended-error list.

        Raises:
            UnknownPluginError: If a configured plugin name is not registered.
        """
        # Imported here: the plugin modules import the schema builder
        from starter_server.features.graphql.plugins import resolve_plugins

        app_settings = app_settings or get_app_settings()
        db_settings = db_settings or get_db_settings()
        graphql_settings = graphql_settings or get_graphql_settings()

        is_dev = app_settings.is_development
        full_errors = is_dev or app_settings.is_test

        return cls(
            auth_database_url=db_settings.auth_dsn,
            owner_database_url=db_settings.owner_dsn,
            schema_name=graphql_settings.schema_name,
            path=graphql_settings.path,
            visitor_role=db_settings.visitor_role,
            subscriptions=graphql_settings.subscriptions_enabled,
            graphiql=is_dev,
            extended_errors=EXTENDED_ERRORS_FULL if full_errors else EXTENDED_ERRORS_MINIMAL,
            show_error_stack=is_dev,
            mask_internal_errors=not is_dev,
            batching=graphql_settings.batching_enabled,
            batch_max_operations=graphql_settings.batch_max_operations,
            export_gql_schema_path=graphql_settings.export_gql_schema_path if is_dev else None,
            export_json_schema_path=graphql_settings.export_json_schema_path if is_dev else None,
            append_plugins=resolve_plugins(graphql_settings.append_plugins),
            skip_plugins=tuple(graphql_settings.skip_plugins),
            pagination_cap=graphql_settings.pagination_cap,
            depth_limit=graphql_settings.depth_limit,
            cost_limit=graphql_settings.cost_limit,
            expose_query_cost=graphql_settings.expose_query_cost,
        )
