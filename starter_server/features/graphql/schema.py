"""Build the Strawberry schema from the configured plugins."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import strawberry

from starter_server.features.graphql.error_handler import ExtendedErrorPolicy
from starter_server.features.graphql.extensions import (
    ComplexityLimiter,
    ExtendedErrorExtension,
    PgTransactionExtension,
)
from starter_server.features.graphql.plugins import select_plugins
from starter_server.features.graphql.schema_builder import SchemaBuilder

if TYPE_CHECKING:
    from starter_server.features.graphql.options import GraphQLOptions

logger = logging.getLogger(__name__)

__all__ = ["build_schema"]


def build_schema(options: GraphQLOptions) -> strawberry.Schema:
    """Run every selected plugin, then compose the schema.

    The complexity limiter runs before the transaction extension so rejected
    operations never open a transaction.
    """
    builder = SchemaBuilder(options)
    plugins = select_plugins(options.append_plugins, options.skip_plugins)
    for plugin in plugins:
        plugin.build(builder)
    logger.debug("GraphQL plugins applied", extra={"plugins": [p.name for p in plugins]})

    errors = ExtendedErrorExtension.configure(
        ExtendedErrorPolicy(
            fields=options.extended_errors,
            show_stack=options.show_error_stack,
            mask_internal=options.mask_internal_errors,
        )
    )
    limiter = ComplexityLimiter.configure(
        max_complexity=options.cost_limit,
        max_depth=options.depth_limit,
        default_list_size=options.pagination_cap,
        expose_cost=options.expose_query_cost,
    )
    return builder.build(extensions=[errors, limiter, PgTransactionExtension])
