"""Dynamic GraphQL schema builder.

Schema plugins contribute field specs to a ``SchemaBuilder``; once every plugin
has run, the builder names the fields with its current inflector, drops the
ones rejected by field filters, and composes the Query and Mutation types.

Field names are resolved only at build time, so a plugin that swaps the
inflector affects fields contributed before and after it.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

import strawberry
from strawberry.schema.config import StrawberryConfig

from starter_server.features.graphql.inflection import Inflector, TableInfo

if TYPE_CHECKING:
    from strawberry.extensions import SchemaExtension

    from starter_server.features.graphql.options import GraphQLOptions

logger = logging.getLogger(__name__)

__all__ = ["FieldFilter", "FieldKind", "FieldSpec", "Operation", "SchemaBuilder"]

Operation = Literal["query", "mutation"]


class FieldKind(enum.Enum):
    ALL_ROWS = "all_rows"
    ROW_BY_KEY = "row_by_key"
    UPDATE_BY_KEY = "update_by_key"
    FUNCTION = "function"
    CUSTOM = "custom"


@dataclass(frozen=True)
class FieldSpec:
    """One root field contributed by a plugin.

    ``name`` is required for FUNCTION (snake_case, inflected) and CUSTOM
    (used verbatim) fields; table fields are named by the inflector.
    """

    kind: FieldKind
    resolver: Callable[..., Any]
    table: TableInfo | None = None
    keys: tuple[str, ...] = ()
    name: str | None = None
    description: str | None = None
    plugin: str = ""

    @property
    def is_primary_key_lookup(self) -> bool:
        return self.table is not None and bool(self.keys) and self.keys == self.table.primary_key

    def field_name(self, inflector: Inflector) -> str:
        if self.kind is FieldKind.CUSTOM:
            if not self.name:
                msg = "Custom fields need an explicit name"
                raise ValueError(msg)
            return self.name
        if self.kind is FieldKind.FUNCTION:
            if not self.name:
                msg = "Function fields need a function name"
                raise ValueError(msg)
            return inflector.function(self.name)
        if self.table is None:
            msg = f"{self.kind.value} fields need a table"
            raise ValueError(msg)
        if self.kind is FieldKind.ALL_ROWS:
            return inflector.all_rows(self.table)
        if self.kind is FieldKind.ROW_BY_KEY:
            return inflector.row_by_unique_key(self.table, self.keys)
        return inflector.update_by_key(self.table, self.keys)


FieldFilter = Callable[[FieldSpec, Operation], bool]


class SchemaBuilder:
    """Collects field specs from plugins and builds the Strawberry schema."""

    def __init__(self, options: GraphQLOptions) -> None:
        self.options = options
        self.inflector: Inflector = Inflector()
        self._queries: list[FieldSpec] = []
        self._mutations: list[FieldSpec] = []
        self._filters: list[FieldFilter] = []

    def add_query(self, spec: FieldSpec) -> None:
        self._queries.append(spec)

    def add_mutation(self, spec: FieldSpec) -> None:
        self._mutations.append(spec)

    def add_field_filter(self, field_filter: FieldFilter) -> None:
        """Register a predicate; fields for which it returns False are dropped."""
        self._filters.append(field_filter)

    def _accepted(self, specs: Sequence[FieldSpec], operation: Operation) -> list[FieldSpec]:
        return [spec for spec in specs if all(f(spec, operation) for f in self._filters)]

    def _fields(self, specs: Sequence[FieldSpec], operation: Operation) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        make_field = strawberry.mutation if operation == "mutation" else strawberry.field
        for spec in self._accepted(specs, operation):
            name = spec.field_name(self.inflector)
            if name in fields:
                logger.warning(
                    f"Duplicate {operation} field '{name}' from plugin '{spec.plugin}'. "
                    "Using first definition.",
                )
                continue
            fields[name] = make_field(resolver=spec.resolver, name=name, description=spec.description)
        return fields

    def query_field_names(self) -> list[str]:
        return list(self._fields(self._queries, "query"))

    def build(self, extensions: Sequence[type[SchemaExtension]] = ()) -> strawberry.Schema:
        """Compose the root types and create the schema."""
        query_fields = self._fields(self._queries, "query")
        if not query_fields:
            logger.warning("No query fields contributed! Adding minimal health query.")

            def health() -> str:
                return "ok"

            query_fields["health"] = strawberry.field(
                resolver=health, name="health", description="Health check endpoint"
            )

        # Resolver fields carry their own types; the root classes need no annotations
        query_type = strawberry.type(type("Query", (), query_fields), description="The root query type")

        mutation_type = None
        mutation_fields = self._fields(self._mutations, "mutation")
        if mutation_fields:
            mutation_type = strawberry.type(
                type("Mutation", (), mutation_fields), description="The root mutation type"
            )

        logger.info(
            "GraphQL schema composed",
            extra={
                "queries": sorted(query_fields),
                "mutations": sorted(mutation_fields),
                "inflector": type(self.inflector).__name__,
            },
        )
        return strawberry.Schema(
            query=query_type,
            mutation=mutation_type,
            extensions=list(extensions),
            config=StrawberryConfig(
                auto_camel_case=True,
                batching_config=(
                    {"max_operations": self.options.batch_max_operations} if self.options.batching else None
                ),
            ),
        )
