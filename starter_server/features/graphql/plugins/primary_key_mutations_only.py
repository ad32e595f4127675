"""Only expose mutations addressed by primary key."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starter_server.features.graphql.plugins.base import SchemaPlugin

if TYPE_CHECKING:
    from starter_server.features.graphql.schema_builder import FieldSpec, Operation, SchemaBuilder

__all__ = ["PrimaryKeyMutationsOnlyPlugin", "primary_key_mutations_only"]


def primary_key_mutations_only(spec: FieldSpec, operation: Operation) -> bool:
    if operation != "mutation" or not spec.keys:
        return True
    return spec.is_primary_key_lookup


class PrimaryKeyMutationsOnlyPlugin(SchemaPlugin):
    name = "PrimaryKeyMutationsOnlyPlugin"

    def build(self, builder: SchemaBuilder) -> None:
        builder.add_field_filter(primary_key_mutations_only)
