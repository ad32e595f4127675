"""Shorter names for primary-key fields."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starter_server.features.graphql.inflection import SimplifiedInflector
from starter_server.features.graphql.plugins.base import SchemaPlugin

if TYPE_CHECKING:
    from starter_server.features.graphql.schema_builder import SchemaBuilder

__all__ = ["SimplifyInflectorPlugin"]


class SimplifyInflectorPlugin(SchemaPlugin):
    """``allUsers`` becomes ``users``, ``userById`` becomes ``user``."""

    name = "SimplifyInflectorPlugin"

    def build(self, builder: SchemaBuilder) -> None:
        builder.inflector = SimplifiedInflector()
