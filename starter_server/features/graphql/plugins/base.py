"""Schema plugin interface.

A plugin is a named value with a ``build`` hook. Plugins run in order against
one ``SchemaBuilder``: they add fields, register field filters, or replace the
inflector.

    class HealthPlugin(SchemaPlugin):
        name = "HealthPlugin"

        def build(self, builder: SchemaBuilder) -> None:
            builder.add_query(FieldSpec(kind=FieldKind.CUSTOM, name="health", resolver=health))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar, Union

if TYPE_CHECKING:
    from starter_server.features.graphql.schema_builder import SchemaBuilder

__all__ = ["PluginRef", "SchemaPlugin", "plugin_name"]


class SchemaPlugin(ABC):
    name: ClassVar[str]

    @abstractmethod
    def build(self, builder: SchemaBuilder) -> None:
        """Contribute to the schema being built."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


# A plugin named by string, by class or given as an instance
PluginRef = Union[str, type[SchemaPlugin], SchemaPlugin]


def plugin_name(ref: PluginRef) -> str:
    if isinstance(ref, str):
        return ref
    return ref.name
