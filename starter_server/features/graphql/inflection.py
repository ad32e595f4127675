"""Field naming rules.

The default inflector produces fully qualified names (``allUsers``,
``userById``, ``updateUserById``). ``SimplifiedInflector`` shortens the names of
primary-key fields (``users``, ``user``, ``updateUser``) and leaves lookups by
other unique keys qualified (``userByUsername``).
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Inflector", "SimplifiedInflector", "TableInfo", "camel_case", "upper_camel_case"]


def upper_camel_case(value: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in value.split("_") if part)


def camel_case(value: str) -> str:
    upper = upper_camel_case(value)
    return upper[:1].lower() + upper[1:]


@dataclass(frozen=True)
class TableInfo:
    """A table exposed through GraphQL, with its names spelled out."""

    name: str
    singular: str
    plural: str
    primary_key: tuple[str, ...] = ("id",)


class Inflector:
    def all_rows(self, table: TableInfo) -> str:
        return "all" + upper_camel_case(table.plural)

    def _by_keys(self, keys: tuple[str, ...]) -> str:
        return "By" + "And".join(upper_camel_case(key) for key in keys)

    def row_by_unique_key(self, table: TableInfo, keys: tuple[str, ...]) -> str:
        return camel_case(table.singular) + self._by_keys(keys)

    def update_by_key(self, table: TableInfo, keys: tuple[str, ...]) -> str:
        return "update" + upper_camel_case(table.singular) + self._by_keys(keys)

    def function(self, name: str) -> str:
        return camel_case(name)


class SimplifiedInflector(Inflector):
    def all_rows(self, table: TableInfo) -> str:
        return camel_case(table.plural)

    def row_by_unique_key(self, table: TableInfo, keys: tuple[str, ...]) -> str:
        if keys == table.primary_key:
            return camel_case(table.singular)
        return super().row_by_unique_key(table, keys)

    def update_by_key(self, table: TableInfo, keys: tuple[str, ...]) -> str:
        if keys == table.primary_key:
            return "update" + upper_camel_case(table.singular)
        return super().update_by_key(table, keys)
