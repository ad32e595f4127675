"""Tests for plugin selection and schema composition."""

from __future__ import annotations

import pytest
from strawberry.printer import print_schema

from starter_server.core.exceptions import UnknownPluginError
from starter_server.features.graphql.plugins import (
    LoginPlugin,
    NodePlugin,
    UsersQueryPlugin,
    resolve_plugins,
    select_plugins,
)
from starter_server.features.graphql.schema import build_schema
from starter_server.features.graphql.schema_builder import FieldKind, FieldSpec, SchemaBuilder
from tests.conftest import make_options


def _root_fields(sdl: str, type_name: str) -> set[str]:
    block = sdl.split(f"type {type_name} {{", 1)[1].split("\n}", 1)[0]
    names = set()
    for line in block.splitlines():
        line = line.strip()
        if not line or line.startswith('"'):
            continue
        names.add(line.split("(", 1)[0].split(":", 1)[0])
    return names


def test_default_plugin_list_produces_simplified_schema() -> None:
    sdl = print_schema(build_schema(make_options()))

    assert _root_fields(sdl, "Query") == {"users", "user", "userByUsername", "currentUser"}
    assert _root_fields(sdl, "Mutation") == {"updateUser", "login", "logout"}


def test_core_plugins_only() -> None:
    sdl = print_schema(build_schema(make_options(append_plugins=(), skip_plugins=())))

    assert _root_fields(sdl, "Query") == {
        "node",
        "allUsers",
        "userById",
        "userByUsername",
        "currentUser",
    }
    assert _root_fields(sdl, "Mutation") == {"updateUserById", "updateUserByUsername"}
    assert "interface Node" in sdl


def test_skip_by_class() -> None:
    sdl = print_schema(build_schema(make_options(skip_plugins=(NodePlugin, LoginPlugin))))
    assert _root_fields(sdl, "Mutation") == {"updateUser"}


def test_select_plugins_order_and_dedup() -> None:
    plugins = select_plugins(
        append=resolve_plugins(["SimplifyInflectorPlugin", UsersQueryPlugin]),
        skip=["NodePlugin"],
    )
    assert [p.name for p in plugins] == [
        "UsersQueryPlugin",
        "UsersMutationPlugin",
        "SimplifyInflectorPlugin",
    ]


def test_unknown_plugin_name() -> None:
    with pytest.raises(UnknownPluginError):
        resolve_plugins(["NoSuchPlugin"])


def test_field_filters_and_health_fallback() -> None:
    def greeting() -> str:
        return "hi"

    builder = SchemaBuilder(make_options())
    builder.add_query(FieldSpec(kind=FieldKind.CUSTOM, name="greeting", resolver=greeting))
    builder.add_field_filter(lambda spec, operation: spec.name != "greeting")

    assert builder.query_field_names() == []
    sdl = print_schema(builder.build())
    assert _root_fields(sdl, "Query") == {"health"}
    assert "type Mutation" not in sdl


def test_duplicate_field_names_keep_first() -> None:
    def first() -> str:
        return "first"

    def second() -> str:
        return "second"

    builder = SchemaBuilder(make_options())
    builder.add_query(FieldSpec(kind=FieldKind.CUSTOM, name="value", resolver=first))
    builder.add_query(FieldSpec(kind=FieldKind.CUSTOM, name="value", resolver=second))

    result = builder.build().execute_sync("{ value }")
    assert result.data == {"value": "first"}
