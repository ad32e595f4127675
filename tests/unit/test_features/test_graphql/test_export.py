"""Tests for the development schema export."""

from __future__ import annotations

import json
from pathlib import Path

from starter_server.features.graphql.export import export_schema
from starter_server.features.graphql.schema import build_schema
from tests.conftest import make_options


def test_export_writes_sdl_and_introspection(tmp_path: Path) -> None:
    schema = build_schema(make_options())
    gql_path = tmp_path / "data" / "schema.graphql"
    json_path = tmp_path / "data" / "schema.json"

    written = export_schema(schema, gql_path=gql_path, json_path=json_path)

    assert written == [gql_path, json_path]
    assert "type Query {" in gql_path.read_text()
    introspection = json.loads(json_path.read_text())
    type_names = {t["name"] for t in introspection["data"]["__schema"]["types"]}
    assert {"Query", "Mutation", "User", "LoginPayload"} <= type_names


def test_unchanged_schema_is_not_rewritten(tmp_path: Path) -> None:
    schema = build_schema(make_options())
    gql_path = tmp_path / "schema.graphql"

    assert export_schema(schema, gql_path=gql_path) == [gql_path]
    assert export_schema(schema, gql_path=gql_path) == []


def test_nothing_configured_writes_nothing(tmp_path: Path) -> None:
    assert export_schema(build_schema(make_options())) == []
    assert list(tmp_path.iterdir()) == []
