"""Tests for the command line interface."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from starter_server.cli.main import cli


def test_export_schema_command(tmp_path: Path) -> None:
    gql_path = tmp_path / "schema.graphql"
    json_path = tmp_path / "schema.json"
    runner = CliRunner()

    result = runner.invoke(cli, ["export-schema", "--graphql", str(gql_path), "--json", str(json_path)])

    assert result.exit_code == 0, result.output
    assert f"Wrote {gql_path}" in result.output
    assert "type Mutation {" in gql_path.read_text()
    assert json_path.exists()

    result = runner.invoke(cli, ["export-schema", "--graphql", str(gql_path), "--json", str(json_path)])
    assert "up to date" in result.output


def test_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "starter-server" in result.output
