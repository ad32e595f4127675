"""Main CLI entry point for starter-server."""

from __future__ import annotations

from pathlib import Path

import click

from starter_server import __version__
from starter_server.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="starter-server")
def cli() -> None:
    """Starter server management commands.

    \b
    Quick Start:
      starter-server serve              # Run the API with uvicorn
      starter-server export-schema      # Write data/schema.graphql and data/schema.json
    """


@cli.command()
@click.option("--host", default=None, help="Bind host (default: APP_HOST)")
@click.option("--port", default=None, type=int, help="Bind port (default: APP_PORT)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Run the FastAPI application with uvicorn."""
    import uvicorn

    from starter_server.core.settings import get_app_settings, get_logging_settings

    settings = get_app_settings()
    log_settings = get_logging_settings()
    uvicorn.run(
        "starter_server.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=log_settings.level.lower(),
    )


@cli.command("export-schema")
@click.option(
    "--graphql",
    "gql_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SDL output path (default: GRAPHQL_EXPORT_GQL_SCHEMA_PATH)",
)
@click.option(
    "--json",
    "json_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Introspection JSON output path (default: GRAPHQL_EXPORT_JSON_SCHEMA_PATH)",
)
def export_schema_command(gql_path: Path | None, json_path: Path | None) -> None:
    """Build the GraphQL schema and write it to disk without starting a server."""
    from starter_server.core.settings import get_graphql_settings
    from starter_server.features.graphql.export import export_schema
    from starter_server.features.graphql.options import GraphQLOptions
    from starter_server.features.graphql.schema import build_schema

    graphql_settings = get_graphql_settings()
    schema = build_schema(GraphQLOptions.from_settings(graphql_settings=graphql_settings))
    gql_path = gql_path or graphql_settings.export_gql_schema_path
    json_path = json_path or graphql_settings.export_json_schema_path
    written = export_schema(schema, gql_path=gql_path, json_path=json_path)
    if written:
        for path in written:
            click.echo(f"Wrote {path}")
    else:
        click.echo("Schema files are up to date")


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli()


if __name__ == "__main__":
    main()
