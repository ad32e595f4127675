"""Development-time schema export.

Writes the schema as SDL and as a JSON introspection result so editors and
code generators can pick it up without a running server.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from strawberry.printer import print_schema

if TYPE_CHECKING:
    from pathlib import Path

    import strawberry

logger = logging.getLogger(__name__)

__all__ = ["export_schema"]


def _write_if_changed(path: Path, content: str) -> bool:
    if path.exists() and path.read_text(encoding="utf-8") == content:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return True


def export_schema(
    schema: strawberry.Schema,
    gql_path: Path | None = None,
    json_path: Path | None = None,
) -> list[Path]:
    """Write the schema files that are configured; returns the paths written."""
    written: list[Path] = []
    if gql_path is not None and _write_if_changed(gql_path, print_schema(schema) + "\n"):
        written.append(gql_path)
    if json_path is not None:
        content = json.dumps({"data": schema.introspect()}, indent=2) + "\n"
        if _write_if_changed(json_path, content):
            written.append(json_path)
    if written:
        logger.info("GraphQL schema exported", extra={"paths": [str(p) for p in written]})
    return written
