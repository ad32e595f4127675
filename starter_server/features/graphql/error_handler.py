"""GraphQL error formatting with PostgreSQL diagnostics.

Errors raised by PostgreSQL carry structured diagnostics (SQLSTATE, detail,
hint, constraint name, ...). ``ExtendedErrorPolicy`` copies a configured subset
of them into the error's ``extensions`` so clients can react to, for example,
a unique violation (``errcode: "23505"``) without parsing messages.

The server message replaces the driver's text, which embeds the SQL statement and
its bind parameters. ``ExtendedErrorExtension`` applies the policy to every
operation, whichever transport carried it.

Usage:
    policy = ExtendedErrorPolicy(fields=("errcode", "detail"), show_stack=False)
    formatted = [policy.format(error) for error in result.errors]
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import psycopg
from graphql import GraphQLError, GraphQLFormattedError
from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)

__all__ = [
    "DIAGNOSTIC_FIELDS",
    "INTERNAL_ERROR_CODE",
    "INTERNAL_ERROR_MESSAGE",
    "ExtendedErrorPolicy",
    "database_message",
    "extract_extended_fields",
    "find_database_error",
    "is_internal_error",
]

# Extension name -> psycopg Diagnostic attribute
DIAGNOSTIC_FIELDS: dict[str, str] = {
    "errcode": "sqlstate",
    "severity": "severity",
    "detail": "message_detail",
    "hint": "message_hint",
    "position": "statement_position",
    "internalPosition": "internal_position",
    "internalQuery": "internal_query",
    "where": "context",
    "schema": "schema_name",
    "table": "table_name",
    "column": "column_name",
    "dataType": "datatype_name",
    "constraint": "constraint_name",
    "file": "source_file",
    "line": "source_line",
    "routine": "source_function",
}


def find_database_error(error: GraphQLError) -> psycopg.Error | None:
    """Find the psycopg error behind a GraphQL error, if there is one.

    Follows SQLAlchemy's ``DBAPIError.orig`` and exception ``__cause__`` chains.
    """
    current: BaseException | None = error.original_error
    seen: set[int] = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, psycopg.Error):
            return current
        if isinstance(current, DBAPIError) and current.orig is not None:
            current = current.orig
            continue
        current = current.__cause__
    return None


def extract_extended_fields(db_error: psycopg.Error, fields: Sequence[str]) -> dict[str, Any]:
    """Copy the requested diagnostic fields; absent ones are omitted."""
    diag = db_error.diag
    extracted: dict[str, Any] = {}
    for name in fields:
        attr = DIAGNOSTIC_FIELDS.get(name)
        if attr is None:
            continue
        value = getattr(diag, attr, None)
        if value is None and name == "errcode":
            value = db_error.sqlstate
        if value is not None:
            extracted[name] = value
    return extracted


INTERNAL_ERROR_MESSAGE = "An internal error occurred. Please try again later."
INTERNAL_ERROR_CODE = "INTERNAL_ERROR"


def database_message(db_error: psycopg.Error) -> str:
    """The server's primary message, without SQL or bind parameters."""
    return getattr(db_error.diag, "message_primary", None) or str(db_error)


def is_internal_error(error: GraphQLError) -> bool:
    """A resolver failed with something other than a GraphQLError."""
    original = error.original_error
    return error.path is not None and original is not None and not isinstance(original, GraphQLError)


@dataclass(frozen=True)
class ExtendedErrorPolicy:
    """How errors are presented to clients.

    - PostgreSQL errors keep only the server's message, plus the configured
      diagnostic fields in ``extensions``.
    - Other resolver failures are replaced by a generic message when
      ``mask_internal`` is set; the original is logged.
    - ``show_stack`` adds the Python traceback (development only).
    """

    fields: tuple[str, ...] = ("errcode",)
    show_stack: bool = False
    mask_internal: bool = True

    def apply(self, error: GraphQLError) -> GraphQLError:
        """Rewrite ``error`` in place and return it."""
        extensions: dict[str, Any] = dict(error.extensions or {})

        db_error = find_database_error(error)
        if db_error is not None:
            error.message = database_message(db_error)
            extensions.update(extract_extended_fields(db_error, self.fields))
        elif self.mask_internal and is_internal_error(error):
            logger.error(
                "GraphQL resolver failed",
                exc_info=error.original_error,
                extra={"graphql_path": error.path},
            )
            error.message = INTERNAL_ERROR_MESSAGE
            extensions["code"] = INTERNAL_ERROR_CODE

        if self.show_stack and error.original_error is not None:
            extensions["stack"] = "".join(traceback.format_exception(error.original_error))

        error.extensions = extensions
        return error

    def format(self, error: GraphQLError) -> GraphQLFormattedError:
        return self.apply(error).formatted
