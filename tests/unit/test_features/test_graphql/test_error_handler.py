"""Tests for extended PostgreSQL error details."""

from __future__ import annotations

from types import SimpleNamespace

import psycopg
from graphql import GraphQLError
from sqlalchemy.exc import DBAPIError

from starter_server.features.graphql.error_handler import (
    INTERNAL_ERROR_CODE,
    INTERNAL_ERROR_MESSAGE,
    ExtendedErrorPolicy,
    extract_extended_fields,
    find_database_error,
)
from starter_server.features.graphql.options import EXTENDED_ERRORS_FULL


class UsernameTaken(psycopg.errors.UniqueViolation):
    @property
    def diag(self):  # type: ignore[no-untyped-def, override]
        return SimpleNamespace(
            sqlstate="23505",
            severity="ERROR",
            message_detail="Key (username)=(alice) already exists.",
            message_hint=None,
            schema_name="app_public",
            table_name="users",
            constraint_name="users_username_key",
            source_file="nbtinsert.c",
            source_line="666",
            source_function="_bt_check_unique",
        )


def _graphql_error(original: Exception) -> GraphQLError:
    return GraphQLError("boom", original_error=original)


def test_full_list_copies_present_fields_only() -> None:
    formatted = ExtendedErrorPolicy(fields=EXTENDED_ERRORS_FULL).format(
        _graphql_error(UsernameTaken("duplicate key"))
    )

    assert formatted["message"] == "duplicate key"
    assert formatted["extensions"] == {
        "errcode": "23505",
        "severity": "ERROR",
        "detail": "Key (username)=(alice) already exists.",
        "schema": "app_public",
        "table": "users",
        "constraint": "users_username_key",
        "file": "nbtinsert.c",
        "line": "666",
        "routine": "_bt_check_unique",
    }


def test_production_list_is_errcode_only() -> None:
    formatted = ExtendedErrorPolicy().format(_graphql_error(UsernameTaken("duplicate key")))
    assert formatted["extensions"] == {"errcode": "23505"}


def test_errcode_falls_back_to_error_class() -> None:
    error = psycopg.errors.UniqueViolation("duplicate key")
    assert extract_extended_fields(error, ("errcode", "detail")) == {"errcode": "23505"}


def test_sqlalchemy_wrapped_error_is_unwrapped() -> None:
    original = UsernameTaken("duplicate key")
    wrapped = DBAPIError("update app_public.users ...", {}, original)

    assert find_database_error(_graphql_error(wrapped)) is original
    formatted = ExtendedErrorPolicy().format(_graphql_error(wrapped))
    assert formatted["extensions"] == {"errcode": "23505"}


def test_cause_chain_is_followed() -> None:
    original = UsernameTaken("duplicate key")
    try:
        try:
            raise original
        except psycopg.Error as exc:
            raise RuntimeError("wrapped") from exc
    except RuntimeError as outer:
        assert find_database_error(_graphql_error(outer)) is original


def test_non_database_errors_pass_through() -> None:
    error = GraphQLError("Incorrect username or password", extensions={"code": "CREDS"})
    assert ExtendedErrorPolicy(fields=EXTENDED_ERRORS_FULL).format(error) == error.formatted

    plain = _graphql_error(ValueError("nope"))
    assert "extensions" not in ExtendedErrorPolicy(fields=EXTENDED_ERRORS_FULL).format(plain)


def test_stack_is_added_when_enabled() -> None:
    try:
        raise ValueError("nope")
    except ValueError as exc:
        error = _graphql_error(exc)

    formatted = ExtendedErrorPolicy(show_stack=True).format(error)

    assert "ValueError: nope" in formatted["extensions"]["stack"]


def test_database_message_omits_statement_and_parameters() -> None:
    wrapped = DBAPIError(
        "select sessions.* from app_private.login(%(username)s, %(password)s) sessions",
        {"username": "alice", "password": "hunter2"},
        psycopg.errors.RaiseException("User account locked"),
    )
    assert "hunter2" in str(wrapped)

    formatted = ExtendedErrorPolicy().format(GraphQLError(str(wrapped), original_error=wrapped))

    assert formatted["message"] == "User account locked"
    assert "hunter2" not in str(formatted)
    assert "[SQL:" not in str(formatted)
    assert formatted["extensions"] == {"errcode": "P0001"}


def test_resolver_failures_are_masked() -> None:
    error = GraphQLError(
        "connection to server at 10.0.0.5 failed",
        path=["currentUser"],
        original_error=RuntimeError("connection to server at 10.0.0.5 failed"),
    )

    formatted = ExtendedErrorPolicy().format(error)

    assert formatted["message"] == INTERNAL_ERROR_MESSAGE
    assert formatted["extensions"] == {"code": INTERNAL_ERROR_CODE}
    assert formatted["path"] == ["currentUser"]


def test_resolver_failures_shown_when_unmasked() -> None:
    error = GraphQLError("nope", path=["users"], original_error=ValueError("nope"))

    formatted = ExtendedErrorPolicy(mask_internal=False).format(error)

    assert formatted["message"] == "nope"
    assert "extensions" not in formatted


def test_graphql_errors_raised_by_resolvers_are_not_masked() -> None:
    raised = GraphQLError("Incorrect username or password", extensions={"code": "CREDS"})
    located = GraphQLError(raised.message, path=["login"], original_error=raised)

    formatted = ExtendedErrorPolicy().format(located)

    assert formatted["message"] == "Incorrect username or password"
    assert formatted["extensions"] == {"code": "CREDS"}
