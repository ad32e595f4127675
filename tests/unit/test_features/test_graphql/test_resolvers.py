"""Tests for the users, login and node resolvers.

The schema is executed directly with a GraphQLContext whose sessionmaker
hands out FakeSessions, so every statement the resolvers issue can be inspected.
"""

from __future__ import annotations

import base64
from typing import Any
from uuid import UUID

import psycopg
import pytest
from sqlalchemy.exc import DBAPIError

from starter_server.core.exceptions import SessionLoginError
from starter_server.features.graphql.capabilities import AuthFailure
from starter_server.features.graphql.context import GraphQLContext
from starter_server.features.graphql.schema import build_schema
from starter_server.features.graphql.options import EXTENDED_ERRORS_MINIMAL
from tests.conftest import make_options
from tests.fakes import SESSION_ID, USER_ID, FakeEngine, FakeSession, make_user_row

CURRENT_USER = '"current_user"()'


@pytest.fixture
def schema():  # type: ignore[no-untyped-def]
    return build_schema(make_options())


@pytest.fixture
def node_schema():  # type: ignore[no-untyped-def]
    return build_schema(make_options(skip_plugins=()))


def _limit_of(session: FakeSession) -> Any:
    params = [p for sql, p in session.statements if "order by id" in sql]
    return params[-1]["limit"]


class TestUserQueries:
    @pytest.mark.asyncio
    async def test_users_returns_rows(self, schema, graphql_context, fake_session) -> None:  # type: ignore[no-untyped-def]
        fake_session.respond("order by id", [make_user_row(), make_user_row(id=USER_ID, username="bob")])

        result = await schema.execute(
            "{ users { id username isVerified } }", context_value=graphql_context
        )

        assert result.errors is None
        assert [u["username"] for u in result.data["users"]] == ["alice", "bob"]
        assert result.data["users"][0]["id"] == USER_ID
        assert _limit_of(fake_session) == 50

    @pytest.mark.parametrize(("first", "limit"), [(5, 5), (500, 50), (0, 0)])
    @pytest.mark.asyncio
    async def test_first_is_capped(self, schema, graphql_context, fake_session, first, limit) -> None:  # type: ignore[no-untyped-def]
        result = await schema.execute(
            "query ($first: Int) { users(first: $first, offset: 10) { id } }",
            variable_values={"first": first},
            context_value=graphql_context,
        )

        assert result.errors is None
        assert _limit_of(fake_session) == limit
        assert [p for sql, p in fake_session.statements if "order by id" in sql][0]["offset"] == 10

    @pytest.mark.asyncio
    async def test_negative_first_is_rejected(self, schema, graphql_context) -> None:  # type: ignore[no-untyped-def]
        result = await schema.execute("{ users(first: -1) { id } }", context_value=graphql_context)

        assert result.errors is not None
        assert result.errors[0].extensions["code"] == "BAD_USER_INPUT"

    @pytest.mark.asyncio
    async def test_user_by_primary_key(self, schema, graphql_context, fake_session) -> None:  # type: ignore[no-untyped-def]
        fake_session.respond("where id = :value", [make_user_row()])

        result = await schema.execute(
            f'{{ user(id: "{USER_ID}") {{ username nodeId }} }}', context_value=graphql_context
        )

        assert result.errors is None
        assert result.data["user"]["username"] == "alice"
        node_id = base64.b64decode(result.data["user"]["nodeId"]).decode()
        assert node_id == f"User:{USER_ID}"
        params = [p for sql, p in fake_session.statements if "where id = :value" in sql][0]
        assert params["value"] == UUID(USER_ID)

    @pytest.mark.asyncio
    async def test_user_by_username_missing(self, schema, graphql_context) -> None:  # type: ignore[no-untyped-def]
        result = await schema.execute(
            '{ userByUsername(username: "nobody") { id } }', context_value=graphql_context
        )

        assert result.errors is None
        assert result.data == {"userByUsername": None}

    @pytest.mark.asyncio
    async def test_current_user(self, schema, graphql_context, fake_session) -> None:  # type: ignore[no-untyped-def]
        fake_session.respond(CURRENT_USER, [make_user_row(is_admin=True)])

        result = await schema.execute("{ currentUser { username isAdmin } }", context_value=graphql_context)

        assert result.errors is None
        assert result.data == {"currentUser": {"username": "alice", "isAdmin": True}}
        assert any("app_public.\"current_user\"()" in sql for sql in fake_session.sql())


class TestNode:
    @pytest.mark.asyncio
    async def test_node_resolves_user(self, node_schema, graphql_context, fake_session) -> None:  # type: ignore[no-untyped-def]
        fake_session.respond("where id = :value", [make_user_row()])
        node_id = base64.b64encode(f"User:{USER_ID}".encode()).decode()

        result = await node_schema.execute(
            "query ($id: ID!) { node(nodeId: $id) { nodeId ... on User { username } } }",
            variable_values={"id": node_id},
            context_value=graphql_context,
        )

        assert result.errors is None
        assert result.data["node"] == {"nodeId": node_id, "username": "alice"}

    @pytest.mark.parametrize(
        "node_id",
        [
            "not base64!",
            base64.b64encode(b"nocolon").decode(),
            base64.b64encode(b"Post:1").decode(),
            base64.b64encode(b"User:not-a-uuid").decode(),
        ],
    )
    @pytest.mark.asyncio
    async def test_unknown_or_malformed_ids_yield_null(self, node_schema, graphql_context, node_id) -> None:  # type: ignore[no-untyped-def]
        result = await node_schema.execute(
            "query ($id: ID!) { node(nodeId: $id) { nodeId } }",
            variable_values={"id": node_id},
            context_value=graphql_context,
        )

        assert result.errors is None
        assert result.data == {"node": None}


class TestUpdateUser:
    @pytest.mark.asyncio
    async def test_update_by_primary_key(self, schema, graphql_context, fake_session) -> None:  # type: ignore[no-untyped-def]
        fake_session.respond("update app_public.users", [make_user_row(name="Alice B")])

        result = await schema.execute(
            'mutation ($id: UUID!) { updateUser(input: {id: $id, patch: {name: "Alice B"}}) { user { name } } }',
            variable_values={"id": USER_ID},
            context_value=graphql_context,
        )

        assert result.errors is None
        assert result.data == {"updateUser": {"user": {"name": "Alice B"}}}
        sql, params = [s for s in fake_session.statements if "update app_public.users" in s[0]][0]
        assert "set name = :set_name" in sql
        assert "username" not in sql.split("returning")[0].split("set", 1)[1]
        assert params["set_name"] == "Alice B"
        assert fake_session.transactions[0].committed is True

    @pytest.mark.asyncio
    async def test_null_clears_a_column(self, schema, graphql_context, fake_session) -> None:  # type: ignore[no-untyped-def]
        fake_session.respond("update app_public.users", [make_user_row(avatar_url=None)])

        result = await schema.execute(
            f'mutation {{ updateUser(input: {{id: "{USER_ID}", patch: {{avatarUrl: null}}}}) {{ user {{ id }} }} }}',
            context_value=graphql_context,
        )

        assert result.errors is None
        params = [p for sql, p in fake_session.statements if "update app_public.users" in sql][0]
        assert params["set_avatar_url"] is None

    @pytest.mark.asyncio
    async def test_no_matching_row_is_an_error(self, schema, graphql_context, fake_session) -> None:  # type: ignore[no-untyped-def]
        result = await schema.execute(
            f'mutation {{ updateUser(input: {{id: "{USER_ID}", patch: {{name: "x"}}}}) {{ user {{ id }} }} }}',
            context_value=graphql_context,
        )

        assert result.errors is not None
        assert "No values were updated" in result.errors[0].message
        assert fake_session.transactions[0].rolled_back is True


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_establishes_session(  # type: ignore[no-untyped-def]
        self, schema, graphql_context, fake_session, root_pg_pool: FakeEngine, login_calls
    ) -> None:
        root_pg_pool.connection.respond("app_private.login", [{"uuid": SESSION_ID, "user_id": USER_ID}])
        fake_session.respond(CURRENT_USER, [make_user_row()])

        result = await schema.execute(
            'mutation { login(input: {username: "alice", password: "secret"}) { user { username } } }',
            context_value=graphql_context,
        )

        assert result.errors is None
        assert result.data == {"login": {"user": {"username": "alice"}}}
        assert login_calls == [("login", {"session_id": SESSION_ID})]
        assert {"jwt.claims.session_id": SESSION_ID} in fake_session.applied_settings()
        assert graphql_context.pg_settings["jwt.claims.session_id"] == SESSION_ID
        login_params = root_pg_pool.connection.statements[0][1]
        assert login_params == {"username": "alice", "password": "secret"}

    @pytest.mark.asyncio
    async def test_bad_credentials(self, schema, graphql_context, fake_session, login_calls) -> None:  # type: ignore[no-untyped-def]
        result = await schema.execute(
            'mutation { login(input: {username: "alice", password: "wrong"}) { user { id } } }',
            context_value=graphql_context,
        )

        assert result.errors is not None
        assert result.errors[0].message == "Incorrect username or password"
        assert result.errors[0].extensions["code"] == "CREDS"
        assert login_calls == []
        assert fake_session.transactions[0].rolled_back is True

    @pytest.mark.asyncio
    async def test_login_capability_failure(  # type: ignore[no-untyped-def]
        self, schema, graphql_context: GraphQLContext, root_pg_pool: FakeEngine
    ) -> None:
        root_pg_pool.connection.respond("app_private.login", [{"uuid": SESSION_ID}])

        async def failing_login(user: Any) -> AuthFailure:
            return AuthFailure(reason="login_failed", error=SessionLoginError())

        graphql_context.login = failing_login

        result = await schema.execute(
            'mutation { login(input: {username: "alice", password: "secret"}) { user { id } } }',
            context_value=graphql_context,
        )

        assert result.errors is not None
        assert result.errors[0].extensions["code"] == "LOGIN_FAILED"

    @pytest.mark.asyncio
    async def test_logout(self, schema, graphql_context, fake_session, login_calls) -> None:  # type: ignore[no-untyped-def]
        result = await schema.execute("mutation { logout { success } }", context_value=graphql_context)

        assert result.errors is None
        assert result.data == {"logout": {"success": True}}
        assert any("app_public.logout()" in sql for sql in fake_session.sql())
        assert login_calls == [("logout", None)]

    @pytest.mark.asyncio
    async def test_database_error_shows_server_message_only(  # type: ignore[no-untyped-def]
        self, graphql_context, root_pg_pool: FakeEngine
    ) -> None:
        root_pg_pool.connection.respond(
            "app_private.login",
            DBAPIError(
                "select sessions.* from app_private.login(%(username)s, %(password)s) sessions",
                {"username": "alice", "password": "hunter2"},
                psycopg.errors.RaiseException("User account locked"),
            ),
        )
        schema = build_schema(make_options(extended_errors=EXTENDED_ERRORS_MINIMAL))

        result = await schema.execute(
            'mutation { login(input: {username: "alice", password: "hunter2"}) { user { id } } }',
            context_value=graphql_context,
        )

        assert result.errors is not None
        formatted = result.errors[0].formatted
        assert formatted["message"] == "User account locked"
        assert formatted["extensions"] == {"errcode": "P0001"}
        assert "hunter2" not in str(formatted)
        assert "[SQL:" not in str(formatted)
