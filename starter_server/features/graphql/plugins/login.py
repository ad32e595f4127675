"""``login`` and ``logout`` mutations backed by the cookie session.

Credentials are checked with ``app_private.login`` on the owner connection
(``root_pg_pool``), since the visitor role cannot read ``app_private``. The new
session id is then stored in the cookie through the login capability and set
on the current transaction, so the returned user is read under the caller's
new identity.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from graphql import GraphQLError
from strawberry.types import Info

from starter_server.core.utils.identifiers import uuid_or_none
from starter_server.features.graphql import repository
from starter_server.features.graphql.pg_settings import SESSION_ID_SETTING, apply_pg_settings
from starter_server.features.graphql.plugins.base import SchemaPlugin
from starter_server.features.graphql.schema_builder import FieldKind, FieldSpec
from starter_server.features.graphql.types.auth import LoginInput, LoginPayload, LogoutPayload
from starter_server.features.graphql.types.users import UserType

if TYPE_CHECKING:
    from starter_server.features.graphql.schema_builder import SchemaBuilder

logger = logging.getLogger(__name__)

__all__ = ["LoginPlugin"]


def _credentials_error() -> GraphQLError:
    return GraphQLError("Incorrect username or password", extensions={"code": "CREDS"})


async def resolve_login(info: Info, input: LoginInput) -> LoginPayload:  # noqa: A002
    """Use this mutation to log in to your account."""
    ctx = info.context
    if ctx.root_pg_pool is None:
        logger.error("Login attempted without an owner database connection")
        raise GraphQLError("Login is unavailable", extensions={"code": "LOGIN_FAILED"})

    async with ctx.root_pg_pool.begin() as conn:
        session_row = await repository.call_login(conn, input.username, input.password)
    if session_row is None:
        logger.info("Login rejected", extra={"username": input.username})
        raise _credentials_error()

    session_id = uuid_or_none(session_row.get("uuid"))
    if session_id is None:
        raise _credentials_error()

    result = await ctx.login({"session_id": session_id})
    if not result.ok:
        raise GraphQLError(
            "Failed to establish a session",
            extensions={"code": "LOGIN_FAILED"},
            original_error=result.error,
        )

    await apply_pg_settings(ctx.session, {SESSION_ID_SETTING: session_id})
    ctx.pg_settings[SESSION_ID_SETTING] = session_id

    row = await repository.get_current_user(ctx.session, ctx.schema_name)
    if row is None:
        raise GraphQLError("Failed to load the logged in user", extensions={"code": "LOGIN_FAILED"})
    return LoginPayload(user=UserType.from_row(row))


async def resolve_logout(info: Info) -> LogoutPayload:
    ctx = info.context
    await repository.call_logout(ctx.session, ctx.schema_name)
    await ctx.logout()
    return LogoutPayload(success=True)


class LoginPlugin(SchemaPlugin):
    name = "LoginPlugin"

    def build(self, builder: SchemaBuilder) -> None:
        builder.add_mutation(
            FieldSpec(
                kind=FieldKind.CUSTOM,
                name="login",
                resolver=resolve_login,
                description="Use this mutation to log in to your account.",
                plugin=self.name,
            )
        )
        builder.add_mutation(
            FieldSpec(
                kind=FieldKind.CUSTOM,
                name="logout",
                resolver=resolve_logout,
                plugin=self.name,
            )
        )
