"""Query and mutation fields for ``<schema>.users``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from graphql import GraphQLError
from strawberry.types import Info

from starter_server.features.graphql import repository
from starter_server.features.graphql.inflection import TableInfo
from starter_server.features.graphql.plugins.base import SchemaPlugin
from starter_server.features.graphql.schema_builder import FieldKind, FieldSpec
from starter_server.features.graphql.types.users import (
    UpdateUserByIdInput,
    UpdateUserByUsernameInput,
    UpdateUserPayload,
    UserType,
)

if TYPE_CHECKING:
    from starter_server.features.graphql.schema_builder import SchemaBuilder

logger = logging.getLogger(__name__)

__all__ = ["USERS_TABLE", "UsersMutationPlugin", "UsersQueryPlugin", "page_size"]

USERS_TABLE = TableInfo(name="users", singular="user", plural="users", primary_key=("id",))


def page_size(first: int | None, cap: int) -> int:
    """Apply the pagination cap to a requested page size.

    Raises:
        GraphQLError: If ``first`` is negative.
    """
    if first is None:
        return cap
    if first < 0:
        raise GraphQLError(
            "Argument 'first' must be a non-negative integer",
            extensions={"code": "BAD_USER_INPUT"},
        )
    return min(first, cap)


async def resolve_all_users(
    info: Info,
    first: int | None = None,
    offset: int | None = None,
) -> list[UserType]:
    """Reads a set of `User`, ordered by primary key."""
    ctx = info.context
    if offset is not None and offset < 0:
        raise GraphQLError(
            "Argument 'offset' must be a non-negative integer",
            extensions={"code": "BAD_USER_INPUT"},
        )
    rows = await repository.list_users(
        ctx.session,
        ctx.schema_name,
        limit=page_size(first, ctx.pagination_cap),
        offset=offset or 0,
    )
    return [UserType.from_row(row) for row in rows]


async def resolve_user_by_id(info: Info, id: UUID) -> UserType | None:  # noqa: A002
    ctx = info.context
    row = await repository.get_user_by(ctx.session, ctx.schema_name, "id", id)
    return UserType.from_row(row) if row else None


async def resolve_user_by_username(info: Info, username: str) -> UserType | None:
    ctx = info.context
    row = await repository.get_user_by(ctx.session, ctx.schema_name, "username", username)
    return UserType.from_row(row) if row else None


async def resolve_current_user(info: Info) -> UserType | None:
    """The currently logged in user (or null if not logged in)."""
    ctx = info.context
    row = await repository.get_current_user(ctx.session, ctx.schema_name)
    return UserType.from_row(row) if row else None


class UsersQueryPlugin(SchemaPlugin):
    name = "UsersQueryPlugin"

    def build(self, builder: SchemaBuilder) -> None:
        builder.add_query(
            FieldSpec(
                kind=FieldKind.ALL_ROWS,
                table=USERS_TABLE,
                resolver=resolve_all_users,
                description="Reads a set of `User`.",
                plugin=self.name,
            )
        )
        builder.add_query(
            FieldSpec(
                kind=FieldKind.ROW_BY_KEY,
                table=USERS_TABLE,
                keys=("id",),
                resolver=resolve_user_by_id,
                plugin=self.name,
            )
        )
        builder.add_query(
            FieldSpec(
                kind=FieldKind.ROW_BY_KEY,
                table=USERS_TABLE,
                keys=("username",),
                resolver=resolve_user_by_username,
                plugin=self.name,
            )
        )
        builder.add_query(
            FieldSpec(
                kind=FieldKind.FUNCTION,
                name="current_user",
                resolver=resolve_current_user,
                description="The currently logged in user (or null if not logged in).",
                plugin=self.name,
            )
        )


def _not_updated() -> GraphQLError:
    return GraphQLError(
        "No values were updated in collection 'users' because no values you asked "
        "to update exist or you are not authorised.",
        extensions={"code": "NOT_FOUND"},
    )


async def resolve_update_user_by_id(info: Info, input: UpdateUserByIdInput) -> UpdateUserPayload:  # noqa: A002
    """Updates a single `User` using a unique key and a patch."""
    ctx = info.context
    row = await repository.update_user_by(
        ctx.session, ctx.schema_name, "id", input.id, input.patch.to_values()
    )
    if row is None:
        raise _not_updated()
    return UpdateUserPayload(user=UserType.from_row(row))


async def resolve_update_user_by_username(
    info: Info,
    input: UpdateUserByUsernameInput,  # noqa: A002
) -> UpdateUserPayload:
    """Updates a single `User` using a unique key and a patch."""
    ctx = info.context
    row = await repository.update_user_by(
        ctx.session, ctx.schema_name, "username", input.username, input.patch.to_values()
    )
    if row is None:
        raise _not_updated()
    return UpdateUserPayload(user=UserType.from_row(row))


class UsersMutationPlugin(SchemaPlugin):
    name = "UsersMutationPlugin"

    def build(self, builder: SchemaBuilder) -> None:
        builder.add_mutation(
            FieldSpec(
                kind=FieldKind.UPDATE_BY_KEY,
                table=USERS_TABLE,
                keys=("id",),
                resolver=resolve_update_user_by_id,
                description="Updates a single `User` using a unique key and a patch.",
                plugin=self.name,
            )
        )
        builder.add_mutation(
            FieldSpec(
                kind=FieldKind.UPDATE_BY_KEY,
                table=USERS_TABLE,
                keys=("username",),
                resolver=resolve_update_user_by_username,
                description="Updates a single `User` using a unique key and a patch.",
                plugin=self.name,
            )
        )
