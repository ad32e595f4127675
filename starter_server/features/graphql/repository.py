"""SQL access for the GraphQL resolvers.

Every statement runs on whatever session or connection the caller passes in,
so reads and writes happen inside the operation's transaction and are subject
to row level security under the settings applied for the request.

``schema`` is validated as a plain lowercase identifier by ``GraphQLSettings``
before it is interpolated.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import text

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession

logger = logging.getLogger(__name__)

__all__ = [
    "PRIVATE_SCHEMA",
    "call_login",
    "call_logout",
    "get_current_user",
    "get_user_by",
    "list_users",
    "update_user_by",
]

PRIVATE_SCHEMA = "app_private"

USER_COLUMNS = "id, username, name, avatar_url, is_admin, is_verified, created_at, updated_at"

# Columns that identify a single user row
LOOKUP_COLUMNS = frozenset({"id", "username"})
# Columns the update mutations may write
WRITABLE_COLUMNS = frozenset({"username", "name", "avatar_url"})


def _lookup_column(column: str) -> str:
    if column not in LOOKUP_COLUMNS:
        msg = f"Not a unique user column: {column}"
        raise ValueError(msg)
    return column


async def list_users(
    session: AsyncSession,
    schema: str,
    *,
    limit: int,
    offset: int = 0,
) -> list[Mapping[str, Any]]:
    """Return one page of users ordered by primary key."""
    result = await session.execute(
        text(
            f"select {USER_COLUMNS} from {schema}.users "  # noqa: S608
            "order by id asc limit :limit offset :offset"
        ),
        {"limit": limit, "offset": offset},
    )
    return list(result.mappings().all())


async def get_user_by(
    session: AsyncSession,
    schema: str,
    column: str,
    value: UUID | str,
) -> Mapping[str, Any] | None:
    """Fetch a user by a unique column (``id`` or ``username``)."""
    column = _lookup_column(column)
    result = await session.execute(
        text(f"select {USER_COLUMNS} from {schema}.users where {column} = :value"),  # noqa: S608
        {"value": value},
    )
    return result.mappings().first()


async def get_current_user(session: AsyncSession, schema: str) -> Mapping[str, Any] | None:
    """Return the user owning ``jwt.claims.session_id``, if any."""
    result = await session.execute(
        text(
            f'select {USER_COLUMNS} from {schema}."current_user"() u '  # noqa: S608
            "where not (u is null)"
        )
    )
    return result.mappings().first()


async def update_user_by(
    session: AsyncSession,
    schema: str,
    column: str,
    value: UUID | str,
    values: Mapping[str, Any],
) -> Mapping[str, Any] | None:
    """Update one user and return the new row, or None when nothing matched.

    An empty ``values`` mapping reads the row back unchanged.
    """
    column = _lookup_column(column)
    if not values:
        return await get_user_by(session, schema, column, value)
    unknown = set(values) - WRITABLE_COLUMNS
    if unknown:
        msg = f"Columns are not writable: {sorted(unknown)}"
        raise ValueError(msg)

    assignments = ", ".join(f"{name} = :set_{name}" for name in values)
    params = {f"set_{name}": new_value for name, new_value in values.items()}
    params["value"] = value
    result = await session.execute(
        text(
            f"update {schema}.users set {assignments} "  # noqa: S608
            f"where {column} = :value returning {USER_COLUMNS}"
        ),
        params,
    )
    return result.mappings().first()


async def call_login(
    connection: AsyncSession | AsyncConnection,
    username: str,
    password: str,
) -> Mapping[str, Any] | None:
    """Verify credentials; returns the new session row or None."""
    result = await connection.execute(
        text(
            f"select sessions.* from {PRIVATE_SCHEMA}.login(:username, :password) sessions "
            "where not (sessions is null)"
        ),
        {"username": username, "password": password},
    )
    return result.mappings().first()


async def call_logout(session: AsyncSession, schema: str) -> None:
    """Delete the current database session."""
    await session.execute(text(f"select {schema}.logout()"))
