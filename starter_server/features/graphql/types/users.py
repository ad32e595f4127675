"""GraphQL types for users.

Provides:
- UserType: a row of ``<schema>.users``
- UserPatch and the update inputs/payload used by the update mutations
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any
from uuid import UUID

import strawberry

from starter_server.features.graphql.types.node import Node, encode_node_id

__all__ = [
    "USER_PATCH_COLUMNS",
    "UpdateUserByIdInput",
    "UpdateUserByUsernameInput",
    "UpdateUserPayload",
    "UserPatch",
    "UserType",
]


@strawberry.type(name="User", description="A user who can log in to the application")
class UserType(Node):
    """GraphQL type for a users row.

    Rows come from raw SQL, so ``from_row`` takes any mapping.
    """

    id: UUID = strawberry.field(description="Unique identifier for the user")
    username: str = strawberry.field(description="Public-facing username (or 'handle') of the user")
    name: str | None = strawberry.field(description="Public-facing name (or pseudonym) of the user")
    avatar_url: str | None = strawberry.field(description="Optional avatar URL")
    is_admin: bool = strawberry.field(description="If true, the user has elevated privileges")
    is_verified: bool = strawberry.field(description="Whether the user has a verified email address")
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> UserType:
        """Convert a result row mapping to the GraphQL type."""
        return cls(
            node_id=strawberry.ID(encode_node_id("User", row["id"])),
            id=row["id"],
            username=row["username"],
            name=row.get("name"),
            avatar_url=row.get("avatar_url"),
            is_admin=bool(row.get("is_admin", False)),
            is_verified=bool(row.get("is_verified", False)),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


# Python attribute -> column; only these may be written by the update mutations
USER_PATCH_COLUMNS: dict[str, str] = {
    "username": "username",
    "name": "name",
    "avatar_url": "avatar_url",
}


@strawberry.input(description="Represents an update to a User. Fields that are unset will be left unchanged.")
class UserPatch:
    username: str | None = strawberry.UNSET
    name: str | None = strawberry.UNSET
    avatar_url: str | None = strawberry.UNSET

    def to_values(self) -> dict[str, Any]:
        """Return ``{column: value}`` for every field that was provided."""
        values = {}
        for attr, column in USER_PATCH_COLUMNS.items():
            value = getattr(self, attr)
            if value is not strawberry.UNSET:
                values[column] = value
        return values


@strawberry.input(description="All input for the updateUserById mutation")
class UpdateUserByIdInput:
    id: UUID
    patch: UserPatch


@strawberry.input(description="All input for the updateUserByUsername mutation")
class UpdateUserByUsernameInput:
    username: str
    patch: UserPatch


@strawberry.type(description="The output of our update User mutation")
class UpdateUserPayload:
    user: UserType | None = None
