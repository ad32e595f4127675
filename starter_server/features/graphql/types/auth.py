"""GraphQL types for the login and logout mutations."""

from __future__ import annotations

import strawberry

from starter_server.features.graphql.types.users import UserType

__all__ = ["LoginInput", "LoginPayload", "LogoutPayload"]


@strawberry.input
class LoginInput:
    username: str = strawberry.field(description="The username or email address of the user")
    password: str


@strawberry.type
class LoginPayload:
    user: UserType


@strawberry.type
class LogoutPayload:
    success: bool | None = None
