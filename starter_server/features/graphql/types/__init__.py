"""Strawberry types exposed by the GraphQL schema."""

from __future__ import annotations

from starter_server.features.graphql.types.auth import LoginInput, LoginPayload, LogoutPayload
from starter_server.features.graphql.types.node import Node, decode_node_id, encode_node_id
from starter_server.features.graphql.types.users import (
    UpdateUserByIdInput,
    UpdateUserByUsernameInput,
    UpdateUserPayload,
    UserPatch,
    UserType,
)

__all__ = [
    "LoginInput",
    "LoginPayload",
    "LogoutPayload",
    "Node",
    "UpdateUserByIdInput",
    "UpdateUserByUsernameInput",
    "UpdateUserPayload",
    "UserPatch",
    "UserType",
    "decode_node_id",
    "encode_node_id",
]
