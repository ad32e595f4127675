"""Relay-style ``node(nodeId: ID!)`` lookup."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any
from uuid import UUID

import strawberry
from strawberry.types import Info

from starter_server.features.graphql import repository
from starter_server.features.graphql.plugins.base import SchemaPlugin
from starter_server.features.graphql.schema_builder import FieldKind, FieldSpec
from starter_server.features.graphql.types.node import Node, decode_node_id
from starter_server.features.graphql.types.users import UserType

if TYPE_CHECKING:
    from starter_server.features.graphql.schema_builder import SchemaBuilder

logger = logging.getLogger(__name__)

__all__ = ["NodePlugin"]


async def _load_user(info: Info, key: str) -> UserType | None:
    try:
        user_id = UUID(key)
    except ValueError:
        return None
    ctx = info.context
    row = await repository.get_user_by(ctx.session, ctx.schema_name, "id", user_id)
    return UserType.from_row(row) if row else None


NODE_LOADERS: Mapping[str, Callable[[Info, str], Awaitable[Any]]] = {
    "User": _load_user,
}


async def resolve_node(info: Info, node_id: strawberry.ID) -> Node | None:
    """Fetches an object given its globally unique ``ID``."""
    decoded = decode_node_id(node_id)
    if decoded is None:
        logger.debug("Malformed node id", extra={"node_id": node_id})
        return None
    type_name, key = decoded
    loader = NODE_LOADERS.get(type_name)
    if loader is None:
        return None
    return await loader(info, key)


class NodePlugin(SchemaPlugin):
    name = "NodePlugin"

    def build(self, builder: SchemaBuilder) -> None:
        builder.add_query(
            FieldSpec(
                kind=FieldKind.CUSTOM,
                name="node",
                resolver=resolve_node,
                description="Fetches an object given its globally unique `ID`.",
                plugin=self.name,
            )
        )
