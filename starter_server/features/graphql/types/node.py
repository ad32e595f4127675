"""Global object identifiers.

A node id is ``base64("<TypeName>:<primary key>")``, e.g. ``User:<uuid>``.
"""

from __future__ import annotations

import base64
import binascii

import strawberry

__all__ = ["Node", "decode_node_id", "encode_node_id"]


def encode_node_id(type_name: str, key: object) -> str:
    return base64.b64encode(f"{type_name}:{key}".encode()).decode("ascii")


def decode_node_id(node_id: str) -> tuple[str, str] | None:
    """Split a node id into ``(type_name, key)``; malformed ids yield None."""
    try:
        raw = base64.b64decode(node_id, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    type_name, sep, key = raw.partition(":")
    if not sep or not type_name or not key:
        return None
    return type_name, key


@strawberry.interface(description="An object with a globally unique identifier")
class Node:
    node_id: strawberry.ID = strawberry.field(
        description="Globally unique identifier, usable with the node query",
    )
