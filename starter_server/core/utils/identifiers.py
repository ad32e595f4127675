"""Identifier validation helpers."""

from __future__ import annotations

import re

__all__ = ["UUID_PATTERN", "uuid_or_none"]

# Versions 1-5, RFC 4122 variant (8, 9, a, b)
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def uuid_or_none(value: str | int | None) -> str | None:
    """Return the lowercase canonical UUID string, or None for anything else.

    Falsy values (None, "", 0) short-circuit to None. Never raises.

    Example:
        >>> uuid_or_none("550E8400-E29B-41D4-A716-446655440000")
        '550e8400-e29b-41d4-a716-446655440000'
        >>> uuid_or_none("not-a-uuid") is None
        True
    """
    if not value:
        return None
    text = str(value)
    if UUID_PATTERN.fullmatch(text):
        return text.lower()
    return None
