"""Per-request PostgreSQL settings.

Each GraphQL operation runs in a transaction whose transaction-local settings
identify the caller to row level security policies:

- ``role``: the visitor role every request assumes
- ``jwt.claims.session_id``: the logged-in session, when there is one
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import text

from starter_server.core.utils.identifiers import uuid_or_none

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession

logger = logging.getLogger(__name__)

__all__ = [
    "ROLE_SETTING",
    "SESSION_ID_SETTING",
    "apply_pg_settings",
    "compute_pg_settings",
]

ROLE_SETTING = "role"
SESSION_ID_SETTING = "jwt.claims.session_id"

# set_config(..., true) is the function form of SET LOCAL
_SET_CONFIG = text(
    "select set_config(el->>0, el->>1, true) "
    "from json_array_elements(cast(:settings as json)) el"
)


def compute_pg_settings(request: Any, role: str) -> dict[str, str | None]:
    """Compute the settings for one request. Never raises."""
    state = getattr(request, "state", None)
    user = getattr(state, "user", None) if state is not None else None
    session_id = uuid_or_none(getattr(user, "session_id", None)) if user is not None else None
    return {
        ROLE_SETTING: role,
        SESSION_ID_SETTING: session_id,
    }


async def apply_pg_settings(
    session: AsyncSession | AsyncConnection,
    settings: Mapping[str, str | None],
) -> None:
    """Set every non-None setting for the current transaction in one round trip."""
    pairs = [[key, str(value)] for key, value in settings.items() if value is not None]
    if not pairs:
        return
    await session.execute(_SET_CONFIG, {"settings": json.dumps(pairs)})
    logger.debug("Applied pg settings", extra={"pg_settings": [key for key, _ in pairs]})
