"""Request-scoped identity models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SessionUser(BaseModel):
    """Principal attached to a request by the session middleware.

    Only the database session id is kept; everything else about the user is
    read from the database under row level security.
    """

    session_id: str | None = Field(
        default=None,
        max_length=64,
        description="Database session id (UUID) issued at login",
    )

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
