"""PostgreSQL connection settings.

Two connection strings are used:

- ``AUTH_DATABASE_URL`` connects as the unprivileged authenticator role that
  serves every GraphQL request (it switches to ``DATABASE_VISITOR`` per
  transaction).
- ``DATABASE_URL`` connects as the database owner. It backs the shared
  ``root_pg_pool`` used by trusted code such as the login mutation.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ASYNC_DRIVER = "postgresql+psycopg://"


def to_async_url(url: str) -> str:
    """Rewrite a libpq-style URL so SQLAlchemy uses the async psycopg3 driver."""
    for prefix in ("postgresql+psycopg2://", "postgresql://", "postgres://"):
        if url.startswith(prefix):
            return _ASYNC_DRIVER + url[len(prefix):]
    return url


class PostgresSettings(BaseSettings):
    """PostgreSQL connection and pool settings.

    Connection strings and the visitor role use their conventional,
    unprefixed names; pool tuning uses the DB_ prefix.
    """

    auth_dsn: str | None = Field(
        default=None,
        alias="AUTH_DATABASE_URL",
        description="Connection string for the schema-serving (authenticator) database role.",
    )
    owner_dsn: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="Connection string for the database owner role (root pool).",
    )
    visitor_role: str = Field(
        default="visitor",
        alias="DATABASE_VISITOR",
        min_length=1,
        max_length=63,
        description="Role applied to every GraphQL transaction.",
    )

    pool_size: int = Field(default=10, ge=1, le=100)
    max_overflow: int = Field(default=10, ge=0, le=100)
    pool_pre_ping: bool = Field(default=True)
    pool_recycle: int = Field(default=1800, ge=0, le=86400)
    echo: bool = Field(default=False, description="Echo SQL statements to logs (debug only).")

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @field_validator("auth_dsn", "owner_dsn", mode="after")
    @classmethod
    def normalize_driver(cls, v: str | None) -> str | None:
        """Force the async psycopg driver onto plain postgres:// URLs."""
        return to_async_url(v) if v else v

    @property
    def is_configured(self) -> bool:
        """Check if both connection strings are present."""
        return bool(self.auth_dsn and self.owner_dsn)
