"""GraphQL server configuration settings.

Controls the GraphQL endpoint, subscriptions, plugin lists, schema export and
query limits. Environment variables use GRAPHQL_ prefix; ``HIDE_QUERY_COST``
keeps its historical unprefixed name.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PAGINATION_CAP = 50
DEFAULT_DEPTH_LIMIT = 12
DEFAULT_COST_LIMIT = 30000
DEFAULT_BATCH_MAX_OPERATIONS = 10

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def int_or_default(value: Any, default: int) -> int:
    """Parse a leading integer, falling back to ``default`` when absent or zero."""
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value) or default
    if isinstance(value, int):
        return value or default
    match = _LEADING_INT.match(str(value))
    if not match:
        return default
    return int(match.group(1)) or default


class GraphQLSettings(BaseSettings):
    """GraphQL server configuration.

    Environment variables use GRAPHQL_ prefix.
    Example: GRAPHQL_PATH=/graphql, GRAPHQL_DEPTH_LIMIT=12
    """

    path: str = Field(
        default="/graphql",
        min_length=1,
        max_length=255,
        pattern=r"^/.*$",
        description="GraphQL endpoint path",
    )
    schema_name: str = Field(
        default="app_public",
        min_length=1,
        max_length=63,
        pattern=r"^[a-z_][a-z0-9_]*$",
        description="PostgreSQL schema exposed through GraphQL",
    )

    subscriptions_enabled: bool = Field(
        default=True,
        description="Enable GraphQL subscriptions (WebSocket)",
    )

    # Plugin lists are plugin names, resolved against the plugin registry
    append_plugins: tuple[str, ...] = Field(
        default=("SimplifyInflectorPlugin", "PrimaryKeyMutationsOnlyPlugin", "LoginPlugin"),
        description="Plugins appended after the core plugins, in order",
    )
    skip_plugins: tuple[str, ...] = Field(
        default=("NodePlugin",),
        description="Plugins removed from the schema build",
    )

    batching_enabled: bool = Field(
        default=True,
        description="Accept a JSON array of operations in one POST",
    )
    batch_max_operations: int = Field(
        default=DEFAULT_BATCH_MAX_OPERATIONS,
        ge=1,
        le=100,
        description="Maximum operations in one batched request",
    )

    # Query limits
    pagination_cap: int = Field(
        default=DEFAULT_PAGINATION_CAP,
        description="Maximum page size for list fields",
    )
    depth_limit: int = Field(
        default=DEFAULT_DEPTH_LIMIT,
        description="Maximum query nesting depth",
    )
    cost_limit: int = Field(
        default=DEFAULT_COST_LIMIT,
        description="Maximum query cost score",
    )
    hide_query_cost: int = Field(
        default=0,
        alias="HIDE_QUERY_COST",
        description="Values >= 1 hide the computed cost from responses",
    )

    # Development-only schema export
    export_gql_schema_path: Path = Field(default=Path("data/schema.graphql"))
    export_json_schema_path: Path = Field(default=Path("data/schema.json"))

    model_config = SettingsConfigDict(
        env_prefix="GRAPHQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @field_validator("pagination_cap", mode="before")
    @classmethod
    def parse_pagination_cap(cls, v: Any) -> int:
        return int_or_default(v, DEFAULT_PAGINATION_CAP)

    @field_validator("depth_limit", mode="before")
    @classmethod
    def parse_depth_limit(cls, v: Any) -> int:
        return int_or_default(v, DEFAULT_DEPTH_LIMIT)

    @field_validator("cost_limit", mode="before")
    @classmethod
    def parse_cost_limit(cls, v: Any) -> int:
        return int_or_default(v, DEFAULT_COST_LIMIT)

    @field_validator("hide_query_cost", mode="before")
    @classmethod
    def parse_hide_query_cost(cls, v: Any) -> int:
        return int_or_default(v, 0)

    @property
    def expose_query_cost(self) -> bool:
        """Whether the computed query cost is returned to clients."""
        return self.hide_query_cost < 1
