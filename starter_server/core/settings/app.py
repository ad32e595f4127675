"""Application settings for FastAPI configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "test", "production"]


class AppSettings(BaseSettings):
    """FastAPI application settings.

    Environment variables use APP_ prefix, except the runtime mode which
    follows the conventional NODE_ENV name shared with the frontend tooling.
    Example: NODE_ENV=development, APP_TITLE="Starter API"
    """

    service_name: str = Field(
        default="starter-server",
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
        description="Service name for logging (lowercase, hyphens allowed)",
    )
    title: str = Field(
        default="Starter API",
        min_length=1,
        max_length=200,
        description="API title",
    )
    version: str = Field(
        default="1.0.0",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9]+)?$",
        description="API version (semver format)",
    )
    environment: Environment = Field(
        default="production",
        alias="NODE_ENV",
        description="Runtime mode: development|test|production",
    )
    host: str = Field(default="0.0.0.0", description="Bind host for uvicorn")  # noqa: S104
    port: int = Field(default=5678, ge=1, le=65535, description="Bind port for uvicorn")

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running under the test suite."""
        return self.environment == "test"
