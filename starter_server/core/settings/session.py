"""Cookie session settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Sessions last three days, matching the database-side session expiry.
DEFAULT_SESSION_MAX_AGE = 3 * 24 * 60 * 60

# Only acceptable outside production
DEFAULT_SECRET = "change-me"


class SessionSettings(BaseSettings):
    """Signed cookie session configuration.

    Environment variables use SESSION_ prefix; the signing secret uses SECRET.
    """

    secret: SecretStr = Field(
        default=SecretStr(DEFAULT_SECRET),
        alias="SECRET",
        description="Secret used to sign the session cookie.",
    )
    cookie_name: str = Field(default="session", min_length=1, max_length=64)
    max_age: int = Field(default=DEFAULT_SESSION_MAX_AGE, ge=60)
    same_site: Literal["lax", "strict", "none"] = Field(default="lax")
    https_only: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def uses_default_secret(self) -> bool:
        return self.secret.get_secret_value() == DEFAULT_SECRET
