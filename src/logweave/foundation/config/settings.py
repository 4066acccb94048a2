"""Environment-based configuration using pydantic-settings.

Every field except ``environment`` defaults to None: an unset value lets the core
plugins fill in their defaults (set-if-absent), while anything set in the
environment counts as explicit configuration and wins.

Example:
    >>> from logweave.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.level is None
    True

    # Or with environment variables:
    # LOGWEAVE_LEVEL=debug
    # LOGWEAVE_TIMESTAMP=false
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogweaveSettings(BaseSettings):
    """Root settings for logweave loggers.

    Example environment variables:
        LOGWEAVE_NAME=checkout
        LOGWEAVE_LEVEL=DEBUG
        LOGWEAVE_FORMAT=json
        LOGWEAVE_COLORS=false
        LOGWEAVE_ENVIRONMENT=production
    """

    model_config = SettingsConfigDict(
        env_prefix="LOGWEAVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
        populate_by_name=True,
    )

    name: str | None = Field(default=None, description="Logger name bound to every entry")
    level: str | None = Field(default=None, description="Minimum level of the root logger")
    format: Literal["json", "pretty", "auto"] | None = None
    colors: bool | None = None
    timestamp: bool | None = Field(default=None, description="Stamp entries with epoch milliseconds")
    source: bool | None = Field(default=None, description="Add the call site file and line to entries")
    # PYTHON_ENV is the conventional fallback; free-form, only "production" is special
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("LOGWEAVE_ENVIRONMENT", "PYTHON_ENV"),
        description="Deployment environment name",
    )

    @field_validator("level", "format", "environment", mode="before")
    @classmethod
    def _lower(cls, v: object) -> object:
        return v.lower() if isinstance(v, str) else v

    @computed_field
    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @computed_field
    @property
    def is_development(self) -> bool:
        return not self.is_production


@lru_cache(maxsize=1)
def get_settings() -> LogweaveSettings:
    """Get the process-wide settings instance (cached)."""
    return LogweaveSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() rereads the environment."""
    get_settings.cache_clear()
