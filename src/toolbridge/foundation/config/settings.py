"""Environment-based configuration using pydantic-settings.

Example:
    >>> from toolbridge.foundation.config import get_settings
    >>> get_settings().remote.namespace_separator
    '__'

    # Or with environment variables:
    # TOOLBRIDGE_LOG_LEVEL=DEBUG
    # TOOLBRIDGE_SSE_DONE_SENTINEL=[END]

The logging settings take effect once ``configure_from_settings()`` from
``toolbridge.runtime.observability`` is called; nothing reads them implicitly.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="TOOLBRIDGE_LOG_", extra="ignore")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class SSESettings(BaseSettings):
    """Server-Sent-Event payload extraction."""

    model_config = SettingsConfigDict(env_prefix="TOOLBRIDGE_SSE_", extra="ignore")

    data_prefix: str = Field(default="data: ", min_length=1)
    done_sentinel: str = Field(default="[DONE]", min_length=1)


class RemoteSettings(BaseSettings):
    """Remote tool bridge defaults."""

    model_config = SettingsConfigDict(env_prefix="TOOLBRIDGE_REMOTE_", extra="ignore")

    namespace_separator: str = Field(default="__", min_length=1)
    namespaced: bool = True


class ToolsSettings(BaseSettings):
    """Defaults applied to newly declared tools."""

    model_config = SettingsConfigDict(env_prefix="TOOLBRIDGE_TOOLS_", extra="ignore")

    strict_schema: bool = False


class ToolbridgeSettings(BaseSettings):
    """Root settings, loaded from ``TOOLBRIDGE_*`` variables and an optional ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLBRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    sse: SSESettings = Field(default_factory=SSESettings)
    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    tools: ToolsSettings = Field(default_factory=ToolsSettings)


@lru_cache(maxsize=1)
def get_settings() -> ToolbridgeSettings:
    """Get the global settings instance (cached)."""
    return ToolbridgeSettings()


def clear_settings_cache() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
