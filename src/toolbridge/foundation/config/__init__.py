"""Configuration management via pydantic-settings."""

from .settings import (
    LoggingSettings,
    RemoteSettings,
    SSESettings,
    ToolbridgeSettings,
    ToolsSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "ToolbridgeSettings", "LoggingSettings", "SSESettings", "RemoteSettings", "ToolsSettings",
    "get_settings", "clear_settings_cache",
]
