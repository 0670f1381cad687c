"""Tests for environment-based configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from toolbridge.foundation.config import ToolbridgeSettings, clear_settings_cache, get_settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = get_settings()
        assert settings.sse.data_prefix == "data: "
        assert settings.sse.done_sentinel == "[DONE]"
        assert settings.remote.namespace_separator == "__"
        assert settings.remote.namespaced is True
        assert settings.tools.strict_schema is False
        assert settings.logging.level == "INFO"

    def test_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOOLBRIDGE_LOG_LEVEL", "debug")
        monkeypatch.setenv("TOOLBRIDGE_LOG_FORMAT", "json")
        monkeypatch.setenv("TOOLBRIDGE_REMOTE_NAMESPACED", "false")
        clear_settings_cache()
        settings = get_settings()
        assert settings.logging.level == "DEBUG"
        assert settings.logging.format == "json"
        assert settings.remote.namespaced is False

    def test_invalid_values_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOOLBRIDGE_LOG_FORMAT", "xml")
        with pytest.raises(ValidationError):
            ToolbridgeSettings()
