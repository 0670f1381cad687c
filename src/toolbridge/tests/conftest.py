"""Shared fixtures: fresh settings per test and silent structured logs."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from toolbridge.foundation.config import clear_settings_cache
from toolbridge.runtime.observability import configure_logging


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def quiet_logs() -> Iterator[None]:
    configure_logging("none")
    yield
    configure_logging("none")
