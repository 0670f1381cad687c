"""Observability: structured logging."""

from .logging import (
    BoundLogger,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    LogRenderer,
    NoOpRenderer,
    configure_from_settings,
    configure_logging,
    get_logger,
)

__all__ = [
    "BoundLogger", "LogEntry", "LogRenderer",
    "ConsoleRenderer", "JsonRenderer", "NoOpRenderer",
    "configure_logging", "configure_from_settings", "get_logger",
]
