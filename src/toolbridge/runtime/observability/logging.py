"""Structured logging for tool execution with context propagation.

- Tool call context binding (tool name, call id)
- Human-readable console output for development, JSON Lines for production
- Scoped context that follows asyncio tasks via a ContextVar

Quick Start:
    >>> from toolbridge.runtime.observability import configure_logging, get_logger
    >>> configure_logging(format="console")
    >>> log = get_logger("tools").bind_call("get_weather", "call_1")
    >>> log.info("executing", attempt=1)

Until configured, output goes to a console renderer at INFO. Call
``configure_from_settings()`` once at startup to apply ``TOOLBRIDGE_LOG_LEVEL``
and ``TOOLBRIDGE_LOG_FORMAT``.
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, TextIO, runtime_checkable

import orjson

_log_context: ContextVar[dict[str, Any]] = ContextVar("toolbridge_log_context", default={})


@dataclass(slots=True)
class LogEntry:
    """A single rendered log record."""

    timestamp: float
    level: str
    event: str
    context: dict[str, Any]

    @property
    def ts_iso(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """HH:MM:SS.mmm"""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


@runtime_checkable
class LogRenderer(Protocol):
    """Protocol for log output renderers."""

    def render(self, entry: LogEntry) -> None: ...


_COLORS = {"reset": "\033[0m", "dim": "\033[2m", "bold": "\033[1m", "cyan": "\033[36m", "red": "\033[31m"}
_NO_COLORS = dict.fromkeys(_COLORS, "")
_LEVEL_COLORS = {"debug": "\033[34m", "info": "\033[32m", "warning": "\033[33m", "error": "\033[31m"}


@dataclass(slots=True)
class ConsoleRenderer:
    """Format: timestamp [level] event key=value ..."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None  # None = auto-detect

    def __post_init__(self) -> None:
        if self.colors is None:
            self.colors = getattr(self.output, "isatty", lambda: False)()

    def render(self, entry: LogEntry) -> None:
        c = _COLORS if self.colors else _NO_COLORS
        level = _LEVEL_COLORS.get(entry.level, "") if self.colors else ""
        parts = [f"{c['dim']}{entry.ts_human}{c['reset']}",
                 f"{level}[{entry.level}]{c['reset']}",
                 f"{c['bold']}{entry.event}{c['reset']}"]
        parts += [f"{c['cyan']}{k}{c['reset']}={v!r}" if isinstance(v, str) and " " in v else f"{c['cyan']}{k}{c['reset']}={v}"
                  for k, v in sorted(entry.context.items()) if k != "exc_info"]
        print(" ".join(parts), file=self.output)
        if "exc_info" in entry.context:
            print(f"{c['red']}{entry.context['exc_info']}{c['reset']}", file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output for log aggregation."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        line = orjson.dumps(
            {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event, **entry.context},
            option=orjson.OPT_NON_STR_KEYS,
            default=str,
        ).decode()
        print(line, file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Silent renderer."""

    def render(self, entry: LogEntry) -> None:
        pass


_renderer: LogRenderer | None = None
_default_level: int = logging.INFO


@dataclass(slots=True)
class BoundLogger:
    """Structured logger with bound context. bind() returns a new logger with merged context."""

    context: dict[str, Any] = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int | None = None

    def bind(self, **kw: Any) -> BoundLogger:
        return BoundLogger(context={**self.context, **kw}, _renderer=self._renderer, _level=self._level)

    def bind_call(self, tool: str, call_id: str, **kw: Any) -> BoundLogger:
        """Bind tool call context."""
        return self.bind(tool=tool, call_id=call_id, **kw)

    def _log(self, level: int, event: str, **kw: Any) -> None:
        if level < (self._level if self._level is not None else _default_level):
            return
        merged = {**_log_context.get(), **self.context, **kw}
        (self._renderer or _get_renderer()).render(
            LogEntry(time.time(), logging.getLevelName(level).lower(), event, merged)
        )

    def debug(self, event: str, **kw: Any) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, **kw: Any) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, **kw: Any) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, **kw: Any) -> None: self._log(logging.ERROR, event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log error with the active exception's traceback."""
        self._log(logging.ERROR, event, exc_info=traceback.format_exc(), **kw)

    def scope(self, **kw: Any) -> LogScope:
        """Scoped context for every logger in the current task.

        Example:
            >>> with log.scope(batch="b1"):
            ...     log.info("processing")  # includes batch
        """
        return LogScope(kw)


class LogScope:
    """Context manager for scoped log context."""

    __slots__ = ("_ctx", "_token")

    def __init__(self, ctx: dict[str, Any]) -> None:
        self._ctx, self._token = ctx, None

    def __enter__(self) -> None:
        self._token = _log_context.set({**_log_context.get(), **self._ctx})

    def __exit__(self, *_: object) -> None:
        if self._token is not None:
            _log_context.reset(self._token)


def configure_logging(
    format: str = "console",  # noqa: A002
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Configure global structured logging. Format: "console", "json" or "none"."""
    global _renderer, _default_level
    _default_level = getattr(logging, level.upper(), logging.INFO)
    match format:
        case "console": renderer: LogRenderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
        case "json": renderer = JsonRenderer(output=output or sys.stdout)
        case "none": renderer = NoOpRenderer()
        case _: raise ValueError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")
    _renderer = renderer
    return renderer


def configure_from_settings() -> LogRenderer:
    """Configure logging from TOOLBRIDGE_LOG_* settings."""
    from toolbridge.foundation.config import get_settings
    settings = get_settings().logging
    return configure_logging(settings.format, settings.level)


def get_logger(name: str | None = None, **initial_context: Any) -> BoundLogger:
    """Get a structured logger. Name is added to context as 'logger'."""
    ctx = {**initial_context, **({"logger": name} if name else {})}
    return BoundLogger(context=ctx)


def _get_renderer() -> LogRenderer:
    global _renderer
    if _renderer is None:
        _renderer = ConsoleRenderer()
    return _renderer
