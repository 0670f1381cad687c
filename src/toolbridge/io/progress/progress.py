"""Progress reporting for long-running tool calls.

Remote tool servers may emit progress notifications while a call runs. They
are forwarded to a caller-supplied callback as ToolCallProgressUpdate events,
keyed by tool call id and the tool's display name.

The callback is threaded explicitly: ``Tools.call_all(calls, on_progress=cb)``
hands each execute a CallContext carrying it. Delivery is best-effort: values
that do not increase are dropped, and a failing callback is logged and
ignored so it can never fail or block the underlying call.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, computed_field

logger = logging.getLogger("toolbridge.progress")


class ToolCallProgressUpdate(BaseModel):
    """Progress event for one tool call.

    Example:
        >>> update = ToolCallProgressUpdate(tool_call_id="c1", tool_name="files__scan", value=2, total=4)
        >>> update.fraction
        0.5
    """

    model_config = ConfigDict(frozen=True)

    tool_call_id: str | None
    tool_name: str
    value: float
    total: float | None = None
    message: str | None = None

    @computed_field
    @property
    def fraction(self) -> float | None:
        """Completion in [0, 1] when a positive total is known."""
        if self.total is None or self.total <= 0:
            return None
        return min(self.value / self.total, 1.0)


@runtime_checkable
class ProgressCallback(Protocol):
    """Receives progress updates. May be a plain function or a coroutine function."""

    def __call__(self, update: ToolCallProgressUpdate) -> None | Awaitable[None]: ...


@dataclass(slots=True)
class ProgressReporter:
    """Monotonic, failure-isolated delivery of progress for a single call."""

    callback: ProgressCallback | None
    tool_name: str
    tool_call_id: str | None = None
    _last: float | None = field(default=None, init=False)

    async def report(self, value: float, total: float | None = None, message: str | None = None) -> bool:
        """Deliver one update. Returns False when it was dropped."""
        if self.callback is None:
            return False
        if self._last is not None and value <= self._last:
            logger.debug("dropping non-increasing progress %s <= %s for %s", value, self._last, self.tool_name)
            return False
        self._last = value
        update = ToolCallProgressUpdate(
            tool_call_id=self.tool_call_id, tool_name=self.tool_name,
            value=value, total=total, message=message,
        )
        try:
            result = self.callback(update)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.warning("progress callback failed for %s", self.tool_name, exc_info=True)
        return True


@dataclass(frozen=True, slots=True)
class CallContext:
    """Per-call execution context passed to tools that declare a ``context`` argument."""

    call_id: str
    tool_name: str
    on_progress: ProgressCallback | None = None

    def reporter(self, display_name: str | None = None) -> ProgressReporter:
        """Create a reporter bound to this call."""
        return ProgressReporter(self.on_progress, display_name or self.tool_name, self.call_id)
