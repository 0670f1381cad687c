"""Tools collection: the single entry point from tool calls to tool results.

For every call the collection:

1. resolves the tool by name (unknown names become an error result),
2. validates the raw arguments against the tool's schema,
3. parses them into typed values,
4. runs execute.

Calls in a batch run concurrently and each is isolated: validation or
execution failures become error results for that call only, and results come
back in input order. Only cancellation propagates.

Example:
    >>> tools = Tools([get_weather, search])
    >>> results = await tools.call_all(response.tool_calls)
    >>> history += [response.message, results_message(results)]
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator
from functools import partial
from typing import Any, overload

from toolbridge.foundation.core import (
    Tool,
    ToolCall,
    ToolResult,
    compatible,
    incompatible,
)
from toolbridge.foundation.core.tool import Supported
from toolbridge.foundation.errors import DefinitionError, ParameterValidationError, classify_exception
from toolbridge.io.progress import CallContext, ProgressCallback
from toolbridge.runtime.concurrency import map_ordered
from toolbridge.runtime.observability import get_logger

from .validation import PydanticSchemaValidator, SchemaValidator

log = get_logger("toolbridge.tools")


def describe_exception(exc: BaseException, tool_name: str) -> str:
    """Model-visible text for an execution failure.

    The exception's own message is used verbatim; an exception without one
    gets a generic line that names only its type.
    """
    message = str(exc).strip()
    return message or f"Tool '{tool_name}' failed with {type(exc).__name__}"


class Tools:
    """An immutable, ordered set of tools with unique names.

    Combining collections (``adding``, ``+``) returns a new collection that
    keeps this collection's validator.
    """

    __slots__ = ("_items", "_by_name", "_validator")

    def __init__(self, tools: Iterable[Tool] = (), *, validator: SchemaValidator | None = None) -> None:
        self._items: tuple[Tool, ...] = tuple(tools)
        self._by_name: dict[str, Tool] = {}
        for t in self._items:
            if t.name in self._by_name:
                raise DefinitionError(f"Duplicate tool name '{t.name}'")
            self._by_name[t.name] = t
        self._validator: SchemaValidator = validator or PydanticSchemaValidator()

    # ─────────────────────────────────────────────────────────────────
    # Lookup
    # ─────────────────────────────────────────────────────────────────

    def get(self, name: str) -> Tool | None:
        return self._by_name.get(name)

    @overload
    def __getitem__(self, key: int) -> Tool: ...
    @overload
    def __getitem__(self, key: str) -> Tool: ...

    def __getitem__(self, key: int | str) -> Tool:
        if isinstance(key, str):
            return self._by_name[key]
        return self._items[key]

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Tool):
            return self._by_name.get(item.name) is item
        return item in self._by_name

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Tools({self.names!r})"

    @property
    def names(self) -> list[str]:
        return [t.name for t in self._items]

    @property
    def validator(self) -> SchemaValidator:
        return self._validator

    # ─────────────────────────────────────────────────────────────────
    # Combining
    # ─────────────────────────────────────────────────────────────────

    def adding(self, *others: Tool | Iterable[Tool]) -> Tools:
        """New collection with the given tools (or collections) appended."""
        extra: list[Tool] = []
        for other in others:
            extra.extend([other] if isinstance(other, Tool) else other)
        return Tools([*self._items, *extra], validator=self._validator)

    def __add__(self, other: Tool | Iterable[Tool]) -> Tools:
        return self.adding(other)

    def __radd__(self, other: Iterable[Tool]) -> Tools:
        return Tools([*other, *self._items], validator=self._validator)

    def compatible(self, supported: Supported) -> Tools:
        """Tools whose declared result kinds the provider can carry."""
        return Tools(compatible(self._items, supported), validator=self._validator)

    def incompatible(self, supported: Supported) -> list[Tool]:
        return incompatible(self._items, supported)

    def definitions(self) -> list[dict[str, Any]]:
        """Name, description and input schema of every tool, for a provider request."""
        return [t.definition() for t in self._items]

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    async def call(self, call: ToolCall, *, on_progress: ProgressCallback | None = None) -> ToolResult:
        """Execute one call. Never raises except on cancellation."""
        call_log = log.bind_call(call.name, call.id)
        tool = self._by_name.get(call.name)
        if tool is None:
            call_log.warning("unknown tool")
            return ToolResult.error(f"Unknown tool: {call.name}", name=call.name, id=call.id)

        try:
            self._validator.validate(tool, call.parameters)
            args = tool.prepare_arguments(call.parameters)
        except ParameterValidationError as e:
            call_log.info("invalid arguments", error=str(e), parameter=e.parameter)
            return ToolResult.error(f"Input validation error: {e}", name=call.name, id=call.id)
        except Exception as e:
            call_log.warning("validator failed", error=str(e), error_type=type(e).__name__)
            return ToolResult.error(
                f"Input validation error: {describe_exception(e, call.name)}", name=call.name, id=call.id
            )

        context = CallContext(call_id=call.id, tool_name=tool.name, on_progress=on_progress)
        start = time.perf_counter()
        try:
            content = await tool.run(args, context)
        except Exception as e:
            call_log.warning(
                "execution failed",
                error_code=classify_exception(e),
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return ToolResult.error(describe_exception(e, call.name), name=call.name, id=call.id)

        call_log.debug(
            "executed",
            items=len(content),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return ToolResult(name=call.name, id=call.id, content=content)

    async def call_all(
        self,
        calls: Iterable[ToolCall],
        *,
        on_progress: ProgressCallback | None = None,
    ) -> list[ToolResult]:
        """Execute a batch concurrently; results follow input order.

        Cancelling the awaiting task cancels every in-flight call.
        """
        batch = list(calls)
        if not batch:
            return []
        with log.scope(batch_size=len(batch)):
            results = await map_ordered(partial(self.call, on_progress=on_progress), batch)
        failed = sum(1 for r in results if r.is_error)
        log.info("batch complete", calls=len(batch), failed=failed)
        return results
