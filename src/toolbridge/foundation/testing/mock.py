"""In-memory remote tool connection for tests.

Provides MockConnection plus helpers for building remote definitions:
- Canned results per tool (text, CallToolResult, exception or callable)
- Simulated latency and progress notifications
- Invocation recording for verification
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from mcp import types

from toolbridge.ext.mcp.connection import RemoteProgressCallback

ProgressStep: TypeAlias = tuple[float, float | None, str | None]
Reply: TypeAlias = types.CallToolResult | str
Response: TypeAlias = Reply | BaseException | type[BaseException] | Callable[[dict[str, Any]], Reply | Awaitable[Reply]]


def text_result(*texts: str, is_error: bool = False) -> types.CallToolResult:
    """CallToolResult with one text block per argument."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=t) for t in texts],
        isError=is_error,
    )


def mock_tool(
    name: str,
    description: str | None = None,
    *,
    properties: dict[str, Any] | None = None,
    required: list[str] | None = None,
    title: str | None = None,
    strict: bool = False,
    defs: dict[str, Any] | None = None,
) -> types.Tool:
    """Remote tool definition with a simple object input schema.

    Example:
        >>> mock_tool("forecast", "Weather", properties={"city": {"type": "string"}}, required=["city"])
    """
    schema: dict[str, Any] = {"type": "object", "properties": properties or {}}
    if required:
        schema["required"] = list(required)
    if strict:
        schema["additionalProperties"] = False
    if defs:
        schema["$defs"] = dict(defs)
    return types.Tool(name=name, title=title, description=description, inputSchema=schema)


@dataclass(slots=True)
class RemoteInvocation:
    """Record of a single call_tool request."""
    name: str
    arguments: dict[str, Any]
    result: types.CallToolResult | None = None
    exception: BaseException | None = None


@dataclass
class MockConnection:
    """Scripted ToolConnection with invocation recording.

    Example:
        >>> conn = MockConnection("weather", tools=[mock_tool("forecast")],
        ...                       responses={"forecast": "Sunny"})
        >>> bridge = RemoteToolBridge([conn])
        >>> await bridge.execute(ToolCall(name="weather__forecast", id="c1"))
        >>> conn.assert_called_with("forecast")
    """
    server_name: str | None = "mock"
    tools: list[types.Tool] = field(default_factory=list)
    responses: dict[str, Response] = field(default_factory=dict)
    default_response: str = "mock response"
    delays: dict[str, float] = field(default_factory=dict)
    progress: dict[str, list[ProgressStep]] = field(default_factory=dict)
    invocations: list[RemoteInvocation] = field(default_factory=list)
    list_count: int = 0

    @property
    def call_count(self) -> int:
        return len(self.invocations)

    @property
    def called(self) -> bool:
        return self.call_count > 0

    @property
    def last_call(self) -> RemoteInvocation | None:
        return self.invocations[-1] if self.invocations else None

    def assert_called(self) -> None:
        if not self.called:
            raise AssertionError(f"Expected a call on {self.server_name!r}")

    def assert_not_called(self) -> None:
        if self.called:
            raise AssertionError(f"{self.server_name!r} called {self.call_count} times")

    def assert_called_with(self, name: str, **arguments: object) -> None:
        last = self.last_call
        if last is None:
            raise AssertionError(f"Expected {name!r} to be called")
        if last.name != name:
            raise AssertionError(f"Expected {name!r}, last call was {last.name!r}")
        for key, expected in arguments.items():
            if key not in last.arguments:
                raise AssertionError(f"Argument '{key}' not in call")
            if last.arguments[key] != expected:
                raise AssertionError(f"'{key}': expected {expected!r}, got {last.arguments[key]!r}")

    def clear(self) -> None:
        self.invocations.clear()
        self.list_count = 0

    async def list_tools(self) -> list[types.Tool]:
        self.list_count += 1
        return list(self.tools)

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None,
        progress_callback: RemoteProgressCallback | None = None,
    ) -> types.CallToolResult:
        invocation = RemoteInvocation(name=name, arguments=dict(arguments or {}))
        self.invocations.append(invocation)
        if (delay := self.delays.get(name, 0)) > 0:
            await asyncio.sleep(delay)
        if progress_callback is not None:
            for value, total, message in self.progress.get(name, ()):
                await progress_callback(value, total, message)
        try:
            result = await self._respond(name, invocation.arguments)
        except Exception as e:
            invocation.exception = e
            raise
        invocation.result = result
        return result

    async def _respond(self, name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        response = self.responses.get(name, self.default_response)
        if isinstance(response, BaseException) or (
            isinstance(response, type) and issubclass(response, BaseException)
        ):
            raise response
        if callable(response):
            response = response(arguments)
            if inspect.isawaitable(response):
                response = await response
        if isinstance(response, str):
            return text_result(response)
        return response
