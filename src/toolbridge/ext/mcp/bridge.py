"""Remote tool bridge: many MCP servers presented as one Tools collection.

The bridge owns a cache of server names, per-server tool listings and a
route table from presented tool name to (connection index, remote name).
The cache is only touched under the bridge's lock, so concurrent ``tools()``
and ``execute()`` calls see a consistent view.

Naming:
    Servers keep their self-reported name; duplicates get ``-2``, ``-3``...
    in connection order, and unnamed servers become ``server-<n>``. Tools are
    presented as ``<server>__<tool>`` unless ``namespaced=False``, which fails
    with ToolNameConflictError when two servers share a bare tool name.

Example:
    >>> bridge = RemoteToolBridge([weather_conn, files_conn])
    >>> tools = await bridge.tools()
    >>> tools.names
    ['weather__forecast', 'files__read']
    >>> results = await tools.call_all(response.tool_calls, on_progress=print)
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable, Sequence
from functools import partial
from typing import Any

from mcp import types

from toolbridge.foundation.config import get_settings
from toolbridge.foundation.core import Content, Tool, ToolCall, ToolResult
from toolbridge.foundation.errors import ConnectionNotFoundError, DefinitionError, ToolNameConflictError, ToolNotFoundError
from toolbridge.foundation.registry import Tools
from toolbridge.io.progress import CallContext, ProgressCallback, ProgressReporter
from toolbridge.runtime.concurrency import gather_ordered
from toolbridge.runtime.observability import get_logger

from .connection import RemoteProgressCallback, ToolConnection
from .conversions import remote_title, result_from_remote, to_remote_arguments, tool_from_remote, tool_result_from_remote

log = get_logger("toolbridge.bridge")


def disambiguate(names: Sequence[str | None]) -> list[str]:
    """Unique server names in connection order; the first occurrence keeps the bare name."""
    seen: dict[str, int] = {}
    unique: list[str] = []
    for i, name in enumerate(names):
        base = name or f"server-{i + 1}"
        count = seen.get(base, 0) + 1
        seen[base] = count
        unique.append(base if count == 1 else f"{base}-{count}")
    return unique


def _progress_forwarder(reporter: ProgressReporter) -> RemoteProgressCallback:
    async def forward(progress: float, total: float | None, message: str | None) -> None:
        await reporter.report(progress, total, message)
    return forward


class RemoteToolBridge:
    """Tools of several remote connections, namespaced and routed back on execute."""

    __slots__ = ("_connections", "_separator", "_namespaced", "_lock", "_server_names", "_listings", "_routes")

    def __init__(
        self,
        connections: Iterable[ToolConnection],
        *,
        separator: str | None = None,
        namespaced: bool | None = None,
    ) -> None:
        remote = get_settings().remote
        self._connections: tuple[ToolConnection, ...] = tuple(connections)
        self._separator = separator or remote.namespace_separator
        self._namespaced = remote.namespaced if namespaced is None else namespaced
        self._lock = asyncio.Lock()
        self._server_names: list[str] = []
        self._listings: dict[int, list[types.Tool]] = {}
        self._routes: dict[str, tuple[int, str]] = {}

    def __repr__(self) -> str:
        return f"RemoteToolBridge(connections={len(self._connections)}, separator={self._separator!r})"

    @property
    def connections(self) -> tuple[ToolConnection, ...]:
        return self._connections

    @property
    def separator(self) -> str:
        return self._separator

    async def connection(self, server: str | int) -> ToolConnection:
        """Connection by index or disambiguated server name."""
        async with self._lock:
            names = self._ensure_names()
        if isinstance(server, int):
            if 0 <= server < len(self._connections):
                return self._connections[server]
        elif server in names:
            return self._connections[names.index(server)]
        raise ConnectionNotFoundError(server)

    # ─────────────────────────────────────────────────────────────────
    # Cache (lock held by callers)
    # ─────────────────────────────────────────────────────────────────

    def _ensure_names(self) -> list[str]:
        if not self._server_names:
            self._server_names = disambiguate([c.server_name for c in self._connections])
        return self._server_names

    async def _listing(self, index: int) -> list[types.Tool]:
        if (cached := self._listings.get(index)) is not None:
            return cached
        start = time.perf_counter()
        listed = await self._connections[index].list_tools()
        self._listings[index] = listed
        log.debug(
            "listed tools",
            server=self._server_names[index],
            count=len(listed),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return listed

    async def _load(self, force_refresh: bool) -> list[list[types.Tool]]:
        if force_refresh:
            self._reset()
        self._ensure_names()
        return await gather_ordered([partial(self._listing, i) for i in range(len(self._connections))])

    def _reset(self) -> None:
        self._server_names = []
        self._listings.clear()
        self._routes.clear()

    def _resolve(self, name: str) -> tuple[int, str]:
        if (route := self._routes.get(name)) is not None:
            return route
        server, sep, bare = name.partition(self._separator)
        if sep and bare and server in self._server_names:
            return self._server_names.index(server), bare
        if len(self._connections) == 1:
            return 0, name
        raise ToolNotFoundError(name)

    # ─────────────────────────────────────────────────────────────────
    # Tools
    # ─────────────────────────────────────────────────────────────────

    def _executor(self, index: int, remote_name: str, display_name: str):
        connection = self._connections[index]

        async def execute(args: dict[str, Any], context: CallContext | None = None) -> list[Content]:
            forward = None
            if context is not None and context.on_progress is not None:
                forward = _progress_forwarder(context.reporter(display_name))
            result = await connection.call_tool(remote_name, to_remote_arguments(args), forward)
            return result_from_remote(result)

        return execute

    def _wrap_or_skip(self, index: int, remote: types.Tool, name: str) -> Tool | None:
        """Remote definition as a Tool; None (logged) when the definition is unusable."""
        try:
            return tool_from_remote(remote, self._executor(index, remote.name, remote_title(remote)), name=name)
        except DefinitionError as e:
            log.warning("skipping remote tool", server=self._server_names[index], tool=remote.name, error=str(e))
            return None

    async def tools(self, namespaced: bool | None = None, force_refresh: bool = False) -> Tools:
        """Every remote tool as a Tool, routed back to its server on execute.

        Raises:
            ToolNameConflictError: ``namespaced=False`` and two servers share a tool name
        """
        namespaced = self._namespaced if namespaced is None else namespaced
        async with self._lock:
            listings = await self._load(force_refresh)
            names = self._server_names
            wrapped: list[Tool] = []
            routes: dict[str, tuple[int, str]] = {}
            for index, listing in enumerate(listings):
                for remote in listing:
                    if namespaced:
                        presented = f"{names[index]}{self._separator}{remote.name}"
                    else:
                        presented = remote.name
                        if (owner := routes.get(presented)) is not None and owner[0] != index:
                            raise ToolNameConflictError(presented, [names[owner[0]], names[index]])
                    if (tool := self._wrap_or_skip(index, remote, presented)) is None:
                        continue
                    routes[presented] = (index, remote.name)
                    wrapped.append(tool)
            # committed only once the whole listing is conflict free
            self._routes.update(routes)
        log.info("remote tools ready", servers=len(names), tools=len(wrapped), namespaced=namespaced)
        return Tools(wrapped)

    async def tool(self, name: str, force_refresh: bool = False) -> Tool | None:
        """One remote tool by namespaced or bare name; None when no server has it.

        A bare name returns the first server's tool of that name, named bare.
        The bare name is routable by ``execute`` only when one server owns it.
        """
        async with self._lock:
            listings = await self._load(force_refresh)
            server, sep, bare = name.partition(self._separator)
            if sep and bare and server in self._server_names:
                index = self._server_names.index(server)
                for remote in listings[index]:
                    if remote.name == bare and (tool := self._wrap_or_skip(index, remote, name)) is not None:
                        self._routes[name] = (index, bare)
                        return tool
            owners = [(i, r) for i, listing in enumerate(listings) for r in listing if r.name == name]
            if owners:
                index, remote = owners[0]
                if (tool := self._wrap_or_skip(index, remote, name)) is None:
                    return None
                if len({i for i, _ in owners}) == 1:
                    self._routes[name] = (index, name)
                return tool
        return None

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    async def execute(self, call: ToolCall, on_progress: ProgressCallback | None = None) -> ToolResult:
        """Route one call to its server and return the remote result.

        An error-flagged remote result comes back as an error ToolResult;
        routing and transport failures raise.

        Raises:
            ToolNotFoundError: the call cannot be routed to any connection
        """
        async with self._lock:
            self._ensure_names()
            index, remote_name = self._resolve(call.name)
            server = self._server_names[index]
        call_log = log.bind_call(call.name, call.id, server=server)
        forward = None
        if on_progress is not None:
            forward = _progress_forwarder(ProgressReporter(on_progress, call.name, call.id))
        start = time.perf_counter()
        result = await self._connections[index].call_tool(remote_name, to_remote_arguments(call.parameters), forward)
        call_log.debug(
            "remote call complete",
            is_error=bool(result.isError),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return tool_result_from_remote(result, name=call.name, id=call.id)

    async def execute_all(
        self,
        calls: Iterable[ToolCall],
        on_progress: ProgressCallback | None = None,
    ) -> list[ToolResult]:
        """Execute calls concurrently; results follow input order."""
        return await gather_ordered([partial(self.execute, c, on_progress) for c in calls])

    async def clear_cache(self) -> None:
        """Forget server names, listings and routes; the next call re-lists."""
        async with self._lock:
            self._reset()

    async def connected_server_names(self) -> list[str]:
        async with self._lock:
            return list(self._ensure_names())
