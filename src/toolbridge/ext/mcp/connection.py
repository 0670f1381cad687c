"""Remote tool connections.

A connection is one remote tool-hosting server. The bridge needs three
things from it: the server's self-reported name, its tool listing, and a
way to call a tool (optionally streaming progress back).

``SessionConnection`` adapts an initialized ``mcp.ClientSession``; tests
use ``toolbridge.foundation.testing.MockConnection``.

Example:
    >>> async with stdio_client(params) as (read, write):
    ...     async with ClientSession(read, write) as session:
    ...         conn = await SessionConnection.connect(session)
    ...         bridge = RemoteToolBridge([conn])
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, Protocol, runtime_checkable

from mcp import ClientSession
from mcp import types

# (progress, total, message); matches the mcp client progress callback shape
RemoteProgressCallback = Callable[[float, float | None, str | None], Awaitable[None]]


@runtime_checkable
class ToolConnection(Protocol):
    """What the bridge consumes from a remote server."""

    @property
    def server_name(self) -> str | None: ...

    async def list_tools(self) -> list[types.Tool]: ...

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None,
        progress_callback: RemoteProgressCallback | None = None,
    ) -> types.CallToolResult: ...


class SessionConnection:
    """ToolConnection over an ``mcp.ClientSession``.

    Pagination of ``tools/list`` is followed to the end.
    """

    __slots__ = ("_session", "_server_name", "_read_timeout")

    def __init__(
        self,
        session: ClientSession,
        server_name: str | None = None,
        *,
        read_timeout: timedelta | None = None,
    ) -> None:
        self._session = session
        self._server_name = server_name
        self._read_timeout = read_timeout

    @classmethod
    async def connect(cls, session: ClientSession, *, read_timeout: timedelta | None = None) -> SessionConnection:
        """Initialize the session and take the server name from its handshake."""
        init = await session.initialize()
        name = init.serverInfo.name if init.serverInfo else None
        return cls(session, name or None, read_timeout=read_timeout)

    @property
    def server_name(self) -> str | None:
        return self._server_name

    @property
    def session(self) -> ClientSession:
        return self._session

    async def list_tools(self) -> list[types.Tool]:
        tools: list[types.Tool] = []
        cursor: str | None = None
        while True:
            page = await self._session.list_tools(cursor=cursor) if cursor else await self._session.list_tools()
            tools.extend(page.tools)
            cursor = page.nextCursor
            if not cursor:
                return tools

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None,
        progress_callback: RemoteProgressCallback | None = None,
    ) -> types.CallToolResult:
        return await self._session.call_tool(
            name,
            arguments,
            read_timeout_seconds=self._read_timeout,
            progress_callback=progress_callback,
        )

    def __repr__(self) -> str:
        return f"SessionConnection(server_name={self._server_name!r})"
