"""Tests for the ClientSession adapter."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import pytest
from mcp import types

from toolbridge.ext.mcp import SessionConnection, ToolConnection
from toolbridge.foundation.testing import MockConnection, mock_tool, text_result


class FakeSession:
    """Stands in for mcp.ClientSession: paginated listing and recorded calls."""

    def __init__(self, pages: list[list[types.Tool]], server: str | None = "files") -> None:
        self.pages = pages
        self.server = server
        self.cursors: list[str | None] = []
        self.calls: list[dict[str, Any]] = []

    async def initialize(self) -> types.InitializeResult:
        return types.InitializeResult(
            protocolVersion="2025-06-18",
            capabilities=types.ServerCapabilities(),
            serverInfo=types.Implementation(name=self.server or "", version="1.0"),
        )

    async def list_tools(self, cursor: str | None = None) -> types.ListToolsResult:
        self.cursors.append(cursor)
        index = int(cursor) if cursor else 0
        next_cursor = str(index + 1) if index + 1 < len(self.pages) else None
        return types.ListToolsResult(tools=self.pages[index], nextCursor=next_cursor)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None, **kwargs: Any) -> types.CallToolResult:
        self.calls.append({"name": name, "arguments": arguments, **kwargs})
        return text_result("ok")


class TestSessionConnection:
    @pytest.mark.asyncio
    async def test_connect_takes_server_name(self) -> None:
        conn = await SessionConnection.connect(FakeSession([[]]))  # type: ignore[arg-type]
        assert conn.server_name == "files"
        assert isinstance(conn, ToolConnection)

    @pytest.mark.asyncio
    async def test_blank_server_name_is_none(self) -> None:
        conn = await SessionConnection.connect(FakeSession([[]], server=None))  # type: ignore[arg-type]
        assert conn.server_name is None

    @pytest.mark.asyncio
    async def test_listing_follows_pagination(self) -> None:
        session = FakeSession([[mock_tool("a")], [mock_tool("b")], [mock_tool("c")]])
        conn = SessionConnection(session, "files")  # type: ignore[arg-type]
        assert [t.name for t in await conn.list_tools()] == ["a", "b", "c"]
        assert session.cursors == [None, "1", "2"]

    @pytest.mark.asyncio
    async def test_call_forwards_timeout_and_progress(self) -> None:
        session = FakeSession([[]])

        async def on_progress(progress: float, total: float | None, message: str | None) -> None:
            pass

        conn = SessionConnection(session, "files", read_timeout=timedelta(seconds=5))  # type: ignore[arg-type]
        result = await conn.call_tool("read", {"path": "/a"}, on_progress)
        assert result.content[0].text == "ok"
        assert session.calls == [{
            "name": "read",
            "arguments": {"path": "/a"},
            "read_timeout_seconds": timedelta(seconds=5),
            "progress_callback": on_progress,
        }]


class TestMockConnection:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(MockConnection(), ToolConnection)

    @pytest.mark.asyncio
    async def test_assertions(self) -> None:
        conn = MockConnection(responses={"echo": lambda args: args["text"]})
        conn.assert_not_called()
        await conn.call_tool("echo", {"text": "hi"})
        conn.assert_called()
        conn.assert_called_with("echo", text="hi")
        with pytest.raises(AssertionError):
            conn.assert_called_with("echo", text="bye")
        assert conn.last_call.result == text_result("hi")
        conn.clear()
        assert not conn.called
