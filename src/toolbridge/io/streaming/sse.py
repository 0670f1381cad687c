"""Server-Sent-Event payload extraction.

Provider streaming endpoints deliver newline-delimited lines; only lines
prefixed with ``data: `` carry payloads. ``event:`` lines, comments and blank
keep-alive lines are skipped. Provider adapters parse each payload string
into their own event shapes.

The produced sequence is a lazy, single-pass async generator. Closing it (or
cancelling the consumer) closes the underlying line iterator, which for an
httpx response stops the byte read.

Example:
    >>> async with client.stream("POST", url, json=body) as response:
    ...     async for payload in sse_payloads_from_response(response):
    ...         event = orjson.loads(payload)
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterable, AsyncIterator
from typing import TYPE_CHECKING

from toolbridge.foundation.config import get_settings

if TYPE_CHECKING:
    import httpx


def _decode(line: str | bytes) -> str:
    text = line.decode("utf-8", errors="replace") if isinstance(line, (bytes, bytearray)) else line
    return text.rstrip("\r\n")


async def sse_payloads(
    lines: AsyncIterable[str | bytes],
    *,
    terminate_on_done: bool = True,
    prefix: str | None = None,
    sentinel: str | None = None,
) -> AsyncIterator[str]:
    """Yield the payload of every ``data: `` line.

    Args:
        lines: Async iterable of text or byte lines (trailing newlines are stripped)
        terminate_on_done: Stop, without yielding it, at a payload equal to the sentinel
        prefix: Data line prefix (defaults to settings, ``"data: "``)
        sentinel: Terminating payload (defaults to settings, ``"[DONE]"``)
    """
    settings = get_settings().sse
    prefix = settings.data_prefix if prefix is None else prefix
    sentinel = settings.done_sentinel if sentinel is None else sentinel

    iterator = aiter(lines)
    try:
        async for raw in iterator:
            line = _decode(raw)
            if not line.startswith(prefix):
                continue
            payload = line[len(prefix):]
            if terminate_on_done and payload == sentinel:
                return
            yield payload
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            result = aclose()
            if inspect.isawaitable(result):
                await result


async def sse_payloads_from_response(
    response: httpx.Response,
    *,
    terminate_on_done: bool = True,
) -> AsyncIterator[str]:
    """Yield payloads from a streaming httpx response, closing it when done."""
    try:
        async for payload in sse_payloads(response.aiter_lines(), terminate_on_done=terminate_on_done):
            yield payload
    finally:
        await response.aclose()
