"""Ordered concurrent execution.

Runs a batch of awaitables as independent tasks and returns their results
in submission order, regardless of completion order. Each task is tagged
with its original index and the results are re-sorted after the join.

    - gather_ordered: wait for all, fail fast on the first error
    - map_ordered: gather_ordered over fn(item) for each item

Cancelling the awaiting coroutine cancels every in-flight task before the
CancelledError propagates; no task outlives the call.

Example:
    >>> results = await map_ordered(fetch, ["a", "b", "c"])
    >>> # results[0] is fetch("a") even if "c" finished first
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

T = TypeVar("T")
U = TypeVar("U")


async def _tagged(index: int, factory: Callable[[], Awaitable[T]]) -> tuple[int, T]:
    return index, await factory()


async def _cancel_all(tasks: Iterable[asyncio.Task[object]]) -> None:
    pending = [t for t in tasks if not t.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


async def gather_ordered(factories: Iterable[Callable[[], Awaitable[T]]]) -> list[T]:
    """Run every factory concurrently and return results in input order.

    If any task raises, the remaining tasks are cancelled and the exception of
    the lowest-indexed failed task is re-raised.
    """
    tasks = [asyncio.ensure_future(_tagged(i, f)) for i, f in enumerate(factories)]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        await _cancel_all(tasks)
        raise

    if pending:
        await _cancel_all(pending)

    failed = [t for t in tasks if t in done and not t.cancelled() and t.exception() is not None]
    if failed:
        raise failed[0].exception()  # type: ignore[misc]

    tagged = sorted((t.result() for t in tasks), key=lambda pair: pair[0])
    return [value for _, value in tagged]


async def map_ordered(fn: Callable[[U], Awaitable[T]], items: Iterable[U]) -> list[T]:
    """Apply async fn to every item concurrently, preserving item order."""
    return await gather_ordered([lambda item=item: fn(item) for item in items])
