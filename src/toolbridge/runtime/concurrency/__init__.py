"""Concurrency primitives for batch tool execution."""

from .ordered import gather_ordered, map_ordered

__all__ = ["gather_ordered", "map_ordered"]
