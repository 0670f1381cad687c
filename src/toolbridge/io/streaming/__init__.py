"""Streaming primitives consumed by provider adapters."""

from .sse import sse_payloads, sse_payloads_from_response

__all__ = ["sse_payloads", "sse_payloads_from_response"]
