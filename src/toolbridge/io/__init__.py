"""I/O layer: SSE streaming and progress reporting."""
