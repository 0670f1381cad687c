"""Progress updates for remote tool calls."""

from .progress import CallContext, ProgressCallback, ProgressReporter, ToolCallProgressUpdate

__all__ = ["CallContext", "ProgressCallback", "ProgressReporter", "ToolCallProgressUpdate"]
