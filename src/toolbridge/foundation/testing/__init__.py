"""Testing utilities: a scripted remote connection and definition builders."""

from .mock import MockConnection, RemoteInvocation, mock_tool, text_result

__all__ = ["MockConnection", "RemoteInvocation", "mock_tool", "text_result"]
