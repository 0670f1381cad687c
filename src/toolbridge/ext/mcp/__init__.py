"""MCP integration: remote tool servers as toolbridge Tools.

- ToolConnection / SessionConnection: what the bridge consumes from a server
- RemoteToolBridge: naming, namespacing, routing and cached listings
- conversions: values, content, results and tool definitions across MCP
"""

from .bridge import RemoteToolBridge, disambiguate
from .connection import RemoteProgressCallback, SessionConnection, ToolConnection
from .conversions import (
    RemoteBinary,
    call_from_remote,
    call_to_remote,
    content_from_remote,
    content_to_remote,
    data_url,
    from_remote_arguments,
    from_remote_value,
    result_from_remote,
    result_to_remote,
    sniff_image_mime,
    to_remote_arguments,
    to_remote_value,
    tool_from_remote,
    tool_result_from_remote,
    tool_to_remote,
)

__all__ = [
    "RemoteToolBridge", "disambiguate",
    "ToolConnection", "SessionConnection", "RemoteProgressCallback",
    "RemoteBinary", "data_url", "to_remote_value", "from_remote_value",
    "to_remote_arguments", "from_remote_arguments",
    "content_from_remote", "content_to_remote", "sniff_image_mime",
    "result_from_remote", "tool_result_from_remote", "result_to_remote",
    "call_to_remote", "call_from_remote", "tool_from_remote", "tool_to_remote",
]
