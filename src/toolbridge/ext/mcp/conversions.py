"""Conversions between toolbridge types and the MCP wire types.

Values
    The remote side's value algebra is JSON plus raw binary. Binary has no
    JSON representation, so it enters a Value as a ``data:<mime>;base64,...``
    URL string. That direction is lossy: the string does not turn back into
    binary on the way out.

Content
    text <-> text, image/audio <-> base64 image/audio. Embedded resources are
    demultiplexed by mime type; anything else (resource links, undecodable
    payloads) degrades to a descriptive text placeholder.

Errors
    An error-flagged CallToolResult raises RemoteToolError carrying its text.
"""

from __future__ import annotations

import binascii
from base64 import b64decode, b64encode
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from mcp import types

from toolbridge.foundation.core import (
    AudioContent,
    Content,
    FileContent,
    ImageContent,
    TextContent,
    Tool,
    ToolCall,
    ToolResult,
    parameters_from_schema,
)
from toolbridge.foundation.errors import RemoteToolError, UnsupportedValueError
from toolbridge.foundation.values import Value, ValueMap

DEFAULT_MIME = "application/octet-stream"


# ─────────────────────────────────────────────────────────────────────────────
# Values
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class RemoteBinary:
    """Raw binary on the remote side, optionally typed."""

    data: bytes
    mime_type: str | None = None


def data_url(data: bytes, mime_type: str | None = None) -> str:
    return f"data:{mime_type or DEFAULT_MIME};base64,{b64encode(data).decode('ascii')}"


def from_remote_value(value: Any) -> Value:
    """Remote value -> Value. Binary becomes a data URL string."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, RemoteBinary):
        return data_url(value.data, value.mime_type)
    if isinstance(value, (bytes, bytearray)):
        return data_url(bytes(value))
    if isinstance(value, Mapping):
        return {str(k): from_remote_value(v) for k, v in value.items()}
    if isinstance(value, Sequence):
        return [from_remote_value(v) for v in value]
    raise UnsupportedValueError(type(value).__name__)


def to_remote_value(value: Value) -> Any:
    """Value -> remote value (a structural copy; Values are already JSON)."""
    if isinstance(value, dict):
        return {k: to_remote_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_remote_value(v) for v in value]
    return value


def to_remote_arguments(arguments: ValueMap) -> dict[str, Any]:
    return {k: to_remote_value(v) for k, v in arguments.items()}


def from_remote_arguments(arguments: Mapping[str, Any] | None) -> ValueMap:
    return {k: from_remote_value(v) for k, v in (arguments or {}).items()}


# ─────────────────────────────────────────────────────────────────────────────
# Content
# ─────────────────────────────────────────────────────────────────────────────

def _b64(text: str) -> bytes | None:
    try:
        return b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return None


def _from_resource(resource: types.TextResourceContents | types.BlobResourceContents) -> Content:
    text = getattr(resource, "text", None)
    if text is not None:
        return TextContent(text)
    blob = getattr(resource, "blob", None)
    data = _b64(blob) if isinstance(blob, str) else None
    if data is None:
        return TextContent(f"[Resource: {resource.uri}]")
    mime = resource.mimeType or DEFAULT_MIME
    if mime.startswith("image/"):
        return ImageContent(data=data, mime_type=mime)
    if mime.startswith("audio/"):
        return AudioContent(data=data, mime_type=mime)
    return FileContent(data=data, mime_type=mime)


def content_from_remote(content: Any) -> Content:
    """One remote content block -> Content. Never fails."""
    match content:
        case types.TextContent(text=text):
            return TextContent(text)
        case types.ImageContent(data=data, mimeType=mime):
            decoded = _b64(data)
            return ImageContent(data=decoded, mime_type=mime) if decoded is not None else TextContent("[Invalid image data]")
        case types.AudioContent(data=data, mimeType=mime):
            decoded = _b64(data)
            return AudioContent(data=decoded, mime_type=mime) if decoded is not None else TextContent("[Invalid audio data]")
        case types.EmbeddedResource(resource=resource):
            return _from_resource(resource)
        case types.ResourceLink(uri=uri):
            return TextContent(f"[Resource link: {uri}]")
    kind = getattr(content, "type", type(content).__name__)
    return TextContent(f"[Unsupported content: {kind}]")


_IMAGE_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def sniff_image_mime(data: bytes) -> str | None:
    """Mime type from an image's magic bytes, None when unrecognized."""
    for signature, mime in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def content_to_remote(content: Content) -> types.TextContent | types.ImageContent | types.AudioContent:
    """Content -> remote content block. Non-media files become a text summary."""
    match content:
        case TextContent(text=text):
            return types.TextContent(type="text", text=text)
        case ImageContent(data=data, mime_type=mime):
            mime = mime or sniff_image_mime(data) or "image/png"
            return types.ImageContent(type="image", data=b64encode(data).decode("ascii"), mimeType=mime)
        case AudioContent(data=data, mime_type=mime):
            return types.AudioContent(type="audio", data=b64encode(data).decode("ascii"), mimeType=mime)
        case FileContent(data=data, mime_type=mime):
            encoded = b64encode(data).decode("ascii")
            if mime.startswith("image/"):
                return types.ImageContent(type="image", data=encoded, mimeType=mime)
            if mime.startswith("audio/"):
                return types.AudioContent(type="audio", data=encoded, mimeType=mime)
            return types.TextContent(type="text", text=f"[File data: {mime}, {len(data)} bytes]")
    raise TypeError(f"Unknown content type {type(content).__name__}")


# ─────────────────────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────────────────────

def error_text(result: types.CallToolResult) -> str:
    texts = [c.text for c in result.content if isinstance(c, types.TextContent)]
    return "\n".join(texts) or "Unknown error"


def result_from_remote(result: types.CallToolResult) -> list[Content]:
    """Content of a successful remote result.

    Raises:
        RemoteToolError: the result is error-flagged
    """
    if result.isError:
        raise RemoteToolError(error_text(result))
    return [content_from_remote(c) for c in result.content]


def tool_result_from_remote(result: types.CallToolResult, *, name: str, id: str) -> ToolResult:  # noqa: A002
    """Remote result -> ToolResult, keeping the error flag."""
    return ToolResult(
        name=name, id=id,
        content=[content_from_remote(c) for c in result.content],
        is_error=bool(result.isError),
    )


def result_to_remote(result: ToolResult) -> types.CallToolResult:
    return types.CallToolResult(content=[content_to_remote(c) for c in result.content], isError=result.is_error)


def call_to_remote(call: ToolCall) -> types.CallToolRequestParams:
    return types.CallToolRequestParams(name=call.name, arguments=to_remote_arguments(call.parameters))


def call_from_remote(params: types.CallToolRequestParams, id: str) -> ToolCall:  # noqa: A002
    return ToolCall(name=params.name, id=id, parameters=from_remote_arguments(params.arguments))


# ─────────────────────────────────────────────────────────────────────────────
# Tools
# ─────────────────────────────────────────────────────────────────────────────

RemoteExecutor = Callable[..., Awaitable[list[Content]]]


def remote_title(tool: types.Tool) -> str:
    title = getattr(tool, "title", None)
    if not title and tool.annotations is not None:
        title = tool.annotations.title
    return title or tool.name


def tool_from_remote(remote: types.Tool, executor: RemoteExecutor, *, name: str | None = None) -> Tool:
    """Wrap a remote tool definition as a Tool.

    The remote input schema is kept verbatim and used for validation;
    execute receives the validated raw argument map. A missing description
    falls back to the title.
    """
    schema = dict(remote.inputSchema or {"type": "object", "properties": {}})
    title = remote_title(remote)
    return Tool(
        name=name or remote.name,
        description=remote.description or title,
        title=title,
        parameters=tuple(parameters_from_schema(schema)),
        execute=executor,
        result_kinds=None,
        strict_schema=schema.get("additionalProperties") is False,
        input_schema=schema,
        parse_arguments=False,
    )


def tool_to_remote(tool: Tool) -> types.Tool:
    """Tool -> remote tool definition, for serving local tools over MCP."""
    return types.Tool(
        name=tool.name,
        title=tool.title,
        description=tool.description,
        inputSchema=dict(tool.input_schema or {}),
    )
