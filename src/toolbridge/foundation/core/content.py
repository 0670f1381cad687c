"""Tool result content taxonomy.

Four kinds of content can appear in a tool result: text, image, audio and
file. Binary payloads are raw bytes; providers that cannot carry a kind get
``fallback_description`` instead, e.g. ``[Unsupported result: image/png, 45 KB]``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ContentKind(StrEnum):
    """Kinds of content a tool result can carry."""
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    FILE = "file"


ALL_KINDS: frozenset[ContentKind] = frozenset(ContentKind)

_UNITS = ("KB", "MB", "GB", "TB")


def format_byte_count(count: int) -> str:
    """Decimal file-size string: ``12 bytes``, ``45 KB``, ``1.2 MB``."""
    if count == 0:
        return "Zero KB"
    if count < 1000:
        return "1 byte" if count == 1 else f"{count} bytes"
    size = float(count)
    for unit in _UNITS:
        size /= 1000
        if size < 1000 or unit == _UNITS[-1]:
            if unit == "KB":
                return f"{round(size)} KB"
            return f"{size:.1f} {unit}" if unit == "MB" else f"{size:.2f} {unit}"
    return f"{count} bytes"


class _Content(BaseModel):
    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")


class TextContent(_Content):
    kind: Literal[ContentKind.TEXT] = ContentKind.TEXT
    text: str

    def __init__(self, text: str | None = None, /, **data: Any) -> None:
        if text is not None:
            data["text"] = text
        super().__init__(**data)

    @property
    def fallback_description(self) -> str:
        return self.text


class ImageContent(_Content):
    kind: Literal[ContentKind.IMAGE] = ContentKind.IMAGE
    data: bytes
    mime_type: str | None = None

    @property
    def fallback_description(self) -> str:
        return f"[Unsupported result: {self.mime_type or 'image'}, {format_byte_count(len(self.data))}]"


class AudioContent(_Content):
    kind: Literal[ContentKind.AUDIO] = ContentKind.AUDIO
    data: bytes
    mime_type: str

    @property
    def fallback_description(self) -> str:
        return f"[Unsupported result: {self.mime_type}, {format_byte_count(len(self.data))}]"


class FileContent(_Content):
    kind: Literal[ContentKind.FILE] = ContentKind.FILE
    data: bytes
    mime_type: str
    filename: str | None = None

    @property
    def fallback_description(self) -> str:
        name = f"{self.filename} " if self.filename else ""
        return f"[Unsupported result: {name}{self.mime_type}, {format_byte_count(len(self.data))}]"


Content = Annotated[Union[TextContent, ImageContent, AudioContent, FileContent], Field(discriminator="kind")]


def text_of(content: list[Content] | tuple[Content, ...], separator: str = " ") -> str:
    """Join the text items of a content list, ignoring binary items."""
    return separator.join(c.text for c in content if isinstance(c, TextContent))
