"""Typed tool outputs with declared result kinds.

A tool's execute may return any of:

    str                   -> one text item
    Content               -> itself
    ToolOutput instances  -> their to_content()
    JSON values           -> one text item holding compact JSON
    None                  -> no content
    lists/tuples of these -> flattened in order

Output classes declare ``result_kinds`` so capability filtering can decide
whether a provider can carry the tool's results before it is ever called.
``MultiContent`` declares None: its kinds are only known at runtime.

Example:
    >>> normalize_output(["ok", ImageResult.png(b"...")])
    [TextContent(kind=<ContentKind.TEXT: 'text'>, text='ok'), ImageContent(...)]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol, get_args, get_origin, runtime_checkable

from toolbridge.foundation.errors import UnsupportedValueError
from toolbridge.foundation.values import from_any, to_json

from .content import AudioContent, Content, ContentKind, FileContent, ImageContent, TextContent

_CONTENT_TYPES = (TextContent, ImageContent, AudioContent, FileContent)


@runtime_checkable
class ToolOutput(Protocol):
    """Anything that converts itself into result content."""

    result_kinds: ClassVar[frozenset[ContentKind] | None]

    def to_content(self) -> list[Content]: ...


@dataclass(frozen=True, slots=True)
class TextOutput:
    result_kinds: ClassVar[frozenset[ContentKind] | None] = frozenset({ContentKind.TEXT})

    text: str

    def to_content(self) -> list[Content]:
        return [TextContent(self.text)]


@dataclass(frozen=True, slots=True)
class ImageResult:
    result_kinds: ClassVar[frozenset[ContentKind] | None] = frozenset({ContentKind.IMAGE})

    data: bytes
    mime_type: str

    @classmethod
    def png(cls, data: bytes) -> ImageResult:
        return cls(data, "image/png")

    @classmethod
    def jpeg(cls, data: bytes) -> ImageResult:
        return cls(data, "image/jpeg")

    def to_content(self) -> list[Content]:
        return [ImageContent(data=self.data, mime_type=self.mime_type)]


@dataclass(frozen=True, slots=True)
class AudioResult:
    result_kinds: ClassVar[frozenset[ContentKind] | None] = frozenset({ContentKind.AUDIO})

    data: bytes
    mime_type: str

    def to_content(self) -> list[Content]:
        return [AudioContent(data=self.data, mime_type=self.mime_type)]


@dataclass(frozen=True, slots=True)
class FileResult:
    result_kinds: ClassVar[frozenset[ContentKind] | None] = frozenset({ContentKind.FILE})

    data: bytes
    mime_type: str
    filename: str | None = None

    def to_content(self) -> list[Content]:
        return [FileContent(data=self.data, mime_type=self.mime_type, filename=self.filename)]


@dataclass(frozen=True, slots=True)
class MultiContent:
    """Mixed content whose kinds are decided at runtime."""

    result_kinds: ClassVar[frozenset[ContentKind] | None] = None

    items: list[Content] = field(default_factory=list)

    def to_content(self) -> list[Content]:
        return list(self.items)


def normalize_output(output: Any) -> list[Content]:
    """Flatten an execute return value into a content list.

    Raises:
        TypeError: the value (or a nested item) has no content representation
    """
    if output is None:
        return []
    if isinstance(output, str):
        return [TextContent(output)]
    if isinstance(output, _CONTENT_TYPES):
        return [output]
    if isinstance(output, ToolOutput):
        return output.to_content()
    if isinstance(output, (list, tuple)):
        return [item for part in output for item in normalize_output(part)]
    try:
        return [TextContent(to_json(from_any(output)))]
    except UnsupportedValueError as e:
        raise TypeError(f"Tool returned unsupported output type {type(output).__name__}") from e


def result_kinds_for(annotation: Any) -> frozenset[ContentKind] | None:
    """Result kinds implied by a return annotation, None when unknown.

    ``str`` means text; output classes report their own kinds; a union
    combines its members and any unknown member makes the whole union unknown.
    """
    if annotation is str:
        return frozenset({ContentKind.TEXT})
    if isinstance(annotation, type) and isinstance(getattr(annotation, "result_kinds", None), frozenset):
        return annotation.result_kinds  # type: ignore[no-any-return]
    if get_origin(annotation) is not None and (args := get_args(annotation)):
        if get_origin(annotation) in (list, tuple):
            return result_kinds_for(args[0])
        kinds: set[ContentKind] = set()
        for arg in args:
            if arg is type(None):
                continue
            sub = result_kinds_for(arg)
            if sub is None:
                return None
            kinds |= sub
        return frozenset(kinds)
    return None
