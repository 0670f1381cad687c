"""Conversation messages and history reconciliation.

Messages are immutable; every transformation returns new messages.

- ``GenerationResponse.message``: the assistant turn carrying tool calls
- ``results_message``: the tool turn carrying their results
- ``patching_orphaned_tool_calls``: closes calls that never got a result
- ``Message.collapsing_tool_calls`` / ``collapsing_tool_results``: plain-text
  renditions for providers that cannot carry structured tool history

Example:
    >>> history = [Message.user("Weather in Paris?")]
    >>> response = await provider.generate(history, tools.definitions())
    >>> results = await tools.call_all(response.tool_calls)
    >>> history += [response.message, results_message(results)]
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from toolbridge.foundation.core import ToolCall, ToolResult, text_of

ORPHANED_CALL_TEXT = "Function call was not executed. The request may have been canceled or timed out."


class Role(StrEnum):
    SYSTEM = "system"
    DEVELOPER = "developer"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class AttachmentKind(StrEnum):
    IMAGE = "image"
    DOCUMENT = "document"
    VIDEO = "video"
    AUDIO = "audio"


class Attachment(BaseModel):
    """Binary media sent alongside a message's text."""

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")

    kind: AttachmentKind
    data: bytes
    mime_type: str
    filename: str | None = None


class OpaqueBlock(BaseModel):
    """Provider-specific content round-tripped verbatim (e.g. reasoning signatures)."""

    model_config = ConfigDict(frozen=True)

    provider: str
    type: str
    content: str | None = None
    signature: str | None = None
    data: str | None = None


class Message(BaseModel):
    """One conversation turn.

    Tool calls only appear on assistant messages and tool results only on
    tool messages.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str | None = None
    attachments: tuple[Attachment, ...] = ()
    tool_calls: tuple[ToolCall, ...] | None = None
    tool_results: tuple[ToolResult, ...] | None = None
    opaque_blocks: tuple[OpaqueBlock, ...] | None = None

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str, attachments: Iterable[Attachment] = ()) -> Message:
        return cls(role=Role.USER, content=content, attachments=tuple(attachments))

    @classmethod
    def assistant(cls, content: str | None, tool_calls: Iterable[ToolCall] | None = None) -> Message:
        calls = tuple(tool_calls) if tool_calls is not None else None
        return cls(role=Role.ASSISTANT, content=content, tool_calls=calls or None)

    def collapsing_tool_calls(self) -> Message:
        """Render tool calls into the text content and drop structured fields."""
        if not self.tool_calls:
            return self
        text = self.content or ""
        for call in self.tool_calls:
            text += f'\n\n[Called tool "{call.name}" with: {call.parameters_json()}]'
        return Message(role=self.role, content=text, attachments=self.attachments)

    def collapsing_tool_results(self) -> Message:
        """Render tool results into text content, re-roled as a user message."""
        if not self.tool_results:
            return self
        text = self.content or ""
        for result in self.tool_results:
            label = "Error from" if result.is_error else "Result from"
            text += f'\n\n[{label} tool "{result.name}": {text_of(result.content)}]'
        return Message(role=Role.USER, content=text, attachments=self.attachments)


def results_message(results: Iterable[ToolResult]) -> Message:
    """Tool-role message carrying a batch of results."""
    return Message(role=Role.TOOL, tool_results=tuple(results))


def patching_orphaned_tool_calls(history: Sequence[Message]) -> list[Message]:
    """Append one tool message closing every call that has no result.

    Synthesized results are error-flagged and follow call order. Running
    this on an already patched history returns it unchanged.
    """
    result_ids = {r.id for m in history for r in m.tool_results or ()}
    orphans: list[ToolResult] = []
    seen: set[str] = set()
    for message in history:
        for call in message.tool_calls or ():
            if call.id in result_ids or call.id in seen:
                continue
            seen.add(call.id)
            orphans.append(ToolResult.error(ORPHANED_CALL_TEXT, name=call.name, id=call.id))
    if not orphans:
        return list(history)
    return [*history, results_message(orphans)]


# ─────────────────────────────────────────────────────────────────────────────
# Generation Response (boundary type)
# ─────────────────────────────────────────────────────────────────────────────

class FinishReason(StrEnum):
    STOP = "stop"
    MAX_TOKENS = "max_tokens"
    TOOL_USE = "tool_use"
    CONTENT_FILTER = "content_filter"
    REFUSAL = "refusal"
    PAUSE_TURN = "pause_turn"
    OTHER = "other"


class ResponseTexts(BaseModel):
    model_config = ConfigDict(frozen=True)

    reasoning: str | None = None
    response: str | None = None
    notes: str | None = None


class ResponseMetadata(BaseModel):
    """Provider-reported details, carried through unchanged."""

    model_config = ConfigDict(frozen=True)

    response_id: str | None = None
    model: str | None = None
    created_at: datetime | None = None
    finish_reason: FinishReason | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None


class GenerationResponse(BaseModel):
    """What a provider adapter hands back: texts plus zero or more tool calls."""

    model_config = ConfigDict(frozen=True)

    texts: ResponseTexts = Field(default_factory=ResponseTexts)
    tool_calls: tuple[ToolCall, ...] = ()
    metadata: ResponseMetadata | None = None
    opaque_blocks: tuple[OpaqueBlock, ...] | None = None

    @property
    def finish_reason(self) -> FinishReason | None:
        return self.metadata.finish_reason if self.metadata else None

    @property
    def message(self) -> Message:
        """The assistant turn to append to history."""
        return Message(
            role=Role.ASSISTANT,
            content=self.texts.response,
            tool_calls=self.tool_calls or None,
            opaque_blocks=self.opaque_blocks,
        )
