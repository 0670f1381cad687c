"""Conversation messages, generation responses and history reconciliation."""

from .messages import (
    ORPHANED_CALL_TEXT,
    Attachment,
    AttachmentKind,
    FinishReason,
    GenerationResponse,
    Message,
    OpaqueBlock,
    ResponseMetadata,
    ResponseTexts,
    Role,
    patching_orphaned_tool_calls,
    results_message,
)

__all__ = [
    "Role", "Message", "Attachment", "AttachmentKind", "OpaqueBlock",
    "GenerationResponse", "ResponseTexts", "ResponseMetadata", "FinishReason",
    "results_message", "patching_orphaned_tool_calls", "ORPHANED_CALL_TEXT",
]
