"""Tests for conversation messages and history reconciliation."""

from __future__ import annotations

from toolbridge import (
    GenerationResponse,
    Message,
    OpaqueBlock,
    ResponseMetadata,
    ResponseTexts,
    Role,
    ToolCall,
    ToolResult,
    patching_orphaned_tool_calls,
    results_message,
)
from toolbridge.foundation.conversation import ORPHANED_CALL_TEXT, FinishReason


def _calls(*ids: str) -> list[ToolCall]:
    return [ToolCall(name="forecast", id=i, parameters={"city": "Paris"}) for i in ids]


class TestOrphanPatching:
    def test_synthesizes_missing_results_in_call_order(self) -> None:
        history = [
            Message.user("Weather?"),
            Message.assistant(None, _calls("c1", "c2", "c3")),
            results_message([ToolResult.text("Sunny", name="forecast", id="c2")]),
        ]
        patched = patching_orphaned_tool_calls(history)
        assert patched[:3] == history
        closing = patched[3]
        assert closing.role is Role.TOOL
        assert [r.id for r in closing.tool_results] == ["c1", "c3"]
        assert all(r.is_error and r.text_content == ORPHANED_CALL_TEXT for r in closing.tool_results)

    def test_idempotent(self) -> None:
        history = [Message.assistant("Checking", _calls("c1"))]
        once = patching_orphaned_tool_calls(history)
        assert patching_orphaned_tool_calls(once) == once
        assert len(once) == 2

    def test_complete_history_unchanged(self) -> None:
        history = [
            Message.assistant(None, _calls("c1")),
            results_message([ToolResult.text("ok", name="forecast", id="c1")]),
        ]
        assert patching_orphaned_tool_calls(history) == history
        assert patching_orphaned_tool_calls([]) == []

    def test_repeated_call_id_patched_once(self) -> None:
        history = [Message.assistant(None, _calls("c1")), Message.assistant(None, _calls("c1"))]
        patched = patching_orphaned_tool_calls(history)
        assert [r.id for r in patched[-1].tool_results] == ["c1"]


class TestCollapsing:
    def test_tool_calls_into_text(self) -> None:
        message = Message.assistant("Let me check", _calls("c1"))
        collapsed = message.collapsing_tool_calls()
        assert collapsed.content == 'Let me check\n\n[Called tool "forecast" with: {"city":"Paris"}]'
        assert collapsed.tool_calls is None
        assert collapsed.role is Role.ASSISTANT

    def test_tool_results_into_user_text(self) -> None:
        message = results_message([
            ToolResult.text("Sunny", name="forecast", id="c1"),
            ToolResult.error("boom", name="alerts", id="c2"),
        ])
        collapsed = message.collapsing_tool_results()
        assert collapsed.role is Role.USER
        assert collapsed.tool_results is None
        assert collapsed.content == (
            '\n\n[Result from tool "forecast": Sunny]'
            '\n\n[Error from tool "alerts": boom]'
        )

    def test_plain_messages_untouched(self) -> None:
        message = Message.user("hi")
        assert message.collapsing_tool_calls() is message
        assert message.collapsing_tool_results() is message


class TestGenerationResponse:
    def test_message_carries_calls_and_opaque_blocks(self) -> None:
        block = OpaqueBlock(provider="anthropic", type="thinking", content="...", signature="sig")
        response = GenerationResponse(
            texts=ResponseTexts(reasoning="thinking", response="Checking"),
            tool_calls=tuple(_calls("c1")),
            metadata=ResponseMetadata(model="m", finish_reason=FinishReason.TOOL_USE, input_tokens=3),
            opaque_blocks=(block,),
        )
        message = response.message
        assert message.role is Role.ASSISTANT
        assert message.content == "Checking"
        assert [c.id for c in message.tool_calls] == ["c1"]
        assert message.opaque_blocks == (block,)
        assert response.finish_reason is FinishReason.TOOL_USE

    def test_no_calls_means_none(self) -> None:
        response = GenerationResponse(texts=ResponseTexts(response="Done"))
        assert response.message.tool_calls is None
        assert response.finish_reason is None
        assert Message.assistant("x", []).tool_calls is None
