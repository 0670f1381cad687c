"""Tests for content kinds, typed outputs and provider capability filtering."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from toolbridge import (
    AudioContent,
    ContentKind,
    FileContent,
    ImageContent,
    ImageResult,
    MultiContent,
    ProviderCapabilities,
    TextContent,
    TextOutput,
    Tool,
    ToolResult,
    Tools,
    adapt_result,
    adapt_results,
    compatible,
    incompatible,
)
from toolbridge.foundation.core import format_byte_count, normalize_output, result_kinds_for, text_of


def _tool(name: str, kinds: Any) -> Tool:
    return Tool(name=name, description=name, execute=lambda args: None, result_kinds=kinds)


TEXT = _tool("text", {ContentKind.TEXT})
IMAGE = _tool("image", {ContentKind.TEXT, ContentKind.IMAGE})
DYNAMIC = _tool("dynamic", None)


class TestFiltering:
    def test_chat_completions_text_only(self) -> None:
        assert compatible([TEXT, IMAGE, DYNAMIC], ProviderCapabilities.CHAT_COMPLETIONS) == [TEXT]
        assert incompatible([TEXT, IMAGE, DYNAMIC], ProviderCapabilities.CHAT_COMPLETIONS) == [IMAGE, DYNAMIC]

    def test_anthropic(self) -> None:
        assert compatible([TEXT, IMAGE, DYNAMIC], ProviderCapabilities.ANTHROPIC) == [TEXT, IMAGE]

    def test_unknown_kinds_need_everything(self) -> None:
        assert compatible([DYNAMIC], ProviderCapabilities.RESPONSES) == []
        assert compatible([DYNAMIC], ProviderCapabilities.GEMINI) == [DYNAMIC]

    def test_plain_kind_sets(self) -> None:
        assert compatible([TEXT, IMAGE], {"text", "image"}) == [TEXT, IMAGE]

    def test_tools_collection(self) -> None:
        tools = Tools([TEXT, IMAGE, DYNAMIC])
        filtered = tools.compatible(ProviderCapabilities.CHAT_COMPLETIONS)
        assert isinstance(filtered, Tools)
        assert filtered.names == ["text"]
        assert [t.name for t in tools.incompatible(ProviderCapabilities.ANTHROPIC)] == ["dynamic"]


class TestFallback:
    def test_unsupported_content_becomes_text(self, caplog: pytest.LogCaptureFixture) -> None:
        result = ToolResult(name="chart", id="c1", content=[
            TextContent("Here is the chart"),
            ImageContent(data=b"x" * 45_000, mime_type="image/png"),
        ])
        with caplog.at_level(logging.WARNING, logger="toolbridge.capabilities"):
            adapted = adapt_result(result, ProviderCapabilities.CHAT_COMPLETIONS)
        assert [c.kind for c in adapted.content] == [ContentKind.TEXT, ContentKind.TEXT]
        assert adapted.content[1].text == "[Unsupported result: image/png, 45 KB]"
        assert adapted.id == "c1" and not adapted.is_error
        assert "chart" in caplog.text

    def test_supported_result_unchanged(self) -> None:
        result = ToolResult.text("ok", name="t", id="1")
        assert adapt_result(result, ProviderCapabilities.CHAT_COMPLETIONS) is result

    def test_adapt_results(self) -> None:
        results = [
            ToolResult(name="a", id="1", content=[FileContent(data=b"%PDF", mime_type="application/pdf", filename="r.pdf")]),
            ToolResult(name="b", id="2", content=[AudioContent(data=b"", mime_type="audio/wav")]),
        ]
        adapted = adapt_results(results, {ContentKind.TEXT})
        assert [r.text_content for r in adapted] == [
            "[Unsupported result: r.pdf application/pdf, 4 bytes]",
            "[Unsupported result: audio/wav, Zero KB]",
        ]


class TestContent:
    @pytest.mark.parametrize(("count", "text"), [
        (0, "Zero KB"),
        (1, "1 byte"),
        (512, "512 bytes"),
        (45_000, "45 KB"),
        (1_200_000, "1.2 MB"),
        (3_250_000_000, "3.25 GB"),
    ])
    def test_byte_counts(self, count: int, text: str) -> None:
        assert format_byte_count(count) == text

    def test_text_of_skips_binary(self) -> None:
        content = [TextContent("a"), ImageContent(data=b"x"), TextContent("b")]
        assert text_of(content) == "a b"
        assert text_of(content, "\n") == "a\nb"

    def test_json_round_trip(self) -> None:
        result = ToolResult(name="img", id="1", content=[ImageContent(data=b"\x89PNG", mime_type="image/png")])
        assert ToolResult.model_validate_json(result.model_dump_json()) == result


class TestOutputs:
    def test_normalize(self) -> None:
        image = ImageResult.png(b"png")
        content = normalize_output(["ok", image, None, TextOutput("done"), 3])
        assert [c.kind for c in content] == ["text", "image", "text", "text"]
        assert content[1] == ImageContent(data=b"png", mime_type="image/png")
        assert content[3] == TextContent("3")

    def test_multi_content(self) -> None:
        items = [TextContent("a"), ImageContent(data=b"i")]
        assert normalize_output(MultiContent(items)) == items

    def test_result_kinds_from_annotation(self) -> None:
        assert result_kinds_for(str) == {ContentKind.TEXT}
        assert result_kinds_for(ImageResult) == {ContentKind.IMAGE}
        assert result_kinds_for(str | ImageResult) == {ContentKind.TEXT, ContentKind.IMAGE}
        assert result_kinds_for(list[ImageResult]) == {ContentKind.IMAGE}
        assert result_kinds_for(MultiContent) is None
        assert result_kinds_for(dict) is None
