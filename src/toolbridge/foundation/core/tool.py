"""Tool definitions, calls, results and provider capability filtering.

A Tool couples a definition the model sees (name, description, input schema)
with an execute function the engine runs. Calls arrive as ToolCall values
produced by a provider adapter; every call yields exactly one ToolResult
with the same id.

Execute functions receive the parsed arguments as one dict keyed by
parameter name. They may be sync (run in a worker thread) or async, and may
accept a ``context`` keyword to receive the CallContext of the call:

    >>> async def forecast(args, context):
    ...     await context.reporter().report(1, 2)
    ...     return f"Sunny in {args['city']}"
    >>> weather = Tool(
    ...     name="forecast",
    ...     description="Weather forecast for a city",
    ...     parameters=[Parameter.string("city", "City name")],
    ...     execute=forecast,
    ...     result_kinds=frozenset({ContentKind.TEXT}),
    ... )
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, ClassVar

import orjson
from pydantic import BaseModel, ConfigDict, Field

from toolbridge.foundation.config import get_settings
from toolbridge.foundation.errors import DefinitionError, ParameterValidationError
from toolbridge.foundation.values import ValueMap, to_json
from toolbridge.io.progress import CallContext

from . import parsing
from .content import ALL_KINDS, Content, ContentKind, TextContent, text_of
from .outputs import normalize_output
from .parameters import Parameter, build_input_schema

logger = logging.getLogger("toolbridge.capabilities")

ExecuteFn = Callable[..., Any]


# ─────────────────────────────────────────────────────────────────────────────
# Calls & Results
# ─────────────────────────────────────────────────────────────────────────────

class ToolCall(BaseModel):
    """A model's request to run one tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    id: str
    parameters: ValueMap = Field(default_factory=dict)
    provider_metadata: dict[str, str] | None = None

    def parameters_json(self) -> str:
        return to_json(self.parameters)

    @staticmethod
    def parse_arguments(json_text: str | bytes | None) -> ValueMap:
        """Decode a provider's argument string. Empty input means no arguments.

        Raises:
            ParameterValidationError: malformed JSON or a non-object payload
        """
        if not json_text or not json_text.strip():
            return {}
        try:
            decoded = orjson.loads(json_text)
        except orjson.JSONDecodeError as e:
            raise ParameterValidationError(f"Tool arguments are not valid JSON: {e}") from e
        if not isinstance(decoded, dict):
            raise ParameterValidationError("Tool arguments must be a JSON object")
        return decoded


class ToolResult(BaseModel):
    """The outcome of one call. ``id`` always equals the originating call's id."""

    model_config = ConfigDict(frozen=True)

    name: str
    id: str
    content: list[Content] = Field(default_factory=list)
    is_error: bool = False

    @classmethod
    def text(cls, text: str, *, name: str, id: str) -> ToolResult:  # noqa: A002
        return cls(name=name, id=id, content=[TextContent(text)])

    @classmethod
    def error(cls, message: str, *, name: str, id: str) -> ToolResult:  # noqa: A002
        return cls(name=name, id=id, content=[TextContent(message)], is_error=True)

    @property
    def text_content(self) -> str:
        """Text items joined by a space."""
        return text_of(self.content)

    @property
    def kinds(self) -> frozenset[ContentKind]:
        return frozenset(c.kind for c in self.content)


# ─────────────────────────────────────────────────────────────────────────────
# Tool
# ─────────────────────────────────────────────────────────────────────────────

def _is_async(fn: Callable[..., Any]) -> bool:
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(getattr(fn, "__call__", None))


def _accepts_context(fn: Callable[..., Any]) -> bool:
    try:
        params = inspect.signature(fn).parameters
    except (TypeError, ValueError):
        return False
    return "context" in params or any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values())


@dataclass(frozen=True, slots=True, eq=False)
class Tool:
    """A tool definition plus its execute function.

    ``result_kinds`` of None means the produced kinds are only known at
    runtime. ``input_schema`` is derived from ``parameters`` unless given
    explicitly (remote tools carry their server's schema verbatim).
    ``parse_arguments`` False hands execute the validated raw argument map.
    """

    name: str
    description: str
    execute: ExecuteFn
    parameters: tuple[Parameter, ...] = ()
    title: str | None = None
    result_kinds: frozenset[ContentKind] | None = None
    strict_schema: bool | None = None
    input_schema: ValueMap | None = None
    parse_arguments: bool = True
    _async: bool = field(init=False, repr=False, compare=False, default=False)
    _wants_context: bool = field(init=False, repr=False, compare=False, default=False)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise DefinitionError("Tool name must not be empty")
        if not self.description or not self.description.strip():
            raise DefinitionError(f"Tool '{self.name}' must have a description")
        object.__setattr__(self, "parameters", tuple(self.parameters))
        if self.title is None:
            object.__setattr__(self, "title", self.name)
        if self.strict_schema is None:
            object.__setattr__(self, "strict_schema", get_settings().tools.strict_schema)
        if self.result_kinds is not None:
            object.__setattr__(self, "result_kinds", frozenset(ContentKind(k) for k in self.result_kinds))
        if self.input_schema is None:
            object.__setattr__(self, "input_schema", build_input_schema(self.parameters, self.strict_schema))
        object.__setattr__(self, "_async", _is_async(self.execute))
        object.__setattr__(self, "_wants_context", _accepts_context(self.execute))

    def definition(self) -> ValueMap:
        """Name, description and schema: all a provider request carries."""
        return {"name": self.name, "description": self.description, "input_schema": self.input_schema}

    def prepare_arguments(self, arguments: ValueMap) -> dict[str, Any]:
        """Typed execute arguments for an already validated argument map.

        Raises:
            ParameterValidationError: a value fails strict parsing
        """
        return parsing.parse_arguments(self.parameters, arguments) if self.parse_arguments else dict(arguments)

    async def run(self, args: dict[str, Any], context: CallContext) -> list[Content]:
        """Run execute on prepared arguments and normalize its output.

        Raises whatever execute raises; Tools turns it into an error result.
        """
        kwargs = {"context": context} if self._wants_context else {}
        if self._async:
            output = await self.execute(args, **kwargs)
        else:
            output = await asyncio.to_thread(self.execute, args, **kwargs)
            if inspect.isawaitable(output):
                output = await output
        return normalize_output(output)


# ─────────────────────────────────────────────────────────────────────────────
# Capabilities
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class ProviderCapabilities:
    """Result content kinds a provider can carry inside a tool result."""

    name: str
    supported: frozenset[ContentKind]

    CHAT_COMPLETIONS: ClassVar[ProviderCapabilities]
    ANTHROPIC: ClassVar[ProviderCapabilities]
    RESPONSES: ClassVar[ProviderCapabilities]
    GEMINI: ClassVar[ProviderCapabilities]

    def supports(self, kind: ContentKind) -> bool:
        return kind in self.supported


ProviderCapabilities.CHAT_COMPLETIONS = ProviderCapabilities("chat_completions", frozenset({ContentKind.TEXT}))
ProviderCapabilities.ANTHROPIC = ProviderCapabilities("anthropic", frozenset({ContentKind.TEXT, ContentKind.IMAGE}))
ProviderCapabilities.RESPONSES = ProviderCapabilities(
    "responses", frozenset({ContentKind.TEXT, ContentKind.IMAGE, ContentKind.FILE})
)
ProviderCapabilities.GEMINI = ProviderCapabilities("gemini", ALL_KINDS)

Supported = ProviderCapabilities | Iterable[ContentKind]


def _kinds(supported: Supported) -> frozenset[ContentKind]:
    if isinstance(supported, ProviderCapabilities):
        return supported.supported
    return frozenset(ContentKind(k) for k in supported)


def _is_compatible(tool: Tool, supported: frozenset[ContentKind]) -> bool:
    if tool.result_kinds is None:
        return ALL_KINDS <= supported
    return tool.result_kinds <= supported


def compatible(tools: Iterable[Tool], supported: Supported) -> list[Tool]:
    """Tools whose declared result kinds the provider can carry.

    Tools with unknown kinds are kept only when every kind is supported.
    """
    kinds = _kinds(supported)
    return [t for t in tools if _is_compatible(t, kinds)]


def incompatible(tools: Iterable[Tool], supported: Supported) -> list[Tool]:
    kinds = _kinds(supported)
    return [t for t in tools if not _is_compatible(t, kinds)]


def adapt_result(result: ToolResult, supported: Supported) -> ToolResult:
    """Replace content the provider cannot carry with its text fallback."""
    kinds = _kinds(supported)
    if result.kinds <= kinds:
        return result
    adapted: list[Content] = []
    for item in result.content:
        if item.kind in kinds:
            adapted.append(item)
            continue
        logger.warning(
            "tool %s produced unsupported %s content; substituting text fallback",
            result.name, item.kind,
        )
        adapted.append(TextContent(item.fallback_description))
    return result.model_copy(update={"content": adapted})


def adapt_results(results: Iterable[ToolResult], supported: Supported) -> list[ToolResult]:
    kinds = _kinds(supported)
    return [adapt_result(r, kinds) for r in results]
