"""Toolbridge - tool-calling engine for agentic LLM loops.

Declares tools with explicit parameter lists, derives their JSON schemas,
validates and parses model-issued calls strictly, executes batches
concurrently with isolated failures and ordered results, keeps conversation
history well formed, and bridges remote MCP tool servers.

Quick Start:
    >>> from toolbridge import Tools, configure_from_settings, tool
    >>>
    >>> @tool(description="Weather forecast for a city")
    ... def forecast(city: str, days: int = 3) -> str:
    ...     '''Look up the forecast.
    ...
    ...     Args:
    ...         city: City name
    ...         days: Number of days
    ...     '''
    ...     return f"Sunny in {city} for {days} days"
    >>>
    >>> configure_from_settings()  # apply TOOLBRIDGE_LOG_* once at startup
    >>> tools = Tools([forecast])
    >>> results = await tools.call_all(response.tool_calls)
    >>> history += [response.message, results_message(results)]

Explicit declaration:
    >>> from toolbridge import Parameter, Tool
    >>> search = Tool(
    ...     name="search",
    ...     description="Search documents",
    ...     parameters=[Parameter.string("query", "Search terms"),
    ...                 Parameter.integer("limit", "Max hits", minimum=1, default=5)],
    ...     execute=lambda args: run_search(args["query"], args["limit"]),
    ... )

Remote tools (MCP):
    >>> from toolbridge.ext.mcp import RemoteToolBridge, SessionConnection
    >>> bridge = RemoteToolBridge([await SessionConnection.connect(session)])
    >>> tools = tools + await bridge.tools()
"""

from __future__ import annotations

__version__ = "0.1.0"

# Configuration
from .foundation.config import ToolbridgeSettings, clear_settings_cache, get_settings

# Conversation
from .foundation.conversation import (
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

# Core
from .foundation.core import (
    AudioContent,
    AudioResult,
    Content,
    ContentKind,
    FileContent,
    FileResult,
    ImageContent,
    ImageResult,
    MultiContent,
    Parameter,
    Primitive,
    ProviderCapabilities,
    TextContent,
    TextOutput,
    Tool,
    ToolCall,
    ToolResult,
    adapt_result,
    adapt_results,
    build_input_schema,
    compatible,
    incompatible,
    tool,
)

# Errors
from .foundation.errors import (
    DefinitionError,
    ErrorCode,
    ParameterValidationError,
    RemoteToolError,
    RoutingError,
    ToolbridgeError,
    ToolExecutionError,
    ToolNameConflictError,
    ToolNotFoundError,
    UnsupportedValueError,
    classify_exception,
)

# Registry
from .foundation.registry import JsonSchemaValidator, PydanticSchemaValidator, SchemaValidator, Tools

# Progress & streaming
from .io.progress import CallContext, ProgressCallback, ToolCallProgressUpdate
from .io.streaming import sse_payloads, sse_payloads_from_response

# Observability
from .runtime.observability import configure_from_settings, configure_logging, get_logger

__all__ = [
    "__version__",
    # Config
    "ToolbridgeSettings", "get_settings", "clear_settings_cache",
    # Core
    "Tool", "ToolCall", "ToolResult", "Parameter", "Primitive", "tool", "build_input_schema",
    "Content", "ContentKind", "TextContent", "ImageContent", "AudioContent", "FileContent",
    "TextOutput", "ImageResult", "AudioResult", "FileResult", "MultiContent",
    "ProviderCapabilities", "compatible", "incompatible", "adapt_result", "adapt_results",
    # Registry
    "Tools", "SchemaValidator", "PydanticSchemaValidator", "JsonSchemaValidator",
    # Conversation
    "Message", "Role", "Attachment", "AttachmentKind", "OpaqueBlock",
    "GenerationResponse", "ResponseTexts", "ResponseMetadata", "FinishReason",
    "results_message", "patching_orphaned_tool_calls",
    # Errors
    "ToolbridgeError", "DefinitionError", "ParameterValidationError", "ToolExecutionError",
    "RemoteToolError", "RoutingError", "ToolNotFoundError", "ToolNameConflictError",
    "UnsupportedValueError", "ErrorCode", "classify_exception",
    # Progress & streaming
    "CallContext", "ProgressCallback", "ToolCallProgressUpdate",
    "sse_payloads", "sse_payloads_from_response",
    # Observability
    "configure_logging", "configure_from_settings", "get_logger",
]
