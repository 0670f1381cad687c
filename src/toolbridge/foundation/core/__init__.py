"""Core tool model: parameters, parsing, content, tools and capabilities."""

from .content import (
    ALL_KINDS,
    AudioContent,
    Content,
    ContentKind,
    FileContent,
    ImageContent,
    TextContent,
    format_byte_count,
    text_of,
)
from .decorator import descriptor_for, tool
from .outputs import (
    AudioResult,
    FileResult,
    ImageResult,
    MultiContent,
    TextOutput,
    ToolOutput,
    normalize_output,
    result_kinds_for,
)
from .parameters import (
    MISSING,
    ArrayType,
    EnumType,
    MapType,
    OptionalType,
    Parameter,
    Primitive,
    TypeDescriptor,
    build_input_schema,
    parameters_from_schema,
)
from .parsing import parse, parse_arguments, parse_base64, parse_date
from .tool import (
    ProviderCapabilities,
    Tool,
    ToolCall,
    ToolResult,
    adapt_result,
    adapt_results,
    compatible,
    incompatible,
)

__all__ = [
    # Content
    "ContentKind", "ALL_KINDS", "Content", "TextContent", "ImageContent", "AudioContent", "FileContent",
    "format_byte_count", "text_of",
    # Parameters
    "Parameter", "Primitive", "EnumType", "OptionalType", "ArrayType", "MapType", "TypeDescriptor",
    "MISSING", "build_input_schema", "parameters_from_schema",
    # Parsing
    "parse", "parse_arguments", "parse_date", "parse_base64",
    # Outputs
    "ToolOutput", "TextOutput", "ImageResult", "AudioResult", "FileResult", "MultiContent",
    "normalize_output", "result_kinds_for",
    # Tools
    "Tool", "ToolCall", "ToolResult", "tool", "descriptor_for",
    # Capabilities
    "ProviderCapabilities", "compatible", "incompatible", "adapt_result", "adapt_results",
]
