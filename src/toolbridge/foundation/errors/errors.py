"""Error taxonomy for the tool-calling engine.

Errors fall into groups with different propagation rules:

- Definition errors (malformed tool/enum declarations) are raised eagerly
  when a tool is built and are never recovered at runtime.
- Validation and execution errors are caught by ``Tools`` and turned into
  error ToolResults the model can react to.
- Routing errors (unknown remote tool, name conflicts, missing connection)
  are raised to the caller of the bridge; they indicate a configuration
  mistake rather than something the model can fix.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pydantic import ValidationError


class ErrorCode(StrEnum):
    """Machine-readable classification used for logging and metrics."""
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    INVALID_PARAMS = "INVALID_PARAMS"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    PARSE_ERROR = "PARSE_ERROR"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"


_PATTERN_CODES: dict[str, ErrorCode] = {
    "timeout": ErrorCode.TIMEOUT,
    "connection": ErrorCode.NETWORK_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "permission": ErrorCode.PERMISSION_DENIED,
    "forbidden": ErrorCode.PERMISSION_DENIED,
    "notfound": ErrorCode.NOT_FOUND,
    "parse": ErrorCode.PARSE_ERROR,
    "json": ErrorCode.PARSE_ERROR,
    "decode": ErrorCode.PARSE_ERROR,
    "validation": ErrorCode.INVALID_PARAMS,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES)


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.EXECUTION_FAILED


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map exception to error code via pattern matching on name/message."""
    if isinstance(exc, ToolbridgeError):
        return exc.code
    return _classify_cached(f"{type(exc).__name__} {exc}")


class ToolbridgeError(Exception):
    """Base class for all errors raised by toolbridge."""

    code: ErrorCode = ErrorCode.UNKNOWN


class DefinitionError(ToolbridgeError):
    """A tool, parameter or enum declaration is malformed."""


class UnsupportedValueError(ToolbridgeError, TypeError):
    """An object cannot be represented as a JSON Value."""

    code = ErrorCode.PARSE_ERROR

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Unsupported value type: {type_name}")


class ParameterValidationError(ToolbridgeError, ValueError):
    """Arguments failed schema validation or typed parsing.

    Construct with one of the classmethods so the message has the same shape
    the model sees for every kind of failure.
    """

    code = ErrorCode.INVALID_PARAMS

    def __init__(self, message: str, *, parameter: str | None = None) -> None:
        self.parameter = parameter
        super().__init__(message)

    @classmethod
    def missing(cls, parameter: str) -> ParameterValidationError:
        return cls(f"Missing required parameter: {parameter}", parameter=parameter)

    @classmethod
    def invalid_type(cls, parameter: str, expected: str, got: str) -> ParameterValidationError:
        return cls(f"Invalid type for '{parameter}': expected {expected}, got {got}", parameter=parameter)

    @classmethod
    def failed(cls, parameter: str, reason: str) -> ParameterValidationError:
        return cls(f"Validation failed for '{parameter}': {reason}", parameter=parameter)

    @classmethod
    def unexpected(cls, parameter: str) -> ParameterValidationError:
        return cls(f"Unexpected parameter: {parameter}", parameter=parameter)


class ToolExecutionError(ToolbridgeError):
    """Raised by tool implementations to report a model-visible failure."""

    code = ErrorCode.EXECUTION_FAILED


class RemoteToolError(ToolExecutionError):
    """A remote server returned an error-flagged result."""


class RoutingError(ToolbridgeError):
    """A call could not be routed to any tool or connection."""

    code = ErrorCode.NOT_FOUND


class ToolNotFoundError(RoutingError, LookupError):
    """No connected server exposes the requested tool."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' not found in any connected server.")


class ToolNameConflictError(RoutingError):
    """Several servers expose the same bare tool name and namespacing is off."""

    def __init__(self, tool_name: str, servers: list[str]) -> None:
        self.tool_name, self.servers = tool_name, list(servers)
        super().__init__(
            f"Tool '{tool_name}' is provided by multiple servers: {', '.join(servers)}. "
            "Use tools(namespaced=True) to disambiguate."
        )


class ConnectionNotFoundError(RoutingError, LookupError):
    """A server index or name does not match any attached connection."""

    def __init__(self, server: str | int) -> None:
        self.server = server
        super().__init__(f"No connection for server {server!r}")


def format_validation_error(exc: ValidationError, *, tool_name: str | None = None) -> str:
    """Render a pydantic ValidationError as one line per failing field."""
    lines = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        lines.append(f"'{loc}': {err['msg']}")
    prefix = f"[{tool_name}] " if tool_name else ""
    return prefix + "; ".join(lines)
