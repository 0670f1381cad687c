"""Unified error handling for toolbridge.

- ErrorCode/classify_exception: classification for logs
- ToolbridgeError hierarchy: definition, validation, execution and routing errors
- Result/Ok/Err: monadic results used by the strict parser
"""

from .errors import (
    ConnectionNotFoundError,
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
    format_validation_error,
)
from .result import Err, Ok, Result, sequence, traverse

__all__ = [
    "ErrorCode", "classify_exception", "format_validation_error",
    "ToolbridgeError", "DefinitionError", "UnsupportedValueError",
    "ParameterValidationError", "ToolExecutionError", "RemoteToolError",
    "RoutingError", "ToolNotFoundError", "ToolNameConflictError", "ConnectionNotFoundError",
    "Result", "Ok", "Err", "sequence", "traverse",
]
