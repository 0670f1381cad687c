"""Tools collection and argument schema validation."""

from .tools import Tools, describe_exception
from .validation import JsonSchemaValidator, PydanticSchemaValidator, SchemaValidator, build_arguments_model

__all__ = [
    "Tools", "describe_exception",
    "SchemaValidator", "PydanticSchemaValidator", "JsonSchemaValidator", "build_arguments_model",
]
