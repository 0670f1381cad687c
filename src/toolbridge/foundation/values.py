"""Provider-agnostic JSON value algebra.

Tool arguments and results travel as plain JSON-compatible Python objects:
``None``, ``bool``, ``int``, ``float``, ``str``, ``list`` and ``dict`` with
string keys. This module classifies, compares, hashes and serializes them.

Equality is structural and type-exact: ``1``, ``1.0`` and ``True`` are three
different values, which plain ``==`` would conflate.

Example:
    >>> kind_of(1.5)
    <ValueKind.DOUBLE: 'double'>
    >>> values_equal({"a": [1, 2]}, {"a": [1, 2]})
    True
    >>> values_equal(1, 1.0)
    False
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any, TypeAlias, Union

import orjson

from toolbridge.foundation.errors import UnsupportedValueError

JsonPrimitive = Union[str, int, float, bool, None]
Value: TypeAlias = Union[JsonPrimitive, list[Any], dict[str, Any]]  # Any for recursive slots
ValueMap: TypeAlias = dict[str, Any]


class ValueKind(StrEnum):
    """Discriminant of a Value."""
    NULL = "null"
    BOOL = "bool"
    INT = "int"
    DOUBLE = "double"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


# JSON Schema names used in validation messages
_SCHEMA_NAMES: dict[ValueKind, str] = {
    ValueKind.NULL: "null",
    ValueKind.BOOL: "boolean",
    ValueKind.INT: "integer",
    ValueKind.DOUBLE: "number",
    ValueKind.STRING: "string",
    ValueKind.ARRAY: "array",
    ValueKind.OBJECT: "object",
}


def kind_of(value: object) -> ValueKind:
    """Classify a value. ``bool`` is checked before ``int`` since it subclasses it."""
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.DOUBLE
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    raise UnsupportedValueError(type(value).__name__)


def schema_name(value: object) -> str:
    """JSON Schema type name of a value (``integer``, ``number``, ...), ``unknown`` for non-JSON."""
    try:
        return _SCHEMA_NAMES[kind_of(value)]
    except UnsupportedValueError:
        return type(value).__name__


def from_any(obj: object) -> Value:
    """Normalize an arbitrary Python object into a Value.

    Tuples become lists and mappings become dicts. Non-string keys and
    non-JSON leaves raise UnsupportedValueError.
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj  # type: ignore[return-value]
    if isinstance(obj, Mapping):
        out: ValueMap = {}
        for key, item in obj.items():
            if not isinstance(key, str):
                raise UnsupportedValueError(f"non-string key {type(key).__name__}")
            out[key] = from_any(item)
        return out
    if isinstance(obj, Sequence) and not isinstance(obj, (bytes, bytearray)):
        return [from_any(item) for item in obj]
    raise UnsupportedValueError(type(obj).__name__)


def freeze(value: Value) -> object:
    """Hashable, type-tagged structural form of a value."""
    kind = kind_of(value)
    if kind is ValueKind.ARRAY:
        return (kind, tuple(freeze(v) for v in value))  # type: ignore[union-attr]
    if kind is ValueKind.OBJECT:
        return (kind, frozenset((k, freeze(v)) for k, v in value.items()))  # type: ignore[union-attr]
    return (kind, value)


def value_hash(value: Value) -> int:
    """Structural hash consistent with values_equal."""
    return hash(freeze(value))


def values_equal(a: Value, b: Value) -> bool:
    """Structural equality that distinguishes int, float and bool."""
    return freeze(a) == freeze(b)


def describe(value: Value) -> str:
    """Compact human-readable rendering (strings unquoted at top level)."""
    match kind_of(value):
        case ValueKind.NULL:
            return "null"
        case ValueKind.BOOL:
            return "true" if value else "false"
        case ValueKind.STRING:
            return value  # type: ignore[return-value]
        case ValueKind.ARRAY:
            return "[" + ", ".join(describe(v) for v in value) + "]"  # type: ignore[union-attr]
        case ValueKind.OBJECT:
            return "{" + ", ".join(f'"{k}": {describe(v)}' for k, v in value.items()) + "}"  # type: ignore[union-attr]
        case _:
            return str(value)


def to_json(value: Value) -> str:
    """Serialize to compact JSON text."""
    return orjson.dumps(value).decode()


def from_json(data: bytes | str) -> Value:
    """Parse JSON text into a Value. Raises orjson.JSONDecodeError on malformed input."""
    return orjson.loads(data)
