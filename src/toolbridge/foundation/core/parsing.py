"""Strict typed parsing of validated argument values.

Parsing runs after schema validation and never coerces across kinds:

    STRING   only str
    INTEGER  only int (never bool, never float)
    NUMBER   int or float, widened to float
    BOOLEAN  only bool
    DATE     ISO-8601 string, fractional-seconds profile first, then without
    DATA     strict base64 string
    Optional null -> None, anything else delegates to the inner type
    Array/Map whole container fails if any element fails
    Enum     exact match against the raw case values

Every step returns a Result so composite types can short-circuit with
``traverse``.

Example:
    >>> parse(Primitive.INTEGER, 1.5).is_err()
    True
    >>> parse(Primitive.NUMBER, 5).unwrap()
    5.0
"""

from __future__ import annotations

import binascii
import re
from base64 import b64decode
from datetime import datetime
from typing import Any, Iterable

from toolbridge.foundation.errors import Err, Ok, ParameterValidationError, Result, traverse
from toolbridge.foundation.values import ValueMap, schema_name

from .parameters import (
    MISSING,
    ArrayType,
    EnumType,
    MapType,
    OptionalType,
    Parameter,
    Primitive,
    TypeDescriptor,
)

# RFC 3339 internet date-time, with and without fractional seconds
_DATE_FRACTIONAL = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d+(?:Z|[+-]\d{2}:\d{2})$", re.IGNORECASE
)
_DATE_WHOLE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:Z|[+-]\d{2}:\d{2})$", re.IGNORECASE)


def _expected(type_: TypeDescriptor) -> str:
    match type_:
        case Primitive.DATE: return "ISO-8601 date-time string"
        case Primitive.DATA: return "base64 string"
        case EnumType(cases=cases): return "one of " + ", ".join(cases)
        case OptionalType(inner=inner): return f"{_expected(inner)} or null"
        case _: return type_.json_type


def _mismatch(type_: TypeDescriptor, value: object) -> Result[Any, str]:
    return Err(f"expected {_expected(type_)}, got {schema_name(value)}")


def parse_date(text: str) -> datetime | None:
    """Parse an internet date-time, trying the fractional-seconds form first."""
    for pattern in (_DATE_FRACTIONAL, _DATE_WHOLE):
        if pattern.match(text):
            try:
                return datetime.fromisoformat(text.upper().replace("Z", "+00:00"))
            except ValueError:
                return None
    return None


def parse_base64(text: str) -> bytes | None:
    try:
        return b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return None


def parse(type_: TypeDescriptor, value: object) -> Result[Any, str]:
    """Parse one value into the Python type described by ``type_``."""
    match type_:
        case Primitive.STRING:
            return Ok(value) if isinstance(value, str) else _mismatch(type_, value)
        case Primitive.INTEGER:
            ok = isinstance(value, int) and not isinstance(value, bool)
            return Ok(value) if ok else _mismatch(type_, value)
        case Primitive.NUMBER:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
            return Ok(float(value)) if ok else _mismatch(type_, value)  # type: ignore[arg-type]
        case Primitive.BOOLEAN:
            return Ok(value) if isinstance(value, bool) else _mismatch(type_, value)
        case Primitive.DATE:
            parsed = parse_date(value) if isinstance(value, str) else None
            return Ok(parsed) if parsed is not None else _mismatch(type_, value)
        case Primitive.DATA:
            decoded = parse_base64(value) if isinstance(value, str) else None
            return Ok(decoded) if decoded is not None else _mismatch(type_, value)
        case Primitive.OBJECT:
            return Ok(value) if isinstance(value, dict) else _mismatch(type_, value)
        case EnumType(cases=cases, enum_class=enum_class):
            if isinstance(value, str) and value in cases:
                return Ok(enum_class(value) if enum_class else value)
            return _mismatch(type_, value)
        case OptionalType(inner=inner):
            return Ok(None) if value is None else parse(inner, value)
        case ArrayType(items=items):
            if not isinstance(value, list):
                return _mismatch(type_, value)
            return traverse(value, lambda item: parse(items, item)).map_err(lambda e: f"element {e}")
        case MapType(values=inner):
            if not isinstance(value, dict):
                return _mismatch(type_, value)
            keys = list(value)
            return (
                traverse(keys, lambda k: parse(inner, value[k]).map_err(lambda e: f"'{k}': {e}"))
                .map(lambda parsed: dict(zip(keys, parsed)))
            )
    return Err(f"unsupported parameter type {type_!r}")


def parse_arguments(parameters: Iterable[Parameter], arguments: ValueMap) -> dict[str, Any]:
    """Parse a validated argument map into execute kwargs keyed by parameter name.

    Absent parameters take their declared default, or None when optional.

    Raises:
        ParameterValidationError: a required key is missing or a value fails to parse
    """
    parsed: dict[str, Any] = {}
    for param in parameters:
        if param.key not in arguments:
            if param.required:
                raise ParameterValidationError.missing(param.key)  # type: ignore[arg-type]
            parsed[param.name] = None if param.default is MISSING else param.default
            continue
        result = parse(param.type, arguments[param.key])
        if result.is_err():
            raise ParameterValidationError.failed(param.key, result.unwrap_err())  # type: ignore[arg-type]
        parsed[param.name] = result.unwrap()
    return parsed
