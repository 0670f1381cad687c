"""Typed parameter declarations and JSON Schema derivation.

A Parameter pairs a JSON key with a type descriptor and constraints. Type
descriptors are small immutable objects that know their JSON Schema type,
the extra schema properties they contribute, and a placeholder value:

    Primitive      STRING, INTEGER, NUMBER, BOOLEAN, DATE, DATA, OBJECT
    EnumType       closed set of string cases
    OptionalType   null accepted, derives its schema from the inner type
    ArrayType      homogeneous list, element properties merged into ``items``
    MapType        string-keyed map, value properties merged into ``additionalProperties``

Example:
    >>> params = [
    ...     Parameter.string("city", "City name", max_length=100),
    ...     Parameter.integer("days", "Forecast length", minimum=1, maximum=14, default=3),
    ... ]
    >>> build_input_schema(params)["required"]
    ['city']
"""

from __future__ import annotations

from base64 import b64encode
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, StrEnum
from typing import Any, ClassVar, TypeAlias, Union

from toolbridge.foundation.errors import DefinitionError
from toolbridge.foundation.values import ValueMap
from toolbridge.runtime.observability import get_logger

log = get_logger("toolbridge.parameters")


class _Missing:
    """Sentinel for 'no default declared'."""

    __slots__ = ()
    _instance: ClassVar[_Missing | None] = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


# ─────────────────────────────────────────────────────────────────────────────
# Type Descriptors
# ─────────────────────────────────────────────────────────────────────────────

class Primitive(StrEnum):
    """Scalar parameter types."""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    DATA = "data"
    OBJECT = "object"

    @property
    def json_type(self) -> str:
        return _PRIMITIVE_JSON_TYPES[self]

    @property
    def schema_properties(self) -> ValueMap:
        match self:
            case Primitive.DATE: return {"format": "date-time"}
            case Primitive.DATA: return {"contentEncoding": "base64"}
            case _: return {}

    @property
    def placeholder(self) -> Any:
        return _PRIMITIVE_PLACEHOLDERS[self]


_PRIMITIVE_JSON_TYPES: dict[Primitive, str] = {
    Primitive.STRING: "string",
    Primitive.INTEGER: "integer",
    Primitive.NUMBER: "number",
    Primitive.BOOLEAN: "boolean",
    Primitive.DATE: "string",
    Primitive.DATA: "string",
    Primitive.OBJECT: "object",
}

_PRIMITIVE_PLACEHOLDERS: dict[Primitive, Any] = {
    Primitive.STRING: "",
    Primitive.INTEGER: 0,
    Primitive.NUMBER: 0.0,
    Primitive.BOOLEAN: False,
    Primitive.DATE: datetime.fromtimestamp(0, tz=UTC),
    Primitive.DATA: b"",
    Primitive.OBJECT: {},
}


@dataclass(frozen=True, slots=True)
class EnumType:
    """A closed set of string cases.

    Built directly from case strings or from a ``StrEnum`` class, in which
    case parsing yields enum members instead of raw strings.
    """

    name: str
    cases: tuple[str, ...]
    enum_class: type[Enum] | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.cases:
            raise DefinitionError(f"Enum type '{self.name}' must declare at least one case")
        if len(set(self.cases)) != len(self.cases):
            raise DefinitionError(f"Enum type '{self.name}' declares duplicate cases")

    @classmethod
    def of(cls, enum_class: type[Enum]) -> EnumType:
        """Descriptor for a StrEnum (or any Enum with string values)."""
        cases = tuple(str(member.value) for member in enum_class)
        return cls(enum_class.__name__, cases, enum_class)

    @property
    def json_type(self) -> str:
        return "string"

    @property
    def schema_properties(self) -> ValueMap:
        return {"enum": list(self.cases)}

    @property
    def placeholder(self) -> Any:
        return self.enum_class(self.cases[0]) if self.enum_class else self.cases[0]


@dataclass(frozen=True, slots=True)
class OptionalType:
    """Wraps a type so that ``null`` is accepted as 'absent'."""

    inner: TypeDescriptor

    @property
    def json_type(self) -> str:
        return self.inner.json_type

    @property
    def schema_properties(self) -> ValueMap:
        return self.inner.schema_properties

    @property
    def placeholder(self) -> Any:
        return None


@dataclass(frozen=True, slots=True)
class ArrayType:
    items: TypeDescriptor = Primitive.STRING

    @property
    def json_type(self) -> str:
        return "array"

    @property
    def schema_properties(self) -> ValueMap:
        return {"items": {"type": self.items.json_type, **self.items.schema_properties}}

    @property
    def placeholder(self) -> Any:
        return []


@dataclass(frozen=True, slots=True)
class MapType:
    values: TypeDescriptor = Primitive.STRING

    @property
    def json_type(self) -> str:
        return "object"

    @property
    def schema_properties(self) -> ValueMap:
        return {"additionalProperties": {"type": self.values.json_type, **self.values.schema_properties}}

    @property
    def placeholder(self) -> Any:
        return {}


TypeDescriptor: TypeAlias = Union[Primitive, EnumType, OptionalType, ArrayType, MapType]


def is_optional(type_: TypeDescriptor) -> bool:
    return isinstance(type_, OptionalType)


def _base(type_: TypeDescriptor) -> TypeDescriptor:
    return type_.inner if isinstance(type_, OptionalType) else type_


# ─────────────────────────────────────────────────────────────────────────────
# Parameter
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Parameter:
    """One declared tool argument.

    ``name`` is the Python-side identifier the execute function receives;
    ``key`` is the JSON key the model sends (defaults to ``name``).

    Absence is governed by exactly one rule: a parameter with a default is
    optional, one without is required unless its type is ``OptionalType``.
    Declaring both ``required=True`` and a default is a DefinitionError.
    """

    name: str
    description: str
    type: TypeDescriptor = Primitive.STRING
    key: str | None = None
    title: str | None = None
    required: bool | None = None
    minimum: int | float | None = None
    maximum: int | float | None = None
    min_length: int | None = None
    max_length: int | None = None
    default: Any = MISSING

    def __post_init__(self) -> None:
        if not self.name:
            raise DefinitionError("Parameter name must not be empty")
        if self.key is None:
            object.__setattr__(self, "key", self.name)
        if self.title is None:
            object.__setattr__(self, "title", self.name)
        has_default = self.default is not MISSING
        if self.required and has_default:
            raise DefinitionError(f"Parameter '{self.name}' cannot be both required and have a default")
        if self.required is None:
            object.__setattr__(self, "required", not has_default and not is_optional(self.type))
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise DefinitionError(f"Parameter '{self.name}': minimum exceeds maximum")
        if self.min_length is not None and self.max_length is not None and self.min_length > self.max_length:
            raise DefinitionError(f"Parameter '{self.name}': minLength exceeds maxLength")

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    def json_schema(self) -> ValueMap:
        """Property fragment for this parameter."""
        prop: ValueMap = {"type": self.type.json_type, "description": self.description}
        prop.update(self.type.schema_properties)
        if self.title != self.name:
            prop["title"] = self.title
        if self.minimum is not None:
            prop["minimum"] = self.minimum
        if self.maximum is not None:
            prop["maximum"] = self.maximum
        low, high = ("minItems", "maxItems") if isinstance(_base(self.type), ArrayType) else ("minLength", "maxLength")
        if self.min_length is not None:
            prop[low] = self.min_length
        if self.max_length is not None:
            prop[high] = self.max_length
        if self.has_default and self.default is not None:
            prop["default"] = _default_to_json(self.default)
        return prop

    # Factories mirror the common declarations. ``optional=True`` wraps the
    # type in OptionalType; other keyword arguments pass through.

    @classmethod
    def string(cls, name: str, description: str, *, enum: list[str] | None = None,
               optional: bool = False, **kw: Any) -> Parameter:
        type_: TypeDescriptor = EnumType(name, tuple(enum)) if enum is not None else Primitive.STRING
        return cls(name, description, _wrap(type_, optional), **kw)

    @classmethod
    def integer(cls, name: str, description: str, *, optional: bool = False, **kw: Any) -> Parameter:
        return cls(name, description, _wrap(Primitive.INTEGER, optional), **kw)

    @classmethod
    def number(cls, name: str, description: str, *, optional: bool = False, **kw: Any) -> Parameter:
        return cls(name, description, _wrap(Primitive.NUMBER, optional), **kw)

    @classmethod
    def boolean(cls, name: str, description: str, *, optional: bool = False, **kw: Any) -> Parameter:
        return cls(name, description, _wrap(Primitive.BOOLEAN, optional), **kw)

    @classmethod
    def date(cls, name: str, description: str, *, optional: bool = False, **kw: Any) -> Parameter:
        return cls(name, description, _wrap(Primitive.DATE, optional), **kw)

    @classmethod
    def data(cls, name: str, description: str, *, optional: bool = False, **kw: Any) -> Parameter:
        return cls(name, description, _wrap(Primitive.DATA, optional), **kw)

    @classmethod
    def object(cls, name: str, description: str, *, optional: bool = False, **kw: Any) -> Parameter:
        return cls(name, description, _wrap(Primitive.OBJECT, optional), **kw)

    @classmethod
    def enum(cls, name: str, description: str, enum_class: type[Enum], *,
             optional: bool = False, **kw: Any) -> Parameter:
        return cls(name, description, _wrap(EnumType.of(enum_class), optional), **kw)

    @classmethod
    def array(cls, name: str, description: str, items: TypeDescriptor = Primitive.STRING, *,
              optional: bool = False, **kw: Any) -> Parameter:
        return cls(name, description, _wrap(ArrayType(items), optional), **kw)

    @classmethod
    def map(cls, name: str, description: str, values: TypeDescriptor = Primitive.STRING, *,
            optional: bool = False, **kw: Any) -> Parameter:
        return cls(name, description, _wrap(MapType(values), optional), **kw)


def _wrap(type_: TypeDescriptor, optional: bool) -> TypeDescriptor:
    return OptionalType(type_) if optional else type_


def _default_to_json(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return b64encode(value).decode("ascii")
    if isinstance(value, (list, tuple)):
        return [_default_to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: _default_to_json(v) for k, v in value.items()}
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Object Schema
# ─────────────────────────────────────────────────────────────────────────────

def build_input_schema(parameters: list[Parameter] | tuple[Parameter, ...], strict: bool = False) -> ValueMap:
    """Object schema for a parameter list.

    ``required`` is emitted only when non-empty; ``strict`` forbids
    undeclared keys via ``additionalProperties: false``.
    """
    seen: set[str] = set()
    properties: ValueMap = {}
    required: list[str] = []
    for param in parameters:
        if param.key in seen:
            raise DefinitionError(f"Duplicate parameter key '{param.key}'")
        seen.add(param.key)  # type: ignore[arg-type]
        properties[param.key] = param.json_schema()  # type: ignore[index]
        if param.required:
            required.append(param.key)  # type: ignore[arg-type]

    schema: ValueMap = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    if strict:
        schema["additionalProperties"] = False
    return schema


_SCHEMA_PRIMITIVES: dict[str, Primitive] = {
    "string": Primitive.STRING,
    "integer": Primitive.INTEGER,
    "number": Primitive.NUMBER,
    "boolean": Primitive.BOOLEAN,
    "object": Primitive.OBJECT,
}


def _type_from_schema(name: str, prop: ValueMap) -> TypeDescriptor:
    raw_type = prop.get("type", "string")
    nullable = False
    if isinstance(raw_type, list):
        non_null = [t for t in raw_type if t != "null"]
        nullable = len(non_null) != len(raw_type)
        raw_type = non_null[0] if non_null else "string"

    type_: TypeDescriptor
    enum_values = prop.get("enum")
    if isinstance(enum_values, list) and (cases := [v for v in enum_values if isinstance(v, str)]):
        type_ = EnumType(name, tuple(dict.fromkeys(cases)))
    elif raw_type == "array":
        items = prop.get("items")
        type_ = ArrayType(_type_from_schema(name, items) if isinstance(items, dict) else Primitive.STRING)
    elif raw_type == "string" and prop.get("format") == "date-time":
        type_ = Primitive.DATE
    elif raw_type == "string" and prop.get("contentEncoding") == "base64":
        type_ = Primitive.DATA
    else:
        type_ = _SCHEMA_PRIMITIVES.get(raw_type, Primitive.STRING) if isinstance(raw_type, str) else Primitive.STRING
    return OptionalType(type_) if nullable else type_


def parameters_from_schema(schema: ValueMap | None) -> list[Parameter]:
    """Recover Parameters from a raw object schema (remote tool definitions).

    Unknown or missing types fall back to string; arrays without ``items``
    default to string elements. Property order is preserved. The schema is
    external input, so unusable properties (empty keys) are skipped and
    contradictory bounds are dropped, each with a warning.
    """
    if not isinstance(schema, dict):
        return []
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return []
    required_keys = {k for k in schema.get("required") or () if isinstance(k, str)}

    params: list[Parameter] = []
    for key, prop in properties.items():
        if not isinstance(prop, dict):
            continue
        if not key:
            log.warning("skipping schema property with empty name")
            continue
        type_ = _type_from_schema(key, prop)
        is_required = key in required_keys
        low, high = ("minItems", "maxItems") if isinstance(_base(type_), ArrayType) else ("minLength", "maxLength")
        minimum, maximum = _bounds(key, "minimum", "maximum",
                                   _number_or_none(prop.get("minimum")), _number_or_none(prop.get("maximum")))
        min_length, max_length = _bounds(key, low, high, _int_or_none(prop.get(low)), _int_or_none(prop.get(high)))
        params.append(Parameter(
            name=key,
            description=prop.get("description") or "",
            type=type_,
            title=prop.get("title") or key,
            required=is_required,
            minimum=minimum,
            maximum=maximum,
            min_length=min_length,
            max_length=max_length,
            default=MISSING if is_required or "default" not in prop else prop["default"],
        ))
    return params


def _bounds(key: str, low_name: str, high_name: str, low: Any, high: Any) -> tuple[Any, Any]:
    if low is not None and high is not None and low > high:
        log.warning("dropping contradictory schema bounds", parameter=key, **{low_name: low, high_name: high})
        return None, None
    return low, high


def _number_or_none(value: object) -> int | float | None:
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else None


def _int_or_none(value: object) -> int | None:
    return value if isinstance(value, int) and not isinstance(value, bool) else None
