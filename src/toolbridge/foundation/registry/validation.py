"""Schema validation of call arguments before any execution.

The default validator compiles each tool's parameter list into a strict
pydantic model once, caches it per tool, and validates the raw argument map
against it. Failures are rendered per parameter in the shape the model sees:

    Missing required parameter: city
    Unexpected parameter: units
    Invalid type for 'days': expected integer, got number
    Validation failed for 'days': Input should be less than or equal to 14

Tools that carry a schema from elsewhere (remote tools) are validated
against that schema verbatim by ``JsonSchemaValidator``, with the same
message shapes.

Any object with a matching ``validate(tool, arguments)`` method can replace
the default; ``Tools(tools, validator=...)`` takes it.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal, Protocol, Union, runtime_checkable

from jsonschema import Draft202012Validator
from jsonschema import ValidationError as JsonSchemaError
from jsonschema.validators import validator_for
from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from toolbridge.foundation.core import (
    ArrayType,
    EnumType,
    MapType,
    OptionalType,
    Parameter,
    Primitive,
    Tool,
    TypeDescriptor,
)
from toolbridge.foundation.errors import ParameterValidationError
from toolbridge.foundation.values import ValueMap, schema_name


@runtime_checkable
class SchemaValidator(Protocol):
    """Validates an argument map against a tool's schema.

    Raises ParameterValidationError on failure; returns None on success.
    """

    def validate(self, tool: Tool, arguments: ValueMap) -> None: ...


_SCALAR_TYPES: dict[Primitive, Any] = {
    Primitive.STRING: str,
    Primitive.INTEGER: int,
    Primitive.BOOLEAN: bool,
    Primitive.DATE: str,
    Primitive.DATA: str,
    Primitive.OBJECT: dict[str, Any],
}


def _annotation(type_: TypeDescriptor, param: Parameter | None = None) -> Any:
    """Pydantic annotation for a descriptor; bounds apply at the parameter's own level."""
    bounds: dict[str, Any] = {}
    if param is not None:
        bounds = {k: v for k, v in (
            ("ge", param.minimum), ("le", param.maximum),
            ("min_length", param.min_length), ("max_length", param.max_length),
        ) if v is not None}

    match type_:
        case OptionalType(inner=inner):
            return Union[_annotation(inner, param), None]
        case EnumType(cases=cases):
            return Literal[cases]
        case ArrayType(items=items):
            lengths = {k: v for k, v in bounds.items() if k.endswith("length")}
            return Annotated[list[_annotation(items)], Field(**lengths)]  # type: ignore[misc]
        case MapType(values=values):
            return dict[str, _annotation(values)]  # type: ignore[misc]
        case Primitive.NUMBER:
            numeric = {k: v for k, v in bounds.items() if k in ("ge", "le")}
            return Union[Annotated[int, Field(**numeric)], Annotated[float, Field(**numeric)]]
        case Primitive.INTEGER:
            return Annotated[int, Field(**{k: v for k, v in bounds.items() if k in ("ge", "le")})]
        case Primitive.STRING:
            return Annotated[str, Field(**{k: v for k, v in bounds.items() if k.endswith("length")})]
        case _:
            return _SCALAR_TYPES[type_]


def build_arguments_model(tool: Tool) -> type[BaseModel]:
    """Strict pydantic model equivalent to the tool's parameter schema."""
    fields: dict[str, Any] = {}
    for index, param in enumerate(tool.parameters):
        annotation = _annotation(param.type, param)
        if param.required:
            fields[f"f{index}"] = (annotation, Field(..., alias=param.key))
        else:
            fields[f"f{index}"] = (annotation, Field(default=None, alias=param.key))
    config = ConfigDict(strict=True, extra="forbid" if tool.strict_schema else "ignore")
    return create_model(f"{tool.name}_arguments", __config__=config, **fields)  # type: ignore[call-overload]


def _expected_name(type_: TypeDescriptor) -> str:
    match type_:
        case OptionalType(inner=inner):
            return f"{_expected_name(inner)} or null"
        case EnumType(cases=cases):
            return "one of " + ", ".join(cases)
        case _:
            return type_.json_type


def render_errors(tool: Tool, exc: ValidationError, arguments: ValueMap) -> ParameterValidationError:
    """Collapse a pydantic error list into one message with one line per parameter."""
    by_key = {p.key: p for p in tool.parameters}
    grouped: dict[str, list[dict[str, Any]]] = {}
    for err in exc.errors():
        key = str(err["loc"][0]) if err["loc"] else "<root>"
        grouped.setdefault(key, []).append(err)  # type: ignore[arg-type]

    problems: list[ParameterValidationError] = []
    for key, errors in grouped.items():
        types = {e["type"] for e in errors}
        param = by_key.get(key)
        if "missing" in types:
            problems.append(ParameterValidationError.missing(key))
        elif "extra_forbidden" in types:
            problems.append(ParameterValidationError.unexpected(key))
        elif param is not None and key in arguments and _is_top_level_mismatch(param, arguments[key]):
            problems.append(ParameterValidationError.invalid_type(
                key, _expected_name(param.type), schema_name(arguments.get(key))
            ))
        else:
            problems.append(ParameterValidationError.failed(key, errors[0]["msg"]))

    if len(problems) == 1:
        return problems[0]
    return ParameterValidationError("; ".join(str(p) for p in problems), parameter=problems[0].parameter)


def _is_top_level_mismatch(param: Parameter, value: object) -> bool:
    """True when the value's own JSON kind is wrong, not a nested element."""
    type_ = param.type.inner if isinstance(param.type, OptionalType) else param.type
    name = schema_name(value)
    match type_:
        case EnumType():
            return name != "string"
        case ArrayType():
            return name != "array"
        case MapType() | Primitive.OBJECT:
            return name != "object"
        case Primitive.NUMBER:
            return name not in ("integer", "number")
        case _:
            return name != type_.json_type


class PydanticSchemaValidator:
    """Default validator: cached strict pydantic models per tool.

    Tools that take raw arguments (``parse_arguments=False``, e.g. remote
    tools) are checked against their own ``input_schema`` instead.
    """

    __slots__ = ("_models", "_raw")

    def __init__(self) -> None:
        self._models: dict[Tool, type[BaseModel]] = {}
        self._raw = JsonSchemaValidator()

    def model_for(self, tool: Tool) -> type[BaseModel]:
        if (model := self._models.get(tool)) is None:
            model = self._models[tool] = build_arguments_model(tool)
        return model

    def validate(self, tool: Tool, arguments: ValueMap) -> None:
        if not tool.parse_arguments:
            return self._raw.validate(tool, arguments)
        if not isinstance(arguments, dict):
            raise ParameterValidationError(f"Arguments must be an object, got {schema_name(arguments)}")
        try:
            self.model_for(tool).model_validate(arguments)
        except ValidationError as e:
            raise render_errors(tool, e, arguments) from None


# ─────────────────────────────────────────────────────────────────────────────
# Raw JSON Schema (remote tools)
# ─────────────────────────────────────────────────────────────────────────────

def _schema_type_name(expected: object) -> str:
    if isinstance(expected, list):
        return " or ".join(str(t) for t in expected)
    return str(expected)


def _unexpected_keys(error: JsonSchemaError) -> list[str]:
    schema = error.schema if isinstance(error.schema, dict) else {}
    declared = schema.get("properties") or {}
    patterns = list(schema.get("patternProperties") or {})
    instance = error.instance if isinstance(error.instance, dict) else {}
    return [k for k in instance if k not in declared and not any(re.search(p, k) for p in patterns)]


def render_schema_errors(errors: list[JsonSchemaError]) -> ParameterValidationError:
    """One message with one line per offending parameter, in the shape of ``render_errors``."""
    problems: list[ParameterValidationError] = []
    for error in errors:
        path = list(error.absolute_path)
        if not path:
            match error.validator:
                case "required":
                    instance = error.instance if isinstance(error.instance, dict) else {}
                    problems += [ParameterValidationError.missing(k) for k in error.validator_value if k not in instance]
                case "additionalProperties":
                    problems += [ParameterValidationError.unexpected(k) for k in _unexpected_keys(error)]
                case _:
                    problems.append(ParameterValidationError(f"Arguments failed validation: {error.message}"))
            continue
        key = str(path[0])
        if len(path) == 1 and error.validator == "type":
            problems.append(ParameterValidationError.invalid_type(
                key, _schema_type_name(error.validator_value), schema_name(error.instance)
            ))
        else:
            problems.append(ParameterValidationError.failed(key, error.message))

    if len(problems) == 1:
        return problems[0]
    return ParameterValidationError("; ".join(str(p) for p in problems), parameter=problems[0].parameter)


class JsonSchemaValidator:
    """Validates against ``tool.input_schema`` as written, with a real JSON Schema engine.

    Used for tools whose schema comes from elsewhere (remote servers), where
    ``anyOf``, ``$ref`` and friends must be honored rather than re-derived.
    The draft is taken from ``$schema``, defaulting to 2020-12.
    """

    __slots__ = ("_validators",)

    def __init__(self) -> None:
        self._validators: dict[Tool, Any] = {}

    def validator_for(self, tool: Tool) -> Any:
        if (validator := self._validators.get(tool)) is None:
            schema = tool.input_schema or {"type": "object"}
            cls = validator_for(schema, default=Draft202012Validator)
            validator = self._validators[tool] = cls(schema)
        return validator

    def validate(self, tool: Tool, arguments: ValueMap) -> None:
        if not isinstance(arguments, dict):
            raise ParameterValidationError(f"Arguments must be an object, got {schema_name(arguments)}")
        errors = sorted(self.validator_for(tool).iter_errors(arguments), key=lambda e: [str(p) for p in e.absolute_path])
        if errors:
            raise render_schema_errors(errors)
