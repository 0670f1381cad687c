"""Decorator-based tool definition for plain functions.

Turns a function with keyword parameters into a Tool. Parameters are either
declared explicitly or derived from type hints, with descriptions taken from
a Google/NumPy style docstring. Result kinds come from the return
annotation unless given.

Example:
    >>> @tool(description="Search the web for information")
    ... async def web_search(query: str, limit: int = 5) -> str:
    ...     '''Search the web.
    ...
    ...     Args:
    ...         query: Search query string
    ...         limit: Maximum results to return
    ...     '''
    ...     return f"Results for: {query}"
    >>> web_search.input_schema["required"]
    ['query']

Explicit parameters keep full control over keys, bounds and titles:
    >>> @tool(
    ...     name="get_weather",
    ...     description="Current weather",
    ...     parameters=[Parameter.string("city", "City name", max_length=100)],
    ... )
    ... def get_weather(city: str) -> str: ...
"""

from __future__ import annotations

import inspect
import re
import types
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any, Literal, Union, get_args, get_origin, get_type_hints, overload

from toolbridge.foundation.errors import DefinitionError

from .outputs import result_kinds_for
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
from .tool import Tool

# ─────────────────────────────────────────────────────────────────────────────
# Docstring Parsing
# ─────────────────────────────────────────────────────────────────────────────

_PARAM_PATTERN = re.compile(
    r"^\s*(?P<name>\w+)\s*(?:\([^)]*\))?\s*:\s*(?P<desc>.+?)(?=\n\s*\w+\s*(?:\([^)]*\))?\s*:|$)",
    re.MULTILINE | re.DOTALL,
)
_SECTION_START = re.compile(r"\n\s*(?:Args|Arguments|Parameters)\s*:\s*\n", re.IGNORECASE)
_SECTION_END = re.compile(r"\n\s*(?:Returns|Raises|Examples?|Notes?|Yields)\s*:", re.IGNORECASE)


def _parse_docstring_params(docstring: str | None) -> dict[str, str]:
    """Extract parameter descriptions from Google/NumPy style docstrings."""
    if not docstring:
        return {}
    sections = _SECTION_START.split(docstring, maxsplit=1)
    if len(sections) < 2:
        return {}
    args_section = _SECTION_END.split(sections[1], maxsplit=1)[0]
    return {m.group("name"): " ".join(m.group("desc").split()) for m in _PARAM_PATTERN.finditer(args_section)}


def _docstring_summary(docstring: str | None) -> str:
    """First paragraph of a docstring, whitespace-normalized."""
    if not docstring:
        return ""
    return " ".join(inspect.cleandoc(docstring).split("\n\n", 1)[0].split())


# ─────────────────────────────────────────────────────────────────────────────
# Type Hints → Descriptors
# ─────────────────────────────────────────────────────────────────────────────

_SCALARS: dict[Any, Primitive] = {
    str: Primitive.STRING,
    bool: Primitive.BOOLEAN,
    int: Primitive.INTEGER,
    float: Primitive.NUMBER,
    datetime: Primitive.DATE,
    bytes: Primitive.DATA,
    dict: Primitive.OBJECT,
}


def descriptor_for(hint: Any, name: str = "value") -> TypeDescriptor:
    """Map a type hint to a type descriptor.

    Raises:
        DefinitionError: the hint has no parameter representation
    """
    if hint in _SCALARS:
        return _SCALARS[hint]
    if isinstance(hint, type) and issubclass(hint, Enum):
        return EnumType.of(hint)

    origin, args = get_origin(hint), get_args(hint)
    if origin in (Union, types.UnionType):
        non_null = [a for a in args if a is not type(None)]
        if len(non_null) == 1 and len(non_null) < len(args):
            return OptionalType(descriptor_for(non_null[0], name))
    elif origin is Literal and args and all(isinstance(a, str) for a in args):
        return EnumType(name, tuple(args))
    elif origin is list:
        return ArrayType(descriptor_for(args[0], name) if args else Primitive.STRING)
    elif origin is dict:
        if not args or args[1] is Any:
            return Primitive.OBJECT
        if args[0] is not str:
            raise DefinitionError(f"Parameter '{name}': map keys must be str")
        return MapType(descriptor_for(args[1], name))
    raise DefinitionError(f"Parameter '{name}': unsupported type hint {hint!r}")


def _parameters_from_signature(func: Callable[..., Any]) -> list[Parameter]:
    sig = inspect.signature(func)
    hints = get_type_hints(func)
    docs = _parse_docstring_params(func.__doc__)
    params: list[Parameter] = []
    for name, param in sig.parameters.items():
        if name in ("self", "cls", "context") or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        default = MISSING if param.default is inspect.Parameter.empty else param.default
        params.append(Parameter(
            name=name,
            description=docs.get(name, f"Parameter: {name}"),
            type=descriptor_for(hints.get(name, str), name),
            default=default,
        ))
    return params


# ─────────────────────────────────────────────────────────────────────────────
# Decorator
# ─────────────────────────────────────────────────────────────────────────────

def _make_execute(func: Callable[..., Any]) -> Callable[..., Any]:
    wants_context = "context" in inspect.signature(func).parameters

    if inspect.iscoroutinefunction(func):
        async def execute(args: dict[str, Any], context: Any = None) -> Any:
            return await func(**args, **({"context": context} if wants_context else {}))
    else:
        def execute(args: dict[str, Any], context: Any = None) -> Any:  # type: ignore[misc]
            return func(**args, **({"context": context} if wants_context else {}))

    execute.__name__ = execute.__qualname__ = func.__name__
    return execute


@overload
def tool(func: Callable[..., Any], /) -> Tool: ...
@overload
def tool(
    *,
    name: str | None = ...,
    description: str | None = ...,
    title: str | None = ...,
    parameters: list[Parameter] | None = ...,
    result_kinds: Any = ...,
    strict_schema: bool | None = ...,
) -> Callable[[Callable[..., Any]], Tool]: ...


def tool(
    func: Callable[..., Any] | None = None,
    /,
    *,
    name: str | None = None,
    description: str | None = None,
    title: str | None = None,
    parameters: list[Parameter] | None = None,
    result_kinds: Any = MISSING,
    strict_schema: bool | None = None,
) -> Tool | Callable[[Callable[..., Any]], Tool]:
    """Build a Tool from a function.

    Args:
        name: Tool name (defaults to the function name)
        description: Model-facing description (defaults to the docstring summary)
        title: Display title
        parameters: Explicit declarations; derived from type hints when omitted
        result_kinds: Declared kinds; inferred from the return annotation when omitted
        strict_schema: Reject undeclared argument keys
    """

    def decorate(fn: Callable[..., Any]) -> Tool:
        params = parameters if parameters is not None else _parameters_from_signature(fn)
        kinds = result_kinds
        if kinds is MISSING:
            kinds = result_kinds_for(get_type_hints(fn).get("return"))
        return Tool(
            name=name or fn.__name__,
            description=description or _docstring_summary(fn.__doc__),
            title=title,
            parameters=tuple(params),
            execute=_make_execute(fn),
            result_kinds=kinds,
            strict_schema=strict_schema,
        )

    return decorate(func) if func is not None else decorate
