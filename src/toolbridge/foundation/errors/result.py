"""Result/Either monad for type-safe error handling.

Used by the strict parameter parser: every parse step returns ``Ok(value)``
or ``Err(message)`` and containers combine element results with
``traverse`` so that one failing element fails the whole container.

Examples:
    >>> Ok(42).map(lambda x: x * 2).unwrap()
    84
    >>> Err("fail").map(lambda x: x * 2).unwrap_err()
    'fail'
    >>> traverse([1, 2, 3], lambda x: Ok(x) if x > 0 else Err("neg")).unwrap()
    [1, 2, 3]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")

_OK = True
_ERR = False


class Result(Generic[T, E]):
    """Discriminated union representing success (Ok) or failure (Err)."""

    __slots__ = ("_value", "_is_ok")
    __match_args__ = ("_value",)

    def __init__(self, value: T | E, is_ok: bool) -> None:
        self._value = value
        self._is_ok = is_ok

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        return not self._is_ok

    def unwrap(self) -> T:
        """Extract Ok value. Raises RuntimeError on Err."""
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        raise RuntimeError(f"unwrap() on Err: {self._value}")

    def unwrap_err(self) -> E:
        """Extract Err value. Raises RuntimeError on Ok."""
        if not self._is_ok:
            return self._value  # type: ignore[return-value]
        raise RuntimeError(f"unwrap_err() on Ok: {self._value}")

    def unwrap_or(self, default: T) -> T:
        return self._value if self._is_ok else default  # type: ignore[return-value]

    def ok(self) -> T | None:
        return self._value if self._is_ok else None  # type: ignore[return-value]

    def err(self) -> E | None:
        return None if self._is_ok else self._value  # type: ignore[return-value]

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Apply f to Ok value."""
        return Result(f(self._value), _OK) if self._is_ok else Result(self._value, _ERR)  # type: ignore[arg-type]

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        """Apply f to Err value."""
        return Result(f(self._value), _ERR) if not self._is_ok else Result(self._value, _OK)  # type: ignore[arg-type]

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Monadic bind: chain operations that can fail."""
        return f(self._value) if self._is_ok else Result(self._value, _ERR)  # type: ignore[arg-type]

    def or_else(self, f: Callable[[E], Result[T, F]]) -> Result[T, F]:
        """Try an alternative when this is Err."""
        return Result(self._value, _OK) if self._is_ok else f(self._value)  # type: ignore[arg-type]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._is_ok == other._is_ok and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._is_ok, self._value))

    def __bool__(self) -> bool:
        return self._is_ok

    def __repr__(self) -> str:
        return f"{'Ok' if self._is_ok else 'Err'}({self._value!r})"


def Ok(value: T) -> Result[T, E]:  # noqa: N802
    """Construct the success variant."""
    return Result(value, _OK)


def Err(error: E) -> Result[T, E]:  # noqa: N802
    """Construct the failure variant."""
    return Result(error, _ERR)


def traverse(items: Iterable[T], f: Callable[[T], Result[U, E]]) -> Result[list[U], E]:
    """Map f over items, failing on the first Err (early bailout)."""
    out: list[U] = []
    for item in items:
        res = f(item)
        if not res._is_ok:
            return Result(res._value, _ERR)  # type: ignore[arg-type]
        out.append(res._value)  # type: ignore[arg-type]
    return Result(out, _OK)


def sequence(results: Iterable[Result[T, E]]) -> Result[list[T], E]:
    """Collect a sequence of Results into a Result of list."""
    return traverse(results, lambda r: r)
