"""Tests for the Result monad used by strict parsing.

Validates:
- Functor and monad laws
- Error short-circuiting in traverse/sequence
"""

from __future__ import annotations

from typing import Callable

import pytest

from toolbridge.foundation.errors import Err, Ok, Result, sequence, traverse


# ═════════════════════════════════════════════════════════════════════════════
# Property Tests - Functor & Monad Laws
# ═════════════════════════════════════════════════════════════════════════════


def test_functor_identity() -> None:
    """Functor law: fmap id = id"""
    assert Ok(42).map(lambda x: x) == Ok(42)
    assert Err("fail").map(lambda x: x) == Err("fail")


def test_functor_composition() -> None:
    f: Callable[[int], int] = lambda x: x + 1
    g: Callable[[int], int] = lambda x: x * 2
    result: Result[int, str] = Ok(5)
    assert result.map(lambda x: f(g(x))) == result.map(g).map(f)


def test_monad_left_identity() -> None:
    """Monad law: return a >>= f = f a"""
    f: Callable[[int], Result[int, str]] = lambda x: Ok(x * 2)
    assert Ok(42).flat_map(f) == f(42)


def test_monad_associativity() -> None:
    m: Result[int, str] = Ok(5)
    f: Callable[[int], Result[int, str]] = lambda x: Ok(x + 1)
    g: Callable[[int], Result[int, str]] = lambda x: Ok(x * 2)
    assert m.flat_map(f).flat_map(g) == m.flat_map(lambda x: f(x).flat_map(g))


# ═════════════════════════════════════════════════════════════════════════════
# Operational Tests
# ═════════════════════════════════════════════════════════════════════════════


def test_ok_accessors() -> None:
    result: Result[int, str] = Ok(42)
    assert result.is_ok() and not result.is_err()
    assert result.unwrap() == 42
    assert result.ok() == 42
    assert result.err() is None
    assert bool(result)


def test_err_accessors() -> None:
    result: Result[int, str] = Err("failed")
    assert result.is_err()
    assert result.unwrap_err() == "failed"
    assert result.unwrap_or(7) == 7
    assert not result
    with pytest.raises(RuntimeError):
        result.unwrap()


def test_map_err_only_touches_err() -> None:
    assert Err("x").map_err(str.upper) == Err("X")
    assert Ok(1).map_err(str.upper) == Ok(1)


def test_or_else_recovers() -> None:
    assert Err("x").or_else(lambda e: Ok(len(e))) == Ok(1)
    assert Ok(3).or_else(lambda e: Ok(0)) == Ok(3)


def test_pattern_matching() -> None:
    match Ok(5):
        case Result(value):
            assert value == 5


def test_sequence() -> None:
    assert sequence([Ok(1), Ok(2), Ok(3)]) == Ok([1, 2, 3])
    assert sequence([Ok(1), Err("fail"), Err("later")]) == Err("fail")
    assert sequence([]) == Ok([])


def test_traverse_stops_at_first_failure() -> None:
    seen: list[str] = []

    def parse_int(s: str) -> Result[int, str]:
        seen.append(s)
        return Ok(int(s)) if s.isdigit() else Err(f"not a number: {s}")

    assert traverse(["1", "2"], parse_int) == Ok([1, 2])
    seen.clear()
    assert traverse(["1", "x", "3"], parse_int) == Err("not a number: x")
    assert seen == ["1", "x"]
