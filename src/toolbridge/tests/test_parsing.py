"""Tests for strict typed parsing of argument values."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from enum import StrEnum

import pytest

from toolbridge.foundation.core import (
    ArrayType,
    EnumType,
    MapType,
    OptionalType,
    Parameter,
    Primitive,
    parse,
    parse_arguments,
    parse_date,
)
from toolbridge.foundation.errors import ParameterValidationError


class Unit(StrEnum):
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"


class TestScalars:
    def test_integer_rejects_float(self) -> None:
        assert parse(Primitive.INTEGER, 1.5).is_err()

    def test_integer_rejects_bool(self) -> None:
        assert parse(Primitive.INTEGER, True).is_err()

    def test_number_widens_int(self) -> None:
        value = parse(Primitive.NUMBER, 5).unwrap()
        assert value == 5.0 and isinstance(value, float)

    def test_string_mismatch_message(self) -> None:
        assert parse(Primitive.STRING, 1).unwrap_err() == "expected string, got integer"

    def test_boolean_is_exact(self) -> None:
        assert parse(Primitive.BOOLEAN, False).unwrap() is False
        assert parse(Primitive.BOOLEAN, 0).is_err()

    def test_object(self) -> None:
        assert parse(Primitive.OBJECT, {"a": 1}).unwrap() == {"a": 1}
        assert parse(Primitive.OBJECT, [1]).is_err()


class TestDates:
    def test_whole_seconds(self) -> None:
        assert parse(Primitive.DATE, "2024-05-01T12:30:00Z").unwrap() == datetime(2024, 5, 1, 12, 30, tzinfo=UTC)

    def test_fractional_seconds_with_offset(self) -> None:
        parsed = parse_date("2024-05-01T12:30:00.250+02:00")
        assert parsed is not None
        assert parsed.microsecond == 250000
        assert parsed.tzinfo == timezone(timedelta(hours=2))

    @pytest.mark.parametrize("text", ["2024-05-01", "2024-05-01T12:30:00", "yesterday", "2024-13-01T00:00:00Z"])
    def test_rejects_non_rfc3339(self, text: str) -> None:
        assert parse(Primitive.DATE, text).is_err()


class TestData:
    def test_base64(self) -> None:
        assert parse(Primitive.DATA, "aGVsbG8=").unwrap() == b"hello"

    def test_invalid_base64(self) -> None:
        assert parse(Primitive.DATA, "not base64!").is_err()


class TestComposites:
    def test_optional_null(self) -> None:
        assert parse(OptionalType(Primitive.INTEGER), None).unwrap() is None
        assert parse(OptionalType(Primitive.INTEGER), 4).unwrap() == 4
        assert parse(OptionalType(Primitive.INTEGER), "4").is_err()

    def test_array_fails_as_a_whole(self) -> None:
        assert parse(ArrayType(Primitive.INTEGER), [1, 2]).unwrap() == [1, 2]
        result = parse(ArrayType(Primitive.INTEGER), [1, "2"])
        assert result.is_err()
        assert result.unwrap_err().startswith("element")

    def test_map_values(self) -> None:
        assert parse(MapType(Primitive.NUMBER), {"a": 1}).unwrap() == {"a": 1.0}
        assert "'b'" in parse(MapType(Primitive.NUMBER), {"a": 1, "b": "x"}).unwrap_err()

    def test_enum_cases(self) -> None:
        assert parse(EnumType("unit", ("c", "f")), "c").unwrap() == "c"
        assert parse(EnumType("unit", ("c", "f")), "k").is_err()

    def test_enum_class_yields_member(self) -> None:
        assert parse(EnumType.of(Unit), "celsius").unwrap() is Unit.CELSIUS


class TestParseArguments:
    PARAMS = [
        Parameter.string("city", "City"),
        Parameter.integer("days", "Days", default=3),
        Parameter.string("note", "Note", optional=True),
        Parameter("query_text", "Query", key="q"),
    ]

    def test_defaults_and_keys(self) -> None:
        assert parse_arguments(self.PARAMS, {"city": "Paris", "q": "rain"}) == {
            "city": "Paris", "days": 3, "note": None, "query_text": "rain",
        }

    def test_missing_required(self) -> None:
        with pytest.raises(ParameterValidationError, match="Missing required parameter: city"):
            parse_arguments(self.PARAMS, {"q": "rain"})

    def test_parse_failure_names_key(self) -> None:
        with pytest.raises(ParameterValidationError) as exc:
            parse_arguments(self.PARAMS, {"city": 1, "q": "x"})
        assert str(exc.value) == "Validation failed for 'city': expected string, got integer"
        assert exc.value.parameter == "city"
