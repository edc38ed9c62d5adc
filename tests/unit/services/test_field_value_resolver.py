"""Tests for sentinel resolution."""

from typing import Any

import pytest

from memfire.errors import ValidationError
from memfire.models.field_value import DELETE_FIELD, SERVER_TIMESTAMP, FieldValue
from memfire.models.values import INT64_MAX, INT64_MIN, Timestamp
from memfire.services.field_value_resolver import resolve_field_value, validate_field_value


class TestIncrement:
    """Tests for FieldValue.increment."""

    def test_int_plus_int_stays_int(self) -> None:
        target: dict[str, Any] = {"count": 5}

        resolve_field_value(target, "count", FieldValue.increment(5))

        assert target["count"] == 10
        assert isinstance(target["count"], int)

    def test_float_base_produces_float(self) -> None:
        target: dict[str, Any] = {"count": 2.0}

        resolve_field_value(target, "count", FieldValue.increment(3))

        assert target["count"] == 5.0
        assert isinstance(target["count"], float)

    def test_missing_field_starts_at_zero(self) -> None:
        target: dict[str, Any] = {}

        resolve_field_value(target, "count", FieldValue.increment(7))

        assert target == {"count": 7}

    def test_non_numeric_field_replaced(self) -> None:
        target: dict[str, Any] = {"count": "seven"}

        resolve_field_value(target, "count", FieldValue.increment(1))

        assert target == {"count": 1}

    def test_bool_is_not_a_number(self) -> None:
        target: dict[str, Any] = {"flag": True}

        resolve_field_value(target, "flag", FieldValue.increment(1))

        assert target == {"flag": 1}

    def test_int_overflow_saturates(self) -> None:
        """64비트 범위를 넘는 정수 합은 경계값으로 고정."""
        target: dict[str, Any] = {"high": INT64_MAX, "low": INT64_MIN}

        resolve_field_value(target, "high", FieldValue.increment(1))
        resolve_field_value(target, "low", FieldValue.increment(-5))

        assert target == {"high": INT64_MAX, "low": INT64_MIN}
        assert isinstance(target["high"], int)

    def test_float_sum_not_clamped(self) -> None:
        target: dict[str, Any] = {"n": float(INT64_MAX)}

        resolve_field_value(target, "n", FieldValue.increment(INT64_MAX))

        assert target["n"] == float(INT64_MAX) * 2


class TestArrayOperations:
    """Tests for array_union / array_remove."""

    def test_union_appends_missing_elements(self) -> None:
        target: dict[str, Any] = {"tags": ["a", "b"]}

        resolve_field_value(target, "tags", FieldValue.array_union(["b", "c", "c"]))

        assert target["tags"] == ["a", "b", "c"]

    def test_union_on_missing_field(self) -> None:
        target: dict[str, Any] = {}

        resolve_field_value(target, "tags", FieldValue.array_union(["x"]))

        assert target == {"tags": ["x"]}

    def test_union_uses_value_equality(self) -> None:
        """1과 1.0은 같은 값, True는 다른 값."""
        target: dict[str, Any] = {"nums": [1]}

        resolve_field_value(target, "nums", FieldValue.array_union([1.0, True]))

        assert target["nums"] == [1, True]

    def test_remove_every_occurrence(self) -> None:
        target: dict[str, Any] = {"tags": ["a", "b", "a", "c"]}

        resolve_field_value(target, "tags", FieldValue.array_remove(["a", "z"]))

        assert target["tags"] == ["b", "c"]

    def test_remove_on_non_array(self) -> None:
        target: dict[str, Any] = {"tags": "a"}

        resolve_field_value(target, "tags", FieldValue.array_remove(["a"]))

        assert target == {"tags": []}


class TestDeleteAndTimestamp:
    """Tests for DELETE_FIELD and SERVER_TIMESTAMP."""

    def test_delete_removes_key(self) -> None:
        target: dict[str, Any] = {"a": 1, "b": 2}

        resolve_field_value(target, "a", DELETE_FIELD)

        assert target == {"b": 2}

    def test_delete_missing_key(self) -> None:
        target: dict[str, Any] = {}

        resolve_field_value(target, "a", DELETE_FIELD)

        assert target == {}

    def test_server_timestamp(self) -> None:
        target: dict[str, Any] = {}
        before = Timestamp.now()

        resolve_field_value(target, "at", SERVER_TIMESTAMP)

        assert isinstance(target["at"], Timestamp)
        assert target["at"] >= before


class TestValidateFieldValue:
    """Tests for operand validation."""

    def test_increment_requires_number(self) -> None:
        with pytest.raises(ValidationError):
            validate_field_value(FieldValue.increment("1"))  # type: ignore[arg-type]

    def test_increment_rejects_bool(self) -> None:
        with pytest.raises(ValidationError):
            validate_field_value(FieldValue.increment(True))

    def test_array_operand_must_be_sequence(self) -> None:
        with pytest.raises(ValidationError):
            validate_field_value(FieldValue(FieldValue.array_union([]).kind, "abc"))

    def test_valid_sentinels(self) -> None:
        validate_field_value(FieldValue.increment(1.5))
        validate_field_value(FieldValue.array_remove([1]))
        validate_field_value(DELETE_FIELD)
