"""Field value sentinel resolution.

센티널 값을 대상 문서의 필드에 적용합니다. 종류별로 하나의 함수가 있습니다.
"""

from collections.abc import Callable
from typing import Any

from memfire.errors import ValidationError
from memfire.models.field_value import FieldValue, FieldValueKind
from memfire.models.values import (
    INT64_MAX,
    INT64_MIN,
    Timestamp,
    clone_value,
    contains_value,
    is_number,
)

Resolver = Callable[[dict[str, Any], str, Any], None]


def _resolve_delete(target: dict[str, Any], key: str, _operand: Any) -> None:
    target.pop(key, None)


def _resolve_server_timestamp(target: dict[str, Any], key: str, _operand: Any) -> None:
    target[key] = Timestamp.now()


def _resolve_increment(target: dict[str, Any], key: str, amount: Any) -> None:
    current = target.get(key)
    base = current if is_number(current) else 0
    if isinstance(base, int) and isinstance(amount, int):
        # Integer sums saturate at the 64-bit bounds.
        target[key] = min(max(base + amount, INT64_MIN), INT64_MAX)
    else:
        target[key] = float(base) + float(amount)


def _resolve_array_union(target: dict[str, Any], key: str, elements: Any) -> None:
    current = target.get(key)
    items = list(current) if isinstance(current, list) else []
    for element in elements:
        if not contains_value(items, element):
            items.append(clone_value(element))
    target[key] = items


def _resolve_array_remove(target: dict[str, Any], key: str, elements: Any) -> None:
    current = target.get(key)
    items = current if isinstance(current, list) else []
    target[key] = [item for item in items if not contains_value(list(elements), item)]


_RESOLVERS: dict[FieldValueKind, Resolver] = {
    FieldValueKind.DELETE: _resolve_delete,
    FieldValueKind.SERVER_TIMESTAMP: _resolve_server_timestamp,
    FieldValueKind.INCREMENT: _resolve_increment,
    FieldValueKind.ARRAY_UNION: _resolve_array_union,
    FieldValueKind.ARRAY_REMOVE: _resolve_array_remove,
}


def validate_field_value(sentinel: FieldValue) -> None:
    """Check a sentinel's operand before any document is touched.

    Raises:
        ValidationError: If an increment amount is not a number or array
            elements are not a sequence.
    """
    if sentinel.kind is FieldValueKind.INCREMENT and not is_number(sentinel.operand):
        raise ValidationError(
            f"Increment amount must be an int or float, got {sentinel.operand!r}"
        )
    if sentinel.kind in (FieldValueKind.ARRAY_UNION, FieldValueKind.ARRAY_REMOVE):
        if not isinstance(sentinel.operand, (list, tuple)):
            raise ValidationError(f"{sentinel.kind.value} expects a list of elements")


def resolve_field_value(target: dict[str, Any], key: str, sentinel: FieldValue) -> None:
    """Apply a sentinel to ``target[key]`` in place.

    Args:
        target: Map holding the field (the document or a nested map).
        key: Field name inside ``target``.
        sentinel: Operation to apply.
    """
    _RESOLVERS[sentinel.kind](target, key, sentinel.operand)
