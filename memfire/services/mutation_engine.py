"""Document set/update/delete.

입력 데이터를 검증하고 깊은 복사한 뒤, 점(.) 경로 필드와 센티널을 저장된 문서에 적용합니다.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from memfire.errors import ValidationError
from memfire.models.field_value import FieldValue, FieldValueKind
from memfire.models.values import INT64_MAX, INT64_MIN, GeoPoint, Reference, Timestamp
from memfire.services.field_value_resolver import resolve_field_value, validate_field_value
from memfire.store.document_store import DocumentStore
from memfire.store.paths import document_segments


def _normalize_value(value: Any, field_path: str) -> Any:
    """Validate a nested value and return a storable deep copy."""
    if isinstance(value, FieldValue):
        raise ValidationError(
            f"{value!r} cannot be nested inside a map or list value (field {field_path!r})"
        )
    if isinstance(value, datetime):
        return Timestamp.from_datetime(value)
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValidationError(
                f"Integer out of 64-bit range in field {field_path!r}: {value}"
            )
        return value
    if isinstance(value, (float, str, bytes, Timestamp, GeoPoint, Reference)):
        return value
    if isinstance(value, bytearray):
        return bytes(value)
    if isinstance(value, Mapping):
        normalized: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValidationError(f"Map keys must be strings in field {field_path!r}")
            normalized[key] = _normalize_value(item, f"{field_path}.{key}")
        return normalized
    if isinstance(value, (list, tuple)):
        return [_normalize_value(item, field_path) for item in value]
    raise ValidationError(
        f"Unsupported value type {type(value).__name__} in field {field_path!r}"
    )


def prepare_payload(data: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a write payload and deep-copy it.

    Sentinels are accepted only as top-level (or dotted-path terminal)
    values. Datetimes anywhere in the payload become :class:`Timestamp`.

    Args:
        data: Field name or dotted field path -> value.

    Returns:
        A fresh payload sharing no containers with ``data``.

    Raises:
        ValidationError: On a malformed key, a nested sentinel, an
            out-of-range integer or an unsupported value type.
    """
    if not isinstance(data, Mapping):
        raise ValidationError(f"Document data must be a mapping, got {type(data).__name__}")

    payload: dict[str, Any] = {}
    for key, value in data.items():
        if not isinstance(key, str) or not key:
            raise ValidationError(f"Field names must be non-empty strings, got {key!r}")
        if any(part == "" for part in key.split(".")):
            raise ValidationError(f"Invalid field path: {key!r}")

        if isinstance(value, FieldValue):
            validate_field_value(value)
            if value.kind in (FieldValueKind.ARRAY_UNION, FieldValueKind.ARRAY_REMOVE):
                value = FieldValue(
                    value.kind,
                    tuple(_normalize_value(item, key) for item in value.operand),
                )
            payload[key] = value
        else:
            payload[key] = _normalize_value(value, key)
    return payload


def _nested_target(fields: dict[str, Any], key: str) -> tuple[dict[str, Any], str]:
    """Find the map holding the terminal field of a dotted key.

    Missing or non-map intermediate segments are replaced by empty maps.
    """
    parts = key.split(".")
    target = fields
    for part in parts[:-1]:
        child = target.get(part)
        if not isinstance(child, dict):
            child = {}
            target[part] = child
        target = child
    return target, parts[-1]


class MutationEngine:
    """Applies writes to the document store.

    Every write is computed on a copy of the stored fields and persisted with
    a single :meth:`DocumentStore.write`, so a rejected payload leaves the
    document unchanged.
    """

    def __init__(self, store: DocumentStore) -> None:
        """Initialize MutationEngine.

        Args:
            store: Document store to mutate.
        """
        self._store = store

    def set(self, path: str, data: Mapping[str, Any], merge: bool = False) -> None:
        """Write a document.

        Args:
            path: Document path.
            data: Fields to write. Dotted keys address nested fields.
            merge: If False, existing fields are removed first.
        """
        document_segments(path)
        payload = prepare_payload(data)
        fields, _ = self._store.get(path)
        if not merge:
            fields = {}
        self._apply(fields, payload)
        self._store.write(path, fields)

    def update(self, path: str, data: Mapping[str, Any]) -> None:
        """Update fields of a document, creating it when absent.

        Args:
            path: Document path.
            data: Fields to update. Dotted keys address nested fields.
        """
        document_segments(path)
        payload = prepare_payload(data)
        fields, _ = self._store.get(path)
        self._apply(fields, payload)
        self._store.write(path, fields)

    def delete(self, path: str) -> None:
        document_segments(path)
        self._store.delete(path)

    def _apply(self, fields: dict[str, Any], payload: dict[str, Any]) -> None:
        for key, value in payload.items():
            target, name = _nested_target(fields, key)
            if isinstance(value, FieldValue):
                resolve_field_value(target, name, value)
            else:
                target[name] = value
