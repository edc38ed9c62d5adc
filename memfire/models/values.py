"""Field value kinds stored in documents.

문서 필드에 저장되는 값 타입과 값 비교/복사 규칙을 정의합니다.

Supported kinds: ``None``, ``bool``, ``int`` (64-bit), ``float``, ``str``,
``bytes``, :class:`Timestamp`, :class:`GeoPoint`, :class:`Reference`, ``list``
and ``dict`` of those.
"""

import abc
import math
from datetime import UTC, datetime, timedelta
from functools import total_ordering
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from memfire.errors import ValidationError
from memfire.models.field_value import FieldValue

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_NANOS_PER_MILLI = 1_000_000


@total_ordering
class Timestamp(BaseModel):
    """Point in time stored with nanosecond fields and millisecond precision.

    Distinct from :class:`datetime.datetime`: datetimes written to a document
    are converted to a Timestamp and lose their sub-millisecond part.
    """

    model_config = ConfigDict(frozen=True)

    seconds: int = Field(..., description="Seconds since the Unix epoch")
    nanoseconds: int = Field(0, ge=0, le=999_999_999, description="Sub-second part")

    @classmethod
    def from_datetime(cls, value: datetime) -> "Timestamp":
        """Convert a datetime, treating naive values as UTC.

        Args:
            value: Datetime to convert.

        Returns:
            Timestamp truncated to milliseconds.
        """
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        delta = value - _EPOCH
        seconds = delta.days * 86_400 + delta.seconds
        millis = delta.microseconds // 1000
        return cls(seconds=seconds, nanoseconds=millis * _NANOS_PER_MILLI)

    @classmethod
    def now(cls) -> "Timestamp":
        """Current wall-clock instant."""
        return cls.from_datetime(datetime.now(UTC))

    def to_datetime(self) -> datetime:
        """Return an aware UTC datetime for this instant."""
        return _EPOCH + timedelta(
            seconds=self.seconds, microseconds=self.nanoseconds // 1000
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return (self.seconds, self.nanoseconds) < (other.seconds, other.nanoseconds)


class GeoPoint(BaseModel):
    """Latitude/longitude pair."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class Reference(abc.ABC):
    """A value pointing at another document by path."""

    @property
    @abc.abstractmethod
    def path(self) -> str:
        """Slash-delimited document path."""


def is_number(value: Any) -> bool:
    """True for int and float values, excluding bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# Cross-kind ordering, lowest first.
_RANK_NULL = 0
_RANK_BOOL = 1
_RANK_NUMBER = 2
_RANK_TIMESTAMP = 3
_RANK_STRING = 4
_RANK_BYTES = 5
_RANK_REFERENCE = 6
_RANK_GEOPOINT = 7
_RANK_ARRAY = 8
_RANK_MAP = 9


def _rank(value: Any) -> int:
    if value is None:
        return _RANK_NULL
    if isinstance(value, bool):
        return _RANK_BOOL
    if is_number(value):
        return _RANK_NUMBER
    if isinstance(value, (Timestamp, datetime)):
        return _RANK_TIMESTAMP
    if isinstance(value, str):
        return _RANK_STRING
    if isinstance(value, (bytes, bytearray)):
        return _RANK_BYTES
    if isinstance(value, Reference):
        return _RANK_REFERENCE
    if isinstance(value, GeoPoint):
        return _RANK_GEOPOINT
    if isinstance(value, (list, tuple)):
        return _RANK_ARRAY
    if isinstance(value, dict):
        return _RANK_MAP
    raise ValidationError(f"Unsupported value type: {type(value).__name__}")


def sort_key(value: Any) -> tuple[Any, ...]:
    """Key implementing the total order across value kinds.

    Args:
        value: Stored field value.

    Returns:
        Tuple that compares consistently with every other value's key.
    """
    rank = _rank(value)
    if rank == _RANK_NULL:
        return (rank,)
    if rank == _RANK_NUMBER:
        # NaN sorts before every other number.
        if isinstance(value, float) and math.isnan(value):
            return (rank, 0, 0)
        return (rank, 1, value)
    if rank == _RANK_TIMESTAMP:
        if isinstance(value, datetime):
            value = Timestamp.from_datetime(value)
        return (rank, value.seconds, value.nanoseconds)
    if rank == _RANK_BYTES:
        return (rank, bytes(value))
    if rank == _RANK_REFERENCE:
        return (rank, tuple(value.path.split("/")))
    if rank == _RANK_GEOPOINT:
        return (rank, value.latitude, value.longitude)
    if rank == _RANK_ARRAY:
        return (rank, tuple(sort_key(item) for item in value))
    if rank == _RANK_MAP:
        return (rank, tuple((k, sort_key(v)) for k, v in sorted(value.items())))
    return (rank, value)


def compare_values(left: Any, right: Any) -> int | None:
    """Compare two values of the same kind.

    Returns:
        -1, 0 or 1, or None when the kinds differ (the values are unordered).
    """
    if _rank(left) != _rank(right):
        return None
    left_key, right_key = sort_key(left), sort_key(right)
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


def values_equal(left: Any, right: Any) -> bool:
    """Kind-aware equality: ``1 == 1.0`` but ``True != 1``."""
    if is_number(left) and is_number(right):
        return left == right
    if _rank(left) != _rank(right):
        return False
    if isinstance(left, (list, tuple)):
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, dict):
        return left.keys() == right.keys() and all(
            values_equal(v, right[k]) for k, v in left.items()
        )
    if isinstance(left, Reference):
        return left.path == right.path
    return sort_key(left) == sort_key(right)


def contains_value(items: list[Any], value: Any) -> bool:
    """True when ``items`` has an element value-equal to ``value``."""
    return any(values_equal(item, value) for item in items)


def clone_value(value: Any) -> Any:
    """Structural deep copy over the supported value kinds.

    Containers are rebuilt recursively (tuples become lists); immutable
    scalars, timestamps, geo points, references and field value sentinels are
    shared.

    Raises:
        ValidationError: For a value outside the supported kinds.
    """
    if isinstance(value, dict):
        return {key: clone_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [clone_value(item) for item in value]
    if isinstance(value, bytearray):
        return bytes(value)
    if value is None or isinstance(
        value,
        (bool, int, float, str, bytes, datetime, Timestamp, GeoPoint, Reference, FieldValue),
    ):
        return value
    raise ValidationError(f"Unsupported value type: {type(value).__name__}")
