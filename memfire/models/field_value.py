"""Field value sentinels.

쓰기 시점에 저장소가 계산하는 값 (삭제, 서버 타임스탬프, 증가, 배열 합집합/차집합).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FieldValueKind(str, Enum):
    """Sentinel operation."""

    DELETE = "delete"
    SERVER_TIMESTAMP = "server_timestamp"
    INCREMENT = "increment"
    ARRAY_UNION = "array_union"
    ARRAY_REMOVE = "array_remove"


@dataclass(frozen=True)
class FieldValue:
    """Placeholder resolved against the live document at write time.

    Only legal as a top-level or dotted-path terminal value of a write; it is
    never stored literally.
    """

    kind: FieldValueKind
    operand: Any = None

    @classmethod
    def delete(cls) -> "FieldValue":
        return DELETE_FIELD

    @classmethod
    def server_timestamp(cls) -> "FieldValue":
        return SERVER_TIMESTAMP

    @classmethod
    def increment(cls, amount: int | float) -> "FieldValue":
        """Add ``amount`` to the current numeric value (0 when absent)."""
        return cls(FieldValueKind.INCREMENT, amount)

    @classmethod
    def array_union(cls, elements: list[Any]) -> "FieldValue":
        """Append each element not already present."""
        return cls(FieldValueKind.ARRAY_UNION, tuple(elements))

    @classmethod
    def array_remove(cls, elements: list[Any]) -> "FieldValue":
        """Remove every element equal to one of ``elements``."""
        return cls(FieldValueKind.ARRAY_REMOVE, tuple(elements))

    def __repr__(self) -> str:
        if self.operand is None:
            return f"FieldValue.{self.kind.value}()"
        return f"FieldValue.{self.kind.value}({self.operand!r})"


DELETE_FIELD = FieldValue(FieldValueKind.DELETE)
SERVER_TIMESTAMP = FieldValue(FieldValueKind.SERVER_TIMESTAMP)
