"""Collection queries.

컬렉션 문서를 필터 → 멤버십 필터 → 정렬 → start-after → limit 순서로 처리합니다.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog

from memfire.errors import InvalidQueryError
from memfire.models.snapshot import DocumentSnapshot
from memfire.models.values import (
    Reference,
    Timestamp,
    compare_values,
    contains_value,
    sort_key,
    values_equal,
)
from memfire.store.document_store import DocumentStore
from memfire.store.paths import collection_segments, join_path

logger = structlog.get_logger(__name__)

COMPARISON_OPERATORS = frozenset({"==", "<", "<=", ">", ">="})
MEMBERSHIP_OPERATORS = frozenset({"array_contains", "array_contains_any", "in"})

# Spellings used by other client libraries.
_OPERATOR_ALIASES = {
    "array-contains": "array_contains",
    "array-contains-any": "array_contains_any",
}

_MISSING = object()


@dataclass(frozen=True)
class FieldFilter:
    """``field_path op_string value`` predicate."""

    field_path: str
    op_string: str
    value: Any


@dataclass(frozen=True)
class Order:
    field_path: str
    descending: bool = False


@dataclass(frozen=True)
class QuerySpec:
    """Immutable description of a query over one collection."""

    filters: tuple[FieldFilter, ...] = ()
    orders: tuple[Order, ...] = ()
    limit: int | None = None
    start_after: str | None = None


def _normalize_operand(value: Any) -> Any:
    if isinstance(value, datetime):
        return Timestamp.from_datetime(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_operand(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_operand(item) for key, item in value.items()}
    return value


def make_filter(field_path: str, op_string: str, value: Any) -> FieldFilter:
    """Build a validated filter.

    Args:
        field_path: Field name or dotted path.
        op_string: One of ``==, <, <=, >, >=, array_contains,
            array_contains_any, in``.
        value: Operand. ``in`` and ``array_contains_any`` require a list.

    Raises:
        InvalidQueryError: On an unknown operator or a non-list operand where a
            list is required.
    """
    if not isinstance(field_path, str) or not field_path:
        raise InvalidQueryError("Filter field path must be a non-empty string")
    op = _OPERATOR_ALIASES.get(op_string, op_string)
    if op not in COMPARISON_OPERATORS and op not in MEMBERSHIP_OPERATORS:
        raise InvalidQueryError(f"Unsupported filter operator: {op_string!r}")
    if op in ("in", "array_contains_any"):
        if not isinstance(value, (list, tuple)):
            raise InvalidQueryError(f"Operator {op!r} requires a list operand")
        if not value:
            raise InvalidQueryError(f"Operator {op!r} requires a non-empty list")
    return FieldFilter(field_path, op, _normalize_operand(value))


def _lookup(fields: dict[str, Any], field_path: str) -> Any:
    value: Any = fields
    for part in field_path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _matches_comparison(fields: dict[str, Any], flt: FieldFilter) -> bool:
    value = _lookup(fields, flt.field_path)
    if value is _MISSING:
        return False
    if flt.op_string == "==":
        return values_equal(value, flt.value)
    result = compare_values(value, flt.value)
    if result is None:
        return False
    if flt.op_string == "<":
        return result < 0
    if flt.op_string == "<=":
        return result <= 0
    if flt.op_string == ">":
        return result > 0
    return result >= 0


def _matches_membership(fields: dict[str, Any], flt: FieldFilter) -> bool:
    value = _lookup(fields, flt.field_path)
    if value is _MISSING:
        return False
    if flt.op_string == "array_contains":
        return isinstance(value, list) and contains_value(value, flt.value)
    if flt.op_string == "array_contains_any":
        return isinstance(value, list) and any(
            contains_value(value, candidate) for candidate in flt.value
        )
    return contains_value(flt.value, value)


class QueryEngine:
    """Evaluates :class:`QuerySpec` objects against the document store.

    Only existent documents take part. The pipeline order is fixed and does
    not depend on the order the query was built in.
    """

    def __init__(
        self,
        store: DocumentStore,
        reference_factory: Callable[[str], Reference],
    ) -> None:
        """Initialize QueryEngine.

        Args:
            store: Document store to read.
            reference_factory: Builds the document reference attached to each
                result snapshot from a document path.
        """
        self._store = store
        self._reference_factory = reference_factory

    def execute(self, collection_path: str, spec: QuerySpec) -> list[DocumentSnapshot]:
        """Run a query.

        Args:
            collection_path: Collection to read.
            spec: Filters, ordering, cursor and limit.

        Returns:
            Ordered list of snapshots.

        Raises:
            InvalidQueryError: If ``start_after`` names a document that is not
                part of the ordered result.
        """
        collection_segments(collection_path)
        read_time = Timestamp.now()
        rows = [
            (doc_id, fields)
            for doc_id, fields, exists in self._store.list_documents(collection_path)
            if exists
        ]

        for flt in spec.filters:
            if flt.op_string in COMPARISON_OPERATORS:
                rows = [row for row in rows if _matches_comparison(row[1], flt)]
        for flt in spec.filters:
            if flt.op_string in MEMBERSHIP_OPERATORS:
                rows = [row for row in rows if _matches_membership(row[1], flt)]

        rows = self._order(rows, spec.orders)

        if spec.start_after is not None:
            ids = [doc_id for doc_id, _ in rows]
            if spec.start_after not in ids:
                raise InvalidQueryError(
                    f"Cursor document {spec.start_after!r} is not part of the query result"
                )
            rows = rows[ids.index(spec.start_after) + 1 :]

        if spec.limit is not None:
            rows = rows[: spec.limit]

        logger.debug(
            "query_executed",
            collection=collection_path,
            filter_count=len(spec.filters),
            result_count=len(rows),
        )

        return [
            DocumentSnapshot(
                self._reference_factory(join_path(collection_path, doc_id)),
                fields,
                True,
                read_time,
            )
            for doc_id, fields in rows
        ]

    def _order(
        self,
        rows: list[tuple[str, dict[str, Any]]],
        orders: tuple[Order, ...],
    ) -> list[tuple[str, dict[str, Any]]]:
        # Rows arrive sorted by document id; stable sorts keep that as the
        # final tie-breaker.
        for order in orders:
            rows = [row for row in rows if _lookup(row[1], order.field_path) is not _MISSING]
        for order in reversed(orders):
            rows.sort(
                key=lambda row, path=order.field_path: sort_key(_lookup(row[1], path)),
                reverse=order.descending,
            )
        return rows
