"""Document and collection references.

경로만 담고 있는 가벼운 주소 객체입니다. 연산을 호출하기 전까지 저장소에 접근하지 않습니다.
"""

from collections.abc import Iterator, Mapping
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from memfire.errors import InvalidQueryError
from memfire.models.snapshot import DocumentSnapshot
from memfire.models.values import Reference
from memfire.services.query_engine import Order, QuerySpec, make_filter
from memfire.store.paths import (
    child_path,
    collection_segments,
    document_segments,
    join_path,
)

if TYPE_CHECKING:
    from memfire.adapters.client import MemFirestore


class DocumentReference(Reference):
    """Address of a document (even number of path segments)."""

    def __init__(self, client: "MemFirestore", path: str) -> None:
        self._client = client
        self._segments = document_segments(path)
        self._path = join_path(*self._segments)

    @property
    def client(self) -> "MemFirestore":
        return self._client

    @property
    def id(self) -> str:
        return self._segments[-1]

    @property
    def path(self) -> str:
        return self._path

    @property
    def parent(self) -> "CollectionReference":
        return CollectionReference(self._client, join_path(*self._segments[:-1]))

    def collection(self, collection_path: str) -> "CollectionReference":
        """Reference a subcollection of this document."""
        return CollectionReference(self._client, child_path(self._path, collection_path))

    def collections(self) -> list["CollectionReference"]:
        """Subcollections that currently hold data."""
        return [
            self.collection(name)
            for name in self._client.store.collection_ids(self._path)
        ]

    def get(self) -> DocumentSnapshot:
        """Snapshot of the document as stored right now."""
        fields, exists = self._client.store.get(self._path)
        return DocumentSnapshot(self, fields, exists)

    def set(self, data: Mapping[str, Any], merge: bool = False) -> None:
        """Write the document.

        Args:
            data: Fields to write.
            merge: If True, fields not present in ``data`` are kept.
        """
        self._client.mutations.set(self._path, data, merge=merge)

    def update(self, data: Mapping[str, Any]) -> None:
        """Update fields; dotted keys address nested fields."""
        self._client.mutations.update(self._path, data)

    def delete(self) -> None:
        self._client.mutations.delete(self._path)

    def snapshots(self) -> Iterator[DocumentSnapshot]:
        """Stream holding a single snapshot taken at subscription time."""
        return iter([self.get()])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocumentReference):
            return NotImplemented
        return self._client is other._client and self._path == other._path

    def __hash__(self) -> int:
        return hash((id(self._client), self._path))

    def __repr__(self) -> str:
        return f"DocumentReference({self._path!r})"


class Query:
    """Immutable query over one collection.

    Each builder method returns a new query; the receiver is unchanged.
    """

    def __init__(
        self,
        client: "MemFirestore",
        collection_path: str,
        spec: QuerySpec | None = None,
    ) -> None:
        self._client = client
        self._collection_path = join_path(*collection_segments(collection_path))
        self._spec = spec or QuerySpec()

    @property
    def spec(self) -> QuerySpec:
        return self._spec

    def where(
        self,
        field_path: str | None = None,
        op_string: str | None = None,
        value: Any = None,
        *,
        filter: Any = None,
    ) -> "Query":
        """Add a filter.

        Args:
            field_path: Field name or dotted path.
            op_string: Comparison or membership operator.
            value: Operand.
            filter: Alternative to the positional form; any object exposing
                ``field_path``, ``op_string`` and ``value``.

        Returns:
            New query with the filter appended.
        """
        if filter is not None:
            if field_path is not None or op_string is not None:
                raise InvalidQueryError("Pass either a filter object or field/op/value, not both")
            field_path, op_string, value = filter.field_path, filter.op_string, filter.value
        if field_path is None or op_string is None:
            raise InvalidQueryError("where() requires a field path and an operator")
        flt = make_filter(field_path, op_string, value)
        return self._derive(filters=self._spec.filters + (flt,))

    def order_by(self, field_path: str, descending: bool = False) -> "Query":
        if not isinstance(field_path, str) or not field_path:
            raise InvalidQueryError("order_by() requires a field path")
        return self._derive(orders=self._spec.orders + (Order(field_path, descending),))

    def limit(self, count: int) -> "Query":
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise InvalidQueryError(f"Limit must be a non-negative integer, got {count!r}")
        return self._derive(limit=count)

    def start_after_document(self, snapshot: DocumentSnapshot) -> "Query":
        """Skip results up to and including ``snapshot``'s document."""
        parent_path = snapshot.reference.path.rsplit("/", 1)[0]
        if parent_path != self._collection_path:
            raise InvalidQueryError(
                f"Cursor document {snapshot.reference.path!r} is not in {self._collection_path!r}"
            )
        return self._derive(start_after=snapshot.id)

    def get(self) -> list[DocumentSnapshot]:
        """Run the query."""
        return self._client.queries.execute(self._collection_path, self._spec)

    def stream(self) -> Iterator[DocumentSnapshot]:
        return iter(self.get())

    def snapshots(self) -> Iterator[list[DocumentSnapshot]]:
        """Stream holding a single result list taken at subscription time."""
        return iter([self.get()])

    def _derive(self, **changes: Any) -> "Query":
        return Query(self._client, self._collection_path, replace(self._spec, **changes))


class CollectionReference(Query):
    """Address of a collection (odd number of path segments)."""

    def __init__(self, client: "MemFirestore", path: str) -> None:
        super().__init__(client, path)
        self._segments = collection_segments(path)

    @property
    def id(self) -> str:
        return self._segments[-1]

    @property
    def path(self) -> str:
        return self._collection_path

    @property
    def parent(self) -> DocumentReference | None:
        if len(self._segments) == 1:
            return None
        return DocumentReference(self._client, join_path(*self._segments[:-1]))

    def document(self, document_id: str | None = None) -> DocumentReference:
        """Reference a document, generating a random id when none is given."""
        if document_id is None:
            document_id = self._client.new_document_id()
        return DocumentReference(self._client, child_path(self._collection_path, document_id))

    def add(self, data: Mapping[str, Any], document_id: str | None = None) -> DocumentReference:
        """Create a document and return its reference."""
        reference = self.document(document_id)
        reference.set(data)
        return reference

    def list_documents(self) -> list[DocumentReference]:
        """References to every document node, including ones that only hold subcollections."""
        return [
            self.document(doc_id)
            for doc_id, _, _ in self._client.store.list_documents(self._collection_path)
        ]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CollectionReference):
            return NotImplemented
        return self._client is other._client and self.path == other.path

    def __hash__(self) -> int:
        return hash((id(self._client), self.path))

    def __repr__(self) -> str:
        return f"CollectionReference({self.path!r})"
