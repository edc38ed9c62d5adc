"""Async facade over the in-memory client.

비동기 호출 코드와의 인터페이스 호환을 위한 래퍼입니다. 모든 연산은 동기적으로 완료됩니다.
"""

from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from typing import Any, TypeVar

from memfire.adapters.client import MemFirestore
from memfire.adapters.references import CollectionReference, DocumentReference, Query
from memfire.config.settings import Settings
from memfire.models.snapshot import DocumentSnapshot
from memfire.models.values import Reference
from memfire.services.transaction_engine import Transaction, WriteBatch

T = TypeVar("T")


async def _once(value: T) -> AsyncIterator[T]:
    yield value


class AsyncDocumentReference(Reference):
    """Coroutine-based counterpart of :class:`DocumentReference`."""

    def __init__(self, client: "AsyncMemFirestore", delegate: DocumentReference) -> None:
        self._client = client
        self._delegate = delegate

    @property
    def delegate(self) -> DocumentReference:
        return self._delegate

    @property
    def id(self) -> str:
        return self._delegate.id

    @property
    def path(self) -> str:
        return self._delegate.path

    @property
    def parent(self) -> "AsyncCollectionReference":
        return AsyncCollectionReference(self._client, self._delegate.parent)

    def collection(self, collection_path: str) -> "AsyncCollectionReference":
        return AsyncCollectionReference(self._client, self._delegate.collection(collection_path))

    async def collections(self) -> list["AsyncCollectionReference"]:
        return [
            AsyncCollectionReference(self._client, reference)
            for reference in self._delegate.collections()
        ]

    async def get(self) -> DocumentSnapshot:
        fields, exists = self._client.sync_client.store.get(self.path)
        return DocumentSnapshot(self, fields, exists)

    async def set(self, data: Mapping[str, Any], merge: bool = False) -> None:
        self._delegate.set(data, merge=merge)

    async def update(self, data: Mapping[str, Any]) -> None:
        self._delegate.update(data)

    async def delete(self) -> None:
        self._delegate.delete()

    def snapshots(self) -> AsyncIterator[DocumentSnapshot]:
        """Async stream holding a single snapshot taken at subscription time."""
        fields, exists = self._client.sync_client.store.get(self.path)
        return _once(DocumentSnapshot(self, fields, exists))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AsyncDocumentReference):
            return NotImplemented
        return self._delegate == other._delegate

    def __hash__(self) -> int:
        return hash(self._delegate)

    def __repr__(self) -> str:
        return f"AsyncDocumentReference({self.path!r})"


class AsyncQuery:
    """Coroutine-based counterpart of :class:`Query`."""

    def __init__(self, client: "AsyncMemFirestore", delegate: Query) -> None:
        self._client = client
        self._delegate = delegate

    def where(
        self,
        field_path: str | None = None,
        op_string: str | None = None,
        value: Any = None,
        *,
        filter: Any = None,
    ) -> "AsyncQuery":
        return AsyncQuery(
            self._client, self._delegate.where(field_path, op_string, value, filter=filter)
        )

    def order_by(self, field_path: str, descending: bool = False) -> "AsyncQuery":
        return AsyncQuery(self._client, self._delegate.order_by(field_path, descending))

    def limit(self, count: int) -> "AsyncQuery":
        return AsyncQuery(self._client, self._delegate.limit(count))

    def start_after_document(self, snapshot: DocumentSnapshot) -> "AsyncQuery":
        return AsyncQuery(self._client, self._delegate.start_after_document(snapshot))

    async def get(self) -> list[DocumentSnapshot]:
        return self._run()

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        for snapshot in self._run():
            yield snapshot

    def snapshots(self) -> AsyncIterator[list[DocumentSnapshot]]:
        return _once(self._run())

    def _run(self) -> list[DocumentSnapshot]:
        """Query results re-addressed with async document references."""
        return [
            DocumentSnapshot(
                AsyncDocumentReference(self._client, snapshot.reference),
                snapshot.to_dict(),
                snapshot.exists,
                snapshot.read_time,
            )
            for snapshot in self._delegate.get()
        ]


class AsyncCollectionReference(AsyncQuery):
    """Coroutine-based counterpart of :class:`CollectionReference`."""

    _delegate: CollectionReference

    def __init__(self, client: "AsyncMemFirestore", delegate: CollectionReference) -> None:
        super().__init__(client, delegate)

    @property
    def id(self) -> str:
        return self._delegate.id

    @property
    def path(self) -> str:
        return self._delegate.path

    @property
    def parent(self) -> AsyncDocumentReference | None:
        parent = self._delegate.parent
        return AsyncDocumentReference(self._client, parent) if parent is not None else None

    def document(self, document_id: str | None = None) -> AsyncDocumentReference:
        return AsyncDocumentReference(self._client, self._delegate.document(document_id))

    async def add(
        self, data: Mapping[str, Any], document_id: str | None = None
    ) -> AsyncDocumentReference:
        return AsyncDocumentReference(self._client, self._delegate.add(data, document_id))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AsyncCollectionReference):
            return NotImplemented
        return self._delegate == other._delegate

    def __hash__(self) -> int:
        return hash(self._delegate)


class AsyncTransaction:
    """Transaction handle passed to async callbacks.

    Only reads are coroutines; writes are buffered synchronously.
    """

    def __init__(self, delegate: Transaction) -> None:
        self._delegate = delegate

    @property
    def state(self) -> Any:
        return self._delegate.state

    async def get(self, reference: Reference) -> DocumentSnapshot:
        return self._delegate.get(reference)

    def set(self, reference: Reference, data: Mapping[str, Any], merge: bool = False) -> None:
        self._delegate.set(reference, data, merge=merge)

    def update(self, reference: Reference, data: Mapping[str, Any]) -> None:
        self._delegate.update(reference, data)

    def delete(self, reference: Reference) -> None:
        self._delegate.delete(reference)


class AsyncWriteBatch:
    def __init__(self, delegate: WriteBatch) -> None:
        self._delegate = delegate

    def set(self, reference: Reference, data: Mapping[str, Any], merge: bool = False) -> None:
        self._delegate.set(reference, data, merge=merge)

    def update(self, reference: Reference, data: Mapping[str, Any]) -> None:
        self._delegate.update(reference, data)

    def delete(self, reference: Reference) -> None:
        self._delegate.delete(reference)

    async def commit(self) -> None:
        self._delegate.commit()


class AsyncMemFirestore:
    """Async client sharing the store of a :class:`MemFirestore`.

    Example:
        db = AsyncMemFirestore()
        ref = await db.collection("messages").add({"text": "hi"})
        snapshot = await ref.get()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        sync_client: MemFirestore | None = None,
    ) -> None:
        """Initialize AsyncMemFirestore.

        Args:
            settings: Settings for a new underlying client.
            sync_client: Existing client whose store should be shared.
        """
        self._sync = sync_client or MemFirestore(settings)

    @property
    def sync_client(self) -> MemFirestore:
        return self._sync

    def collection(self, path: str) -> AsyncCollectionReference:
        return AsyncCollectionReference(self, self._sync.collection(path))

    def document(self, path: str) -> AsyncDocumentReference:
        return AsyncDocumentReference(self, self._sync.document(path))

    async def collections(self) -> list[AsyncCollectionReference]:
        return [AsyncCollectionReference(self, ref) for ref in self._sync.collections()]

    def batch(self) -> AsyncWriteBatch:
        return AsyncWriteBatch(self._sync.batch())

    async def run_transaction(
        self, callback: Callable[[AsyncTransaction], Awaitable[Any]]
    ) -> dict[str, Any]:
        """Await ``callback`` inside a buffered transaction.

        Same commit/abort rules as :meth:`MemFirestore.run_transaction`.
        """
        engine = self._sync.transactions
        transaction = engine.begin()
        try:
            result = await callback(AsyncTransaction(transaction))
        except Exception as exc:
            engine.abort(transaction, exc)
        return engine.commit(transaction, result)

    def dump(self) -> dict[str, dict[str, dict[str, Any]]]:
        return self._sync.dump()

    def reset(self) -> None:
        self._sync.reset()
