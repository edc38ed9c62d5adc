"""Buffered transactions and write batches.

트랜잭션 콜백 안의 쓰기를 버퍼에 쌓아 두었다가 콜백이 성공했을 때만 순서대로 적용합니다.
읽기는 첫 쓰기 이전에만 허용됩니다.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, NoReturn

import structlog

from memfire.errors import (
    InvalidTransactionResultError,
    MemFireError,
    TransactionCallbackError,
    TransactionOrderingError,
    TransactionResultTypeError,
    TransactionStateError,
)
from memfire.models.snapshot import DocumentSnapshot
from memfire.models.values import (
    INT64_MAX,
    INT64_MIN,
    GeoPoint,
    Reference,
    Timestamp,
)
from memfire.services.mutation_engine import MutationEngine, prepare_payload
from memfire.store.document_store import DocumentStore
from memfire.store.paths import document_segments

logger = structlog.get_logger(__name__)


class TransactionState(str, Enum):
    """Lifecycle of a transaction attempt."""

    ACTIVE = "active"  # 읽기 가능, 아직 쓰기 없음
    WRITING = "writing"  # 첫 쓰기 이후, 읽기 불가
    COMMITTED = "committed"
    ABORTED = "aborted"


class WriteKind(str, Enum):
    SET = "set"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class PendingWrite:
    """A buffered mutation."""

    kind: WriteKind
    path: str
    data: dict[str, Any] = field(default_factory=dict)
    merge: bool = False


class _WriteBuffer:
    """Ordered log of validated, deep-copied writes."""

    def __init__(self) -> None:
        self._writes: list[PendingWrite] = []

    @property
    def pending_writes(self) -> tuple[PendingWrite, ...]:
        return tuple(self._writes)

    def set(self, reference: Reference, data: Mapping[str, Any], merge: bool = False) -> None:
        """Buffer a set of ``reference`` with ``data``."""
        self._buffer(
            PendingWrite(WriteKind.SET, _document_path(reference), prepare_payload(data), merge)
        )

    def update(self, reference: Reference, data: Mapping[str, Any]) -> None:
        """Buffer an update of ``reference`` with ``data``."""
        self._buffer(
            PendingWrite(WriteKind.UPDATE, _document_path(reference), prepare_payload(data))
        )

    def delete(self, reference: Reference) -> None:
        """Buffer a delete of ``reference``."""
        self._buffer(PendingWrite(WriteKind.DELETE, _document_path(reference)))

    def _buffer(self, write: PendingWrite) -> None:
        self._writes.append(write)


def _document_path(reference: Reference) -> str:
    document_segments(reference.path)
    return reference.path


class Transaction(_WriteBuffer):
    """Handle passed to a transaction callback.

    Reads are eager and see committed state only; the transaction's own
    buffered writes are not visible to them.
    """

    def __init__(self, engine: "TransactionEngine") -> None:
        super().__init__()
        self._engine = engine
        self._state = TransactionState.ACTIVE

    @property
    def state(self) -> TransactionState:
        return self._state

    def get(self, reference: Reference) -> DocumentSnapshot:
        """Read a document.

        Args:
            reference: Document to read.

        Returns:
            Snapshot of the committed document.

        Raises:
            TransactionOrderingError: If a write was already issued.
        """
        self._ensure_open()
        if self._state is TransactionState.WRITING:
            raise TransactionOrderingError(
                "Transactions require all reads to be executed before all writes"
            )
        return self._engine.read(reference)

    def _buffer(self, write: PendingWrite) -> None:
        self._ensure_open()
        super()._buffer(write)
        self._state = TransactionState.WRITING

    def _ensure_open(self) -> None:
        if self._state in (TransactionState.COMMITTED, TransactionState.ABORTED):
            raise TransactionStateError(f"Transaction already {self._state.value}")


class WriteBatch(_WriteBuffer):
    """Writes applied together on :meth:`commit`."""

    def __init__(self, engine: "TransactionEngine") -> None:
        super().__init__()
        self._engine = engine
        self._committed = False

    def commit(self) -> None:
        """Apply every buffered write in order.

        Raises:
            TransactionStateError: If the batch was already committed.
        """
        self._ensure_open()
        self._engine.apply(self._writes)
        self._committed = True
        logger.debug("batch_committed", write_count=len(self._writes))

    def _buffer(self, write: PendingWrite) -> None:
        self._ensure_open()
        super()._buffer(write)

    def _ensure_open(self) -> None:
        if self._committed:
            raise TransactionStateError("Batch already committed")


def _check_result_value(value: Any, location: str) -> None:
    if value is None or isinstance(
        value, (bool, float, str, bytes, datetime, Timestamp, GeoPoint, Reference)
    ):
        return
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise InvalidTransactionResultError(
                f"Integer at {location} does not fit in 64 bits: {value}"
            )
        return
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _check_result_value(item, f"{location}[{index}]")
        return
    if isinstance(value, Mapping):
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidTransactionResultError(f"Map key at {location} is not a string")
            _check_result_value(item, f"{location}.{key}")
        return
    raise InvalidTransactionResultError(
        f"Unsupported value type {type(value).__name__} at {location}"
    )


def _export_result_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return Timestamp.from_datetime(value)
    if isinstance(value, Mapping):
        return {key: _export_result_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_export_result_value(item) for item in value]
    return value


def validate_transaction_result(result: Any) -> dict[str, Any]:
    """Check a callback's return value.

    Args:
        result: None or a mapping of supported value kinds.

    Returns:
        Deep copy of the result, ``{}`` for None. Datetimes are returned as
        :class:`Timestamp`.

    Raises:
        TransactionResultTypeError: If the result is neither None nor a mapping.
        InvalidTransactionResultError: If any nested value is not supported.
    """
    if result is None:
        return {}
    if not isinstance(result, Mapping):
        raise TransactionResultTypeError(
            f"Transaction result must be a mapping or None, got {type(result).__name__}"
        )
    for key, value in result.items():
        if not isinstance(key, str):
            raise InvalidTransactionResultError("Transaction result keys must be strings")
        _check_result_value(value, key)
    return {key: _export_result_value(value) for key, value in result.items()}


class TransactionEngine:
    """Runs transaction callbacks and commits their buffered writes."""

    def __init__(self, store: DocumentStore, mutations: MutationEngine) -> None:
        """Initialize TransactionEngine.

        Args:
            store: Document store read by transactions.
            mutations: Engine applying committed writes.
        """
        self._store = store
        self._mutations = mutations

    def begin(self) -> Transaction:
        return Transaction(self)

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def read(self, reference: Reference) -> DocumentSnapshot:
        fields, exists = self._store.get(reference.path)
        return DocumentSnapshot(reference, fields, exists)

    def run(self, callback: Callable[[Transaction], Any]) -> dict[str, Any]:
        """Run ``callback`` in a new transaction.

        Args:
            callback: Receives the :class:`Transaction`; its return value
                becomes the result.

        Returns:
            Validated result map (``{}`` when the callback returns None).

        Raises:
            TransactionCallbackError: If the callback raised a non-memfire
                error.
            MemFireError: Ordering, validation and result errors propagate
                unchanged. No buffered write is applied in any failure case.
        """
        transaction = self.begin()
        try:
            result = callback(transaction)
        except Exception as exc:
            self.abort(transaction, exc)
        return self.commit(transaction, result)

    def commit(self, transaction: Transaction, result: Any) -> dict[str, Any]:
        """Validate the result, then apply the buffered writes in order."""
        try:
            validated = validate_transaction_result(result)
        except MemFireError as exc:
            self.abort(transaction, exc)
        self.apply(transaction._writes)
        transaction._state = TransactionState.COMMITTED
        logger.debug("transaction_committed", write_count=len(transaction._writes))
        return validated

    def abort(self, transaction: Transaction, error: Exception) -> NoReturn:
        """Discard buffered writes and raise the failure."""
        discarded = len(transaction._writes)
        transaction._writes.clear()
        transaction._state = TransactionState.ABORTED
        logger.warning(
            "transaction_aborted",
            discarded_writes=discarded,
            error_type=type(error).__name__,
            error=str(error),
        )
        if isinstance(error, MemFireError):
            raise error
        raise TransactionCallbackError(f"Transaction callback failed: {error}") from error

    def apply(self, writes: list[PendingWrite]) -> None:
        for write in writes:
            if write.kind is WriteKind.SET:
                self._mutations.set(write.path, write.data, merge=write.merge)
            elif write.kind is WriteKind.UPDATE:
                self._mutations.update(write.path, write.data)
            else:
                self._mutations.delete(write.path)
