"""In-memory document database client."""

from collections.abc import Callable
from typing import Any

import structlog

from memfire.adapters.references import CollectionReference, DocumentReference
from memfire.config.settings import Settings, get_settings
from memfire.services.mutation_engine import MutationEngine
from memfire.services.query_engine import QueryEngine
from memfire.services.transaction_engine import Transaction, TransactionEngine, WriteBatch
from memfire.store.document_store import DocumentStore
from memfire.store.paths import generate_document_id

logger = structlog.get_logger(__name__)


class MemFirestore:
    """Client for an in-memory, Firestore-shaped document database.

    Each client owns its own store; nothing is shared between instances or
    persisted across processes.

    Example:
        db = MemFirestore()
        db.collection("users").document("alice").set({"name": "Alice"})
        db.document("users/alice").get().to_dict()
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize an empty database.

        Args:
            settings: Optional settings; defaults to the environment-driven
                singleton.
        """
        self.settings = settings or get_settings()
        self.store = DocumentStore()
        self.mutations = MutationEngine(self.store)
        self.queries = QueryEngine(self.store, self.document)
        self.transactions = TransactionEngine(self.store, self.mutations)

    def collection(self, path: str) -> CollectionReference:
        """Reference a collection by path (odd number of segments)."""
        return CollectionReference(self, path)

    def document(self, path: str) -> DocumentReference:
        """Reference a document by path (even number of segments)."""
        return DocumentReference(self, path)

    def collections(self) -> list[CollectionReference]:
        """Root collections that currently hold data."""
        return [self.collection(name) for name in self.store.collection_ids()]

    def batch(self) -> WriteBatch:
        return self.transactions.batch()

    def run_transaction(self, callback: Callable[[Transaction], Any]) -> dict[str, Any]:
        """Run ``callback`` inside a buffered transaction.

        Args:
            callback: Receives a :class:`Transaction`. Reads must precede
                writes. The return value (None or a mapping) is the result.

        Returns:
            The validated result map, ``{}`` when the callback returned None.
        """
        return self.transactions.run(callback)

    def new_document_id(self) -> str:
        return generate_document_id(self.settings.AUTO_ID_LENGTH)

    def dump(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Debug view of every collection; see :meth:`DocumentStore.dump`."""
        return self.store.dump()

    def reset(self) -> None:
        """Remove all data."""
        self.store.clear()
        logger.info("store_reset")
