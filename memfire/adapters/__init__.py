"""Client facades over the in-memory engines."""

from memfire.adapters.async_client import (
    AsyncCollectionReference,
    AsyncDocumentReference,
    AsyncMemFirestore,
    AsyncQuery,
    AsyncTransaction,
    AsyncWriteBatch,
)
from memfire.adapters.client import MemFirestore
from memfire.adapters.references import CollectionReference, DocumentReference, Query

__all__ = [
    "AsyncCollectionReference",
    "AsyncDocumentReference",
    "AsyncMemFirestore",
    "AsyncQuery",
    "AsyncTransaction",
    "AsyncWriteBatch",
    "CollectionReference",
    "DocumentReference",
    "MemFirestore",
    "Query",
]
