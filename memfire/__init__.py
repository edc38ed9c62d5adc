"""memfire: in-memory, Firestore-shaped document database.

Documents addressed by slash paths, nested collections, field value
sentinels, queries and buffered transactions, all inside the current process.
"""

from memfire.adapters import (
    AsyncMemFirestore,
    CollectionReference,
    DocumentReference,
    MemFirestore,
    Query,
)
from memfire.errors import (
    InvalidQueryError,
    InvalidTransactionResultError,
    MemFireError,
    PathError,
    PlatformError,
    TransactionCallbackError,
    TransactionOrderingError,
    TransactionResultTypeError,
    TransactionStateError,
    ValidationError,
)
from memfire.models import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    DocumentSnapshot,
    FieldValue,
    GeoPoint,
    Timestamp,
)
from memfire.services import FieldFilter, Transaction, WriteBatch

__all__ = [
    "DELETE_FIELD",
    "SERVER_TIMESTAMP",
    "AsyncMemFirestore",
    "CollectionReference",
    "DocumentReference",
    "DocumentSnapshot",
    "FieldFilter",
    "FieldValue",
    "GeoPoint",
    "InvalidQueryError",
    "InvalidTransactionResultError",
    "MemFireError",
    "MemFirestore",
    "PathError",
    "PlatformError",
    "Query",
    "Timestamp",
    "Transaction",
    "TransactionCallbackError",
    "TransactionOrderingError",
    "TransactionResultTypeError",
    "TransactionStateError",
    "ValidationError",
    "WriteBatch",
]
