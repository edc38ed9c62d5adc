"""Mutation, query and transaction engines."""

from memfire.services.mutation_engine import MutationEngine
from memfire.services.query_engine import FieldFilter, QueryEngine, QuerySpec
from memfire.services.transaction_engine import (
    Transaction,
    TransactionEngine,
    TransactionState,
    WriteBatch,
)

__all__ = [
    "FieldFilter",
    "MutationEngine",
    "QueryEngine",
    "QuerySpec",
    "Transaction",
    "TransactionEngine",
    "TransactionState",
    "WriteBatch",
]
