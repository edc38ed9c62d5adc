"""In-memory storage layer."""

from memfire.store.document_store import DocumentStore
from memfire.store.paths import (
    collection_segments,
    document_segments,
    generate_document_id,
    split_path,
)

__all__ = [
    "DocumentStore",
    "collection_segments",
    "document_segments",
    "generate_document_id",
    "split_path",
]
