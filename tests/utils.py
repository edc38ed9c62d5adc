"""Test utilities shared across test modules."""

from typing import Any

from memfire.adapters.client import MemFirestore


def seed_collection(
    db: MemFirestore, collection_path: str, documents: dict[str, dict[str, Any]]
) -> None:
    """컬렉션에 테스트 문서를 저장합니다.

    Args:
        db: Target database.
        collection_path: Collection to fill.
        documents: Document id -> fields.
    """
    collection = db.collection(collection_path)
    for doc_id, fields in documents.items():
        collection.document(doc_id).set(fields)


def result_ids(snapshots: list[Any]) -> list[str]:
    """Document ids of a query result, in order."""
    return [snapshot.id for snapshot in snapshots]
