"""In-memory document tree.

컬렉션 → 문서 → 필드로 이루어진 트리를 보관합니다. 모든 읽기는 깊은 복사본을 반환합니다.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog

from memfire.models.values import clone_value
from memfire.store.paths import collection_segments, document_segments, join_path

logger = structlog.get_logger(__name__)


@dataclass
class _DocumentNode:
    fields: dict[str, Any] = field(default_factory=dict)
    exists: bool = False
    collections: dict[str, "_CollectionNode"] = field(default_factory=dict)


@dataclass
class _CollectionNode:
    documents: dict[str, _DocumentNode] = field(default_factory=dict)


class DocumentStore:
    """Path-addressed tree of collections, documents and fields.

    Existence is tracked per document independently of its fields. Nodes are
    only allocated by :meth:`write`; reading an unknown path leaves the tree
    untouched. A deleted document keeps its subcollections.
    """

    def __init__(self) -> None:
        self._collections: dict[str, _CollectionNode] = {}

    # --- reads -------------------------------------------------------------

    def get(self, path: str) -> tuple[dict[str, Any], bool]:
        """Read a document.

        Args:
            path: Document path.

        Returns:
            Tuple of (deep copy of the fields, exists). Missing documents
            return an empty dict and False.
        """
        node = self._find_document(document_segments(path))
        if node is None or not node.exists:
            return {}, False
        return clone_value(node.fields), True

    def has_document(self, path: str) -> bool:
        node = self._find_document(document_segments(path))
        return node is not None and node.exists

    def list_documents(self, collection_path: str) -> list[tuple[str, dict[str, Any], bool]]:
        """Rows of a collection ordered by document id.

        Args:
            collection_path: Collection path.

        Returns:
            List of (document id, deep copy of fields, exists). Documents that
            only hold subcollections are reported with ``exists=False``.
        """
        collection = self._find_collection(collection_segments(collection_path))
        if collection is None:
            return []
        return [
            (doc_id, clone_value(node.fields), node.exists)
            for doc_id, node in sorted(collection.documents.items())
        ]

    def collection_ids(self, document_path: str | None = None) -> list[str]:
        """Names of the collections at the root or under a document."""
        if document_path is None:
            return sorted(self._collections)
        node = self._find_document(document_segments(document_path))
        if node is None:
            return []
        return sorted(node.collections)

    # --- writes ------------------------------------------------------------

    def write(self, path: str, fields: dict[str, Any]) -> None:
        """Overwrite a document's fields and mark it existent."""
        node = self._ensure_document(document_segments(path))
        node.fields = clone_value(fields)
        node.exists = True
        logger.debug("document_written", path=path, field_count=len(fields))

    def delete(self, path: str) -> None:
        """Remove a document's fields and mark it non-existent."""
        segments = document_segments(path)
        collection = self._find_collection(segments[:-1])
        if collection is None:
            return
        node = collection.documents.get(segments[-1])
        if node is None:
            return
        if node.collections:
            node.fields = {}
            node.exists = False
        else:
            del collection.documents[segments[-1]]
        logger.debug("document_deleted", path=path)

    def clear(self) -> None:
        """Drop every collection."""
        self._collections.clear()
        logger.debug("store_cleared")

    # --- debug -------------------------------------------------------------

    def dump(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Full tree as ``{collection path: {document id: fields}}``.

        Subcollections appear under their full path. Only existent documents
        are listed. Intended for test diagnostics; the format is not stable.
        """
        result: dict[str, dict[str, dict[str, Any]]] = {}
        self._dump_collections(self._collections, (), result)
        return result

    def _dump_collections(
        self,
        collections: dict[str, _CollectionNode],
        prefix: tuple[str, ...],
        result: dict[str, dict[str, dict[str, Any]]],
    ) -> None:
        for name, collection in sorted(collections.items()):
            collection_path = prefix + (name,)
            documents = {
                doc_id: clone_value(node.fields)
                for doc_id, node in sorted(collection.documents.items())
                if node.exists
            }
            if documents:
                result[join_path(*collection_path)] = documents
            for doc_id, node in sorted(collection.documents.items()):
                self._dump_collections(node.collections, collection_path + (doc_id,), result)

    # --- tree navigation ---------------------------------------------------

    def _find_collection(self, segments: tuple[str, ...]) -> _CollectionNode | None:
        collections = self._collections
        collection: _CollectionNode | None = None
        for index in range(0, len(segments), 2):
            collection = collections.get(segments[index])
            if collection is None:
                return None
            if index + 1 == len(segments):
                break
            document = collection.documents.get(segments[index + 1])
            if document is None:
                return None
            collections = document.collections
        return collection

    def _find_document(self, segments: tuple[str, ...]) -> _DocumentNode | None:
        collection = self._find_collection(segments[:-1])
        if collection is None:
            return None
        return collection.documents.get(segments[-1])

    def _ensure_document(self, segments: tuple[str, ...]) -> _DocumentNode:
        collections = self._collections
        for index in range(0, len(segments) - 2, 2):
            parent = collections.setdefault(segments[index], _CollectionNode())
            collections = parent.documents.setdefault(
                segments[index + 1], _DocumentNode()
            ).collections
        collection = collections.setdefault(segments[-2], _CollectionNode())
        return collection.documents.setdefault(segments[-1], _DocumentNode())
