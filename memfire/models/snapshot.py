"""Point-in-time document snapshots."""

from typing import Any

from memfire.models.values import Reference, Timestamp, clone_value


class DocumentSnapshot:
    """Immutable copy of a document's fields and existence flag.

    The data is deep-copied when the snapshot is taken and again on every
    read, so neither later writes to the document nor mutation of returned
    dicts change what the snapshot reports.
    """

    def __init__(
        self,
        reference: Reference,
        data: dict[str, Any] | None,
        exists: bool,
        read_time: Timestamp | None = None,
    ) -> None:
        self._reference = reference
        self._data = clone_value(data) if exists and data is not None else None
        self._exists = exists
        self._read_time = read_time or Timestamp.now()

    @property
    def reference(self) -> Reference:
        return self._reference

    @property
    def id(self) -> str:
        """The document id (last path segment)."""
        return self._reference.path.rsplit("/", 1)[-1]

    @property
    def exists(self) -> bool:
        return self._exists

    @property
    def read_time(self) -> Timestamp:
        return self._read_time

    def to_dict(self) -> dict[str, Any] | None:
        """Return the document fields, or None if the document did not exist."""
        if self._data is None:
            return None
        return clone_value(self._data)

    def get(self, field_path: str, default: Any = None) -> Any:
        """Return a field by dotted path.

        Args:
            field_path: Dot-separated field names, e.g. ``"address.city"``.
            default: Returned when the document or field is missing.

        Returns:
            Deep copy of the field value or ``default``.
        """
        if self._data is None:
            return default
        value: Any = self._data
        for part in field_path.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return clone_value(value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocumentSnapshot):
            return NotImplemented
        return (
            self._reference == other._reference
            and self._exists == other._exists
            and self._data == other._data
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DocumentSnapshot(path={self._reference.path!r}, exists={self._exists})"
