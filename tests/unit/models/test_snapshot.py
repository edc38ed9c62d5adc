"""Tests for DocumentSnapshot and FieldValue."""

from memfire.models.field_value import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    FieldValue,
    FieldValueKind,
)
from memfire.models.snapshot import DocumentSnapshot
from memfire.models.values import Reference


class _Ref(Reference):
    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Ref) and other._path == self._path

    def __hash__(self) -> int:
        return hash(self._path)


class TestDocumentSnapshot:
    """Tests for DocumentSnapshot."""

    def test_captured_data_is_isolated(self) -> None:
        """스냅샷 생성 후 원본 변경은 스냅샷에 영향 없음."""
        data = {"foo": "old", "nested": {"message": "old"}}
        snapshot = DocumentSnapshot(_Ref("messages/a"), data, True)

        data["foo"] = "new"
        data["nested"]["message"] = "new"

        assert snapshot.to_dict() == {"foo": "old", "nested": {"message": "old"}}

    def test_returned_data_is_isolated(self) -> None:
        """to_dict 결과를 변경해도 스냅샷은 그대로."""
        snapshot = DocumentSnapshot(_Ref("messages/a"), {"nested": {"n": 1}}, True)

        snapshot.to_dict()["nested"]["n"] = 2  # type: ignore[index]
        snapshot.get("nested")["n"] = 3

        assert snapshot.get("nested.n") == 1

    def test_missing_document(self) -> None:
        snapshot = DocumentSnapshot(_Ref("messages/missing"), {}, False)

        assert snapshot.exists is False
        assert snapshot.to_dict() is None
        assert snapshot.get("anything", "fallback") == "fallback"

    def test_id_and_reference(self) -> None:
        ref = _Ref("users/alice/friends/bob")
        snapshot = DocumentSnapshot(ref, {"n": 1}, True)

        assert snapshot.id == "bob"
        assert snapshot.reference is ref
        assert snapshot.read_time is not None

    def test_get_missing_nested_field(self) -> None:
        snapshot = DocumentSnapshot(_Ref("a/b"), {"a": {"b": 1}}, True)

        assert snapshot.get("a.c") is None
        assert snapshot.get("a.b.c", 0) == 0

    def test_equality(self) -> None:
        first = DocumentSnapshot(_Ref("a/b"), {"n": 1}, True)
        second = DocumentSnapshot(_Ref("a/b"), {"n": 1}, True)

        assert first == second


class TestFieldValue:
    """Tests for the sentinel variant."""

    def test_constants(self) -> None:
        assert DELETE_FIELD.kind is FieldValueKind.DELETE
        assert SERVER_TIMESTAMP.kind is FieldValueKind.SERVER_TIMESTAMP
        assert FieldValue.delete() is DELETE_FIELD
        assert FieldValue.server_timestamp() is SERVER_TIMESTAMP

    def test_constructors(self) -> None:
        assert FieldValue.increment(5) == FieldValue(FieldValueKind.INCREMENT, 5)
        assert FieldValue.array_union([1, 2]).operand == (1, 2)
        assert FieldValue.array_remove([3]).kind is FieldValueKind.ARRAY_REMOVE

    def test_repr(self) -> None:
        assert repr(DELETE_FIELD) == "FieldValue.delete()"
        assert repr(FieldValue.increment(2)) == "FieldValue.increment(2)"
