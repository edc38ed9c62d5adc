"""Tests for AsyncMemFirestore."""

from typing import Any

import pytest

from memfire.adapters.async_client import (
    AsyncDocumentReference,
    AsyncMemFirestore,
    AsyncTransaction,
)
from memfire.adapters.client import MemFirestore
from memfire.errors import TransactionCallbackError, TransactionOrderingError


class TestAsyncDocumentReference:
    """Tests for async document operations."""

    @pytest.mark.asyncio
    async def test_add_and_get(self, async_db: AsyncMemFirestore) -> None:
        ref = await async_db.collection("messages").add({"text": "hi"})

        snapshot = await ref.get()

        assert snapshot.exists is True
        assert snapshot.to_dict() == {"text": "hi"}
        assert snapshot.reference == ref

    @pytest.mark.asyncio
    async def test_update_and_delete(self, async_db: AsyncMemFirestore) -> None:
        ref = async_db.document("users/alice")
        await ref.set({"name": "Alice"})

        await ref.update({"age": 3})
        assert (await ref.get()).to_dict() == {"name": "Alice", "age": 3}

        await ref.delete()
        assert (await ref.get()).exists is False

    @pytest.mark.asyncio
    async def test_shares_store_with_sync_client(self, db: MemFirestore) -> None:
        async_db = AsyncMemFirestore(sync_client=db)

        await async_db.document("users/alice").set({"n": 1})

        assert db.document("users/alice").get().to_dict() == {"n": 1}

    @pytest.mark.asyncio
    async def test_snapshots(self, async_db: AsyncMemFirestore) -> None:
        ref = async_db.document("users/alice")
        await ref.set({"n": 1})

        received = [snapshot.to_dict() async for snapshot in ref.snapshots()]

        assert received == [{"n": 1}]

    @pytest.mark.asyncio
    async def test_collections(self, async_db: AsyncMemFirestore) -> None:
        await async_db.document("users/alice/friends/bob").set({})

        roots = await async_db.collections()
        subs = await async_db.document("users/alice").collections()

        assert [c.id for c in roots] == ["users"]
        assert [c.path for c in subs] == ["users/alice/friends"]


class TestAsyncQuery:
    """Tests for async queries."""

    @pytest.mark.asyncio
    async def test_query_get_and_stream(self, async_db: AsyncMemFirestore) -> None:
        players = async_db.collection("players")
        for doc_id, score in [("p1", 5), ("p2", 12), ("p3", 20), ("p4", 30)]:
            await players.document(doc_id).set({"score": score})

        query = players.where("score", ">", 10).order_by("score").limit(2)
        results = await query.get()
        streamed = [snapshot.id async for snapshot in query.stream()]

        assert [s.get("score") for s in results] == [12, 20]
        assert streamed == ["p2", "p3"]

    @pytest.mark.asyncio
    async def test_results_carry_async_references(self, async_db: AsyncMemFirestore) -> None:
        """쿼리 결과의 reference로 다시 await 가능."""
        players = async_db.collection("players")
        ref = await players.add({"score": 7}, document_id="p1")

        results = await players.get()
        streamed = [snapshot async for snapshot in players.stream()]
        pages = [page async for page in players.snapshots()]

        assert isinstance(results[0].reference, AsyncDocumentReference)
        assert results[0].reference == ref
        assert (await results[0].reference.get()).to_dict() == {"score": 7}
        assert isinstance(streamed[0].reference, AsyncDocumentReference)
        assert isinstance(pages[0][0].reference, AsyncDocumentReference)

    @pytest.mark.asyncio
    async def test_start_after_async_result(self, async_db: AsyncMemFirestore) -> None:
        players = async_db.collection("players")
        for doc_id, score in [("p1", 5), ("p2", 12), ("p3", 20)]:
            await players.document(doc_id).set({"score": score})
        ordered = players.order_by("score")
        first = await ordered.limit(1).get()

        rest = await ordered.start_after_document(first[0]).get()

        assert [s.id for s in rest] == ["p2", "p3"]


class TestAsyncTransaction:
    """Tests for async transactions and batches."""

    @pytest.mark.asyncio
    async def test_run_transaction(self, async_db: AsyncMemFirestore) -> None:
        counter = async_db.document("counters/c")
        await counter.set({"n": 1})

        async def callback(transaction: AsyncTransaction) -> dict[str, Any]:
            snapshot = await transaction.get(counter)
            transaction.update(counter, {"n": snapshot.get("n") + 1})
            return {"before": snapshot.get("n")}

        result = await async_db.run_transaction(callback)

        assert result == {"before": 1}
        assert (await counter.get()).to_dict() == {"n": 2}

    @pytest.mark.asyncio
    async def test_read_after_write(self, async_db: AsyncMemFirestore) -> None:
        ref = async_db.document("users/alice")

        async def callback(transaction: AsyncTransaction) -> None:
            transaction.set(ref, {"n": 1})
            await transaction.get(ref)

        with pytest.raises(TransactionOrderingError):
            await async_db.run_transaction(callback)

        assert async_db.dump() == {}

    @pytest.mark.asyncio
    async def test_callback_error(self, async_db: AsyncMemFirestore) -> None:
        async def callback(transaction: AsyncTransaction) -> None:
            transaction.set(async_db.document("users/alice"), {"n": 1})
            raise KeyError("missing")

        with pytest.raises(TransactionCallbackError):
            await async_db.run_transaction(callback)

        assert async_db.dump() == {}

    @pytest.mark.asyncio
    async def test_batch(self, async_db: AsyncMemFirestore) -> None:
        batch = async_db.batch()
        batch.set(async_db.document("users/a"), {"n": 1})
        batch.set(async_db.document("users/b"), {"n": 2})

        await batch.commit()

        assert async_db.dump() == {"users": {"a": {"n": 1}, "b": {"n": 2}}}
