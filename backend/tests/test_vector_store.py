"""Tests for the SQLite vector store."""

from __future__ import annotations

import threading

import pytest

from semantic_recall.core.errors import NotFoundError, ValidationError
from semantic_recall.ingest.types import ChunkInput


def _save(contents, owner: str = "user-1", text: str = "hello") -> str:
    return contents.create(owner_id=owner, content_type="selection", content=text, title="T").id


def _chunks(*vectors: list[float]) -> list[ChunkInput]:
    return [
        ChunkInput(text=f"chunk {idx}", vector=vector, start_char=idx * 10, end_char=idx * 10 + 7)
        for idx, vector in enumerate(vectors)
    ]


def test_upsert_and_get(contents, store) -> None:
    content_id = _save(contents)
    embedding = store.upsert_embedding(content_id, [0.5, 0.5], 2, _chunks([1.0, 0.0], [0.0, 1.0]))
    assert embedding.saved_content_id == content_id
    assert embedding.dimensions == 2
    assert embedding.vector == [0.5, 0.5]
    assert [chunk.sequence_index for chunk in embedding.chunks] == [0, 1]
    assert embedding.chunks[1].start_char == 10
    assert store.get_embedding(content_id).id == embedding.id


def test_upsert_replaces_previous_embedding(contents, store) -> None:
    content_id = _save(contents)
    first = store.upsert_embedding(content_id, [1.0, 0.0], 2, _chunks([1.0, 0.0], [0.0, 1.0]))
    second = store.upsert_embedding(content_id, [0.0, 1.0], 2, _chunks([1.0, 1.0]))
    assert first.id != second.id
    assert store.count_embeddings() == 1
    assert store.count_chunks() == 1
    assert store.get_embedding(content_id).vector == [0.0, 1.0]


def test_dimension_mismatch_is_rejected(contents, store) -> None:
    content_id = _save(contents)
    with pytest.raises(ValidationError):
        store.upsert_embedding(content_id, [1.0, 0.0], 3, [])
    with pytest.raises(ValidationError):
        store.upsert_embedding(content_id, [1.0, 0.0], 2, _chunks([1.0]))
    with pytest.raises(NotFoundError):
        store.get_embedding(content_id)


def test_empty_vector_with_no_chunks(contents, store) -> None:
    content_id = _save(contents)
    embedding = store.upsert_embedding(content_id, [], 0, [])
    assert embedding.dimensions == 0
    assert embedding.chunks == []


def test_delete_embedding_is_noop_when_absent(contents, store) -> None:
    content_id = _save(contents)
    assert store.delete_embedding(content_id) is False
    store.upsert_embedding(content_id, [1.0], 1, _chunks([1.0]))
    assert store.delete_embedding(content_id) is True
    assert store.count_chunks() == 0
    with pytest.raises(NotFoundError):
        store.get_embedding(content_id)


def test_deleting_content_cascades(contents, store) -> None:
    content_id = _save(contents)
    store.upsert_embedding(content_id, [1.0], 1, _chunks([1.0], [0.5]))
    assert contents.delete(content_id) is True
    assert store.count_embeddings() == 0
    assert store.count_chunks() == 0


def test_context_iteration_order_and_owner_filter(contents, store) -> None:
    first = _save(contents, owner="alice")
    second = _save(contents, owner="bob")
    store.upsert_embedding(second, [1.0], 1, _chunks([1.0], [0.5]))
    store.upsert_embedding(first, [1.0], 1, _chunks([0.2]))
    contexts = list(store.all_chunks_with_context())
    assert [(ctx.content.id, ctx.chunk.sequence_index) for ctx in contexts] == [
        (second, 0),
        (second, 1),
        (first, 0),
    ]
    assert contexts[0].embedding is contexts[1].embedding
    owned = list(store.all_chunks_with_context(owner_id="alice"))
    assert [ctx.content.owner_id for ctx in owned] == ["alice"]


def test_invalid_id_is_rejected(store) -> None:
    with pytest.raises(ValidationError):
        store.get_embedding("")


def test_concurrent_upserts_leave_one_embedding(contents, store) -> None:
    content_id = _save(contents)
    errors: list[Exception] = []

    def worker(value: float) -> None:
        try:
            store.upsert_embedding(content_id, [value], 1, _chunks([value], [value]))
        except Exception as exc:  # noqa: BLE001 - surfaced through the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(float(idx),)) for idx in range(1, 6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert errors == []
    assert store.count_embeddings() == 1
    assert store.count_chunks() == 2


def test_upsert_returns_the_written_embedding(contents, store, monkeypatch) -> None:
    content_id = _save(contents)

    def reread(_saved_content_id: str):
        raise AssertionError("upsert_embedding re-read the store")

    monkeypatch.setattr(store, "get_embedding", reread)
    embedding = store.upsert_embedding(content_id, [0.5], 1, _chunks([1.0], [0.5], [0.25]))
    assert [chunk.vector for chunk in embedding.chunks] == [[1.0], [0.5], [0.25]]
    assert {chunk.content_embedding_id for chunk in embedding.chunks} == {embedding.id}
    monkeypatch.undo()

    store.delete_embedding(content_id)
    assert len(embedding.chunks) == 3
    store.upsert_embedding(content_id, [0.5], 1, _chunks([1.0]))
    assert store.get_embedding(content_id).seq > embedding.seq


def test_get_embedding_is_not_torn_by_a_concurrent_replace(contents, store, monkeypatch) -> None:
    content_id = _save(contents)
    store.upsert_embedding(content_id, [1.0], 1, _chunks([1.0], [0.5], [0.25]))
    original_execute = store.db.execute
    statements: list[str] = []

    def execute_then_replace(sql, params=None):
        cursor = original_execute(sql, params)
        statements.append(sql)
        if len(statements) == 1:
            # Commit a replacement while the first statement is still open.
            replacer = threading.Thread(
                target=store.upsert_embedding, args=(content_id, [0.0], 1, _chunks([0.0]))
            )
            replacer.start()
            replacer.join()
        return cursor

    monkeypatch.setattr(store.db, "execute", execute_then_replace)
    embedding = store.get_embedding(content_id)
    monkeypatch.undo()

    assert len(statements) == 1
    assert [chunk.sequence_index for chunk in embedding.chunks] == [0, 1, 2]
    assert {chunk.content_embedding_id for chunk in embedding.chunks} == {embedding.id}
    replaced = store.get_embedding(content_id)
    assert replaced.id != embedding.id
    assert len(replaced.chunks) == 1
