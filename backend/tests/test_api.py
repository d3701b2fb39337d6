"""API integration tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from semantic_recall.api.dependencies import get_worker_pool
from semantic_recall.app import app

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}


@pytest.fixture
def client() -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


def _save(client: TestClient, text: str, headers: dict[str, str] = ALICE, **extra) -> str:
    resp = client.post(
        "/content",
        json={"content_type": "selection", "content": text, "title": "Note", **extra},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["indexing"] == "queued"
    return resp.json()["content_id"]


def test_health(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


def test_save_index_and_query_flow(client: TestClient) -> None:
    content_id = _save(client, "Write-ahead logging keeps readers and writers apart.", url="https://example.com")
    get_worker_pool().join()

    embedding = client.get(f"/content/{content_id}/embedding", headers=ALICE)
    assert embedding.status_code == 200
    assert embedding.json()["chunk_count"] == 1

    query = client.post("/query", json={"query": "write-ahead logging", "k": 3}, headers=ALICE)
    assert query.status_code == 200
    payload = query.json()
    assert payload["answer"] is None
    assert payload["results"][0]["content_id"] == content_id
    assert payload["results"][0]["url"] == "https://example.com"

    reindex = client.post(f"/content/{content_id}/index", headers=ALICE)
    assert reindex.status_code == 200
    assert reindex.json()["chunk_count"] == 1


def test_structured_page_payload(client: TestClient) -> None:
    resp = client.post(
        "/content",
        json={"content_type": "page", "content": {"html": "<p>Hello <em>page</em></p>"}, "title": "Page"},
        headers=ALICE,
    )
    assert resp.status_code == 201
    content_id = resp.json()["content_id"]
    result = client.post(f"/content/{content_id}/index", headers=ALICE)
    assert result.status_code == 200
    assert result.json()["text_length"] > 0


def test_delete_removes_from_search(client: TestClient) -> None:
    content_id = _save(client, "Temporary note about sourdough starters.")
    get_worker_pool().join()
    resp = client.delete(f"/content/{content_id}", headers=ALICE)
    assert resp.status_code == 200
    assert resp.json() == {"content_id": content_id, "deleted": True, "embedding_removed": True}

    query = client.post("/query", json={"query": "sourdough starters"}, headers=ALICE)
    assert all(item["content_id"] != content_id for item in query.json()["results"])
    assert client.get(f"/content/{content_id}/embedding", headers=ALICE).status_code == 404


def test_ownership_is_enforced(client: TestClient) -> None:
    content_id = _save(client, "Alice's private note.")
    get_worker_pool().join()
    assert client.post(f"/content/{content_id}/index", headers=BOB).status_code == 404
    assert client.delete(f"/content/{content_id}", headers=BOB).status_code == 404
    query = client.post("/query", json={"query": "private note"}, headers=BOB)
    assert query.json()["results"] == []


def test_missing_user_header_is_rejected(client: TestClient) -> None:
    assert client.post("/query", json={"query": "anything"}).status_code == 401


def test_validation_errors(client: TestClient) -> None:
    bad_type = client.post("/content", json={"content_type": "podcast", "content": "x"}, headers=ALICE)
    assert bad_type.status_code == 422
    bad_shape = client.post(
        "/content", json={"content_type": "youtube", "content": {"transcript": 5}}, headers=ALICE
    )
    assert bad_shape.status_code == 400
    assert "transcript" in bad_shape.json()["detail"]
    assert client.post("/query", json={"query": "x", "k": 0}, headers=ALICE).status_code == 422


def test_synthesis_unavailable_degrades_to_null_answer(client: TestClient) -> None:
    _save(client, "Answers need a language model.")
    get_worker_pool().join()
    resp = client.post(
        "/query", json={"query": "language model", "synthesize_answer": True}, headers=ALICE
    )
    assert resp.status_code == 200
    assert resp.json()["results"]
    assert resp.json()["answer"] is None


def test_stats_and_metrics(client: TestClient) -> None:
    _save(client, "Counting things.")
    get_worker_pool().join()
    stats = client.get("/stats").json()
    assert stats["contents"] == 1
    assert stats["embeddings"] == 1
    assert stats["embedding_backend"] == "hashed"
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "recall_index_jobs_total" in metrics.text
