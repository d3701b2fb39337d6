"""Test fixtures for Semantic Recall."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Sequence

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset global singletons and environment between tests."""
    monkeypatch.setenv("RECALL_DB_PATH", str(tmp_path / "recall.db"))
    monkeypatch.setenv("RECALL_EMBEDDING_BACKEND", "hashed")
    monkeypatch.setenv("RECALL_INDEX_RETRY_BACKOFF", "0")
    monkeypatch.delenv("RECALL_CONFIG", raising=False)
    monkeypatch.delenv("RECALL_PROVIDER_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    from semantic_recall.api import dependencies as deps

    deps.reset_dependencies()
    yield
    deps.reset_dependencies()


@pytest.fixture
def settings():
    from semantic_recall.core.config import Settings

    return Settings.from_yaml()


@pytest.fixture
def db(tmp_path: Path):
    from semantic_recall.db.sqlite import SQLiteDatabase

    database = SQLiteDatabase(tmp_path / "unit.db")
    database.ensure_schema()
    yield database
    database.close()


@pytest.fixture
def contents(db):
    from semantic_recall.db.repositories import SavedContentRepository

    return SavedContentRepository(db)


@pytest.fixture
def store(db):
    from semantic_recall.retrieval.vector_store import VectorStore

    return VectorStore(db)


class FakeProvider:
    """Scriptable provider: deterministic vectors, optional failures per call."""

    name = "fake"

    def __init__(self, dim: int = 8, embed_failures: Sequence[Exception] = (), answer: str = "An answer.") -> None:
        from semantic_recall.providers.hashed import HashedEmbeddingClient

        self._hashed = HashedEmbeddingClient(dim=dim)
        self.embed_failures = list(embed_failures)
        self.complete_error: Exception | None = None
        self.answer = answer
        self.embed_calls: list[list[str]] = []
        self.complete_calls: list[tuple[str, str]] = []

    def embed(self, texts, timeout=None):
        self.embed_calls.append(list(texts))
        if self.embed_failures:
            raise self.embed_failures.pop(0)
        return self._hashed.embed(texts)

    def complete(self, system, prompt, timeout=None):
        self.complete_calls.append((system, prompt))
        if self.complete_error is not None:
            raise self.complete_error
        return self.answer


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture(scope="session")
def sample_text() -> str:
    return "Title\n\nParagraph one.\n\nParagraph two is here."
