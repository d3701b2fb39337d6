"""Tests for query orchestration."""

from __future__ import annotations

import pytest

from conftest import FakeProvider
from semantic_recall.core.errors import ProviderUnavailable, ValidationError
from semantic_recall.ingest.embeddings import Embedder
from semantic_recall.ingest.pipeline import IndexPipeline
from semantic_recall.retrieval.answer import AnswerSynthesizer
from semantic_recall.retrieval.search import QueryService
from semantic_recall.retrieval.similarity import SimilaritySearchEngine

NOTES = {
    "Cooking": "Slow roasting vegetables brings out their sweetness. Roast carrots at low heat.",
    "Databases": "SQLite write-ahead logging lets readers continue while a writer commits.",
    "Long": "Embedding vectors capture meaning. " * 30,
}


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(dim=64)


@pytest.fixture
def service(contents, store, provider, settings) -> QueryService:
    embedder = Embedder(provider)
    pipeline = IndexPipeline(contents, store, embedder, settings)
    for title, text in NOTES.items():
        content = contents.create(owner_id="alice", content_type="selection", content=text, title=title)
        pipeline.index(content.id)
    other = contents.create(owner_id="bob", content_type="selection", content=NOTES["Databases"], title="Bob")
    pipeline.index(other.id)
    return QueryService(SimilaritySearchEngine(store), embedder, AnswerSynthesizer(provider), settings)


def test_results_are_ranked_and_decorated(service: QueryService) -> None:
    outcome = service.query("sqlite readers writer", top_k=3, owner_id="alice")
    assert outcome.answer is None
    top = outcome.results[0]
    assert top.title == "Databases"
    assert top.content_type == "selection"
    assert top.url == ""
    scores = [result.score for result in outcome.results]
    assert scores == sorted(scores, reverse=True)
    assert all(result.title != "Bob" for result in outcome.results)


def test_identical_queries_return_identical_results(service: QueryService) -> None:
    first = service.query("roast carrots", owner_id="alice")
    second = service.query("roast carrots", owner_id="alice")
    assert first.to_dict() == second.to_dict()


def test_snippets_are_cut(service: QueryService) -> None:
    outcome = service.query("embedding vectors meaning", top_k=10, owner_id="alice")
    limit = service.settings.snippet_length
    cut = [result.snippet for result in outcome.results if result.snippet.endswith("...")]
    assert cut
    assert all(len(snippet) == limit + 3 for snippet in cut)
    assert all(len(result.snippet) <= limit + 3 for result in outcome.results)


def test_synthesis_failure_keeps_results(service: QueryService, provider: FakeProvider) -> None:
    baseline = service.query("roast carrots", synthesize_answer=False, owner_id="alice")
    provider.complete_error = ProviderUnavailable("llm down")
    degraded = service.query("roast carrots", synthesize_answer=True, owner_id="alice")
    assert degraded.answer is None
    assert degraded.to_dict()["results"] == baseline.to_dict()["results"]


def test_synthesized_answer(service: QueryService, provider: FakeProvider) -> None:
    outcome = service.query("roast carrots", synthesize_answer=True, owner_id="alice")
    assert outcome.answer == provider.answer
    assert len(provider.complete_calls) == 1


def test_no_hits_means_no_answer(service: QueryService, provider: FakeProvider) -> None:
    outcome = service.query("anything", synthesize_answer=True, owner_id="nobody")
    assert outcome.results == []
    assert outcome.answer is None
    assert provider.complete_calls == []


def test_query_validation(service: QueryService) -> None:
    with pytest.raises(ValidationError):
        service.query("   ")
    with pytest.raises(ValidationError):
        service.query("text", top_k=0)


def test_embedding_failure_fails_query(service: QueryService, provider: FakeProvider) -> None:
    provider.embed_failures = [ProviderUnavailable("down")]
    with pytest.raises(ProviderUnavailable):
        service.query("roast carrots")
