"""Tests for embedding utilities."""

import pytest

from conftest import FakeProvider
from semantic_recall.core.errors import InvalidInput, ProviderError, ProviderUnavailable
from semantic_recall.ingest.embeddings import Embedder
from semantic_recall.providers.hashed import HashedEmbeddingClient
from semantic_recall.utils.text import TRUNCATION_MARKER


def test_embed_batch_preserves_order_and_batches(fake_provider: FakeProvider) -> None:
    embedder = Embedder(fake_provider, batch_size=2)
    texts = ["alpha", "beta", "gamma", "delta", "epsilon"]
    vectors = embedder.embed_batch(texts)
    assert len(vectors) == len(texts)
    assert [len(call) for call in fake_provider.embed_calls] == [2, 2, 1]
    assert vectors[2] == HashedEmbeddingClient(dim=8).embed(["gamma"])[0]


def test_empty_text_is_invalid(fake_provider: FakeProvider) -> None:
    embedder = Embedder(fake_provider)
    with pytest.raises(InvalidInput):
        embedder.embed("   ")
    assert not InvalidInput("x").retryable
    assert fake_provider.embed_calls == []
    assert embedder.embed_batch([]) == []


def test_long_input_is_truncated_with_marker(fake_provider: FakeProvider) -> None:
    embedder = Embedder(fake_provider, max_input_tokens=16)
    embedder.embed("word " * 100)
    sent = fake_provider.embed_calls[0][0]
    assert len(sent) == embedder.max_input_chars
    assert sent.endswith(TRUNCATION_MARKER)


def test_provider_errors_propagate() -> None:
    provider = FakeProvider(embed_failures=[ProviderUnavailable("down")])
    embedder = Embedder(provider)
    with pytest.raises(ProviderUnavailable):
        embedder.embed("hello")


def test_count_mismatch_is_rejected() -> None:
    class ShortProvider(FakeProvider):
        def embed(self, texts, timeout=None):
            return super().embed(texts, timeout)[:-1]

    with pytest.raises(ProviderError):
        Embedder(ShortProvider()).embed_batch(["one", "two"])


def test_backend_name(fake_provider: FakeProvider) -> None:
    assert Embedder(fake_provider).backend == "fake"
