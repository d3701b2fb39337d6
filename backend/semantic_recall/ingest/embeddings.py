"""Embedding utilities."""

from __future__ import annotations

from typing import Sequence

from semantic_recall.core.errors import InvalidInput, ProviderError
from semantic_recall.core.logging import get_logger
from semantic_recall.core.metrics import PROVIDER_ERRORS
from semantic_recall.providers.base import ProviderClient
from semantic_recall.utils.text import truncate_with_marker

logger = get_logger(__name__)

# Rough character budget per provider token.
CHARS_PER_TOKEN = 4


class Embedder:
    """Fault-reporting wrapper around a provider's embedding endpoint."""

    def __init__(
        self,
        client: ProviderClient,
        batch_size: int = 64,
        max_input_tokens: int = 8000,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.client = client
        self.batch_size = batch_size
        self.max_input_chars = max_input_tokens * CHARS_PER_TOKEN

    @property
    def backend(self) -> str:
        return getattr(self.client, "name", type(self.client).__name__)

    def embed(self, text: str, timeout: float | None = None) -> list[float]:
        return self.embed_batch([text], timeout=timeout)[0]

    def embed_batch(self, texts: Sequence[str], timeout: float | None = None) -> list[list[float]]:
        """Embed texts in order; the result has exactly one vector per input."""
        if not texts:
            return []
        prepared = [self._prepare(text, position) for position, text in enumerate(texts)]
        vectors: list[list[float]] = []
        for offset in range(0, len(prepared), self.batch_size):
            batch = prepared[offset : offset + self.batch_size]
            try:
                batch_vectors = self.client.embed(batch, timeout=timeout)
            except ProviderError as exc:
                PROVIDER_ERRORS.labels(operation="embed", kind=type(exc).__name__).inc()
                if not exc.retryable:
                    logger.error("Embedding batch rejected by %s: %s", self.backend, exc)
                raise
            if len(batch_vectors) != len(batch):
                raise ProviderError(
                    f"Provider returned {len(batch_vectors)} vectors for {len(batch)} inputs"
                )
            vectors.extend(batch_vectors)
            logger.debug("Embedded batch %s (%s texts)", offset // self.batch_size + 1, len(batch))
        _check_dimensions(vectors)
        return vectors

    def _prepare(self, text: str, position: int) -> str:
        if not isinstance(text, str) or not text.strip():
            raise InvalidInput(f"Cannot embed empty text (input #{position})")
        prepared = truncate_with_marker(text, self.max_input_chars)
        if prepared is not text:
            logger.info("Truncated input #%s from %s to %s characters", position, len(text), len(prepared))
        return prepared


def _check_dimensions(vectors: Sequence[Sequence[float]]) -> None:
    if not vectors:
        return
    expected = len(vectors[0])
    for vector in vectors:
        if len(vector) != expected:
            raise ProviderError("Provider returned vectors of inconsistent dimension")


__all__ = ["Embedder", "CHARS_PER_TOKEN"]
