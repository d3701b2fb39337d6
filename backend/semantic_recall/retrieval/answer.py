"""Answer synthesis from retrieved chunks."""

from __future__ import annotations

from typing import Sequence

from semantic_recall.core.errors import ProviderError
from semantic_recall.core.logging import get_logger
from semantic_recall.core.metrics import PROVIDER_ERRORS
from semantic_recall.providers.base import ProviderClient
from semantic_recall.retrieval.similarity import SearchHit

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions using only the provided context. "
    "If the context does not contain enough information to answer the question, "
    "say that you don't have enough information."
)

CONTEXT_DELIMITER = "\n\n---\n\n"


def build_prompt(query: str, hits: Sequence[SearchHit]) -> str:
    context = CONTEXT_DELIMITER.join(hit.context.chunk.text for hit in hits)
    return f"Context information:\n{context}\n\nBased on the above context, answer this question: {query}"


class AnswerSynthesizer:
    """Single chat completion grounded on the top-ranked chunks."""

    def __init__(self, client: ProviderClient) -> None:
        self.client = client

    def synthesize(self, query: str, hits: Sequence[SearchHit], timeout: float | None = None) -> str | None:
        if not hits:
            return None
        prompt = build_prompt(query, hits)
        try:
            answer = self.client.complete(SYSTEM_PROMPT, prompt, timeout=timeout)
        except ProviderError as exc:
            PROVIDER_ERRORS.labels(operation="complete", kind=type(exc).__name__).inc()
            raise
        logger.debug("Synthesized answer from %s chunks", len(hits))
        return answer


__all__ = ["AnswerSynthesizer", "SYSTEM_PROMPT", "CONTEXT_DELIMITER", "build_prompt"]
