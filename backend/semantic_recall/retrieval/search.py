"""Search orchestration."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from semantic_recall.core.config import Settings
from semantic_recall.core.errors import ProviderError, ValidationError
from semantic_recall.core.logging import get_logger
from semantic_recall.core.metrics import REQUEST_LATENCY
from semantic_recall.ingest.embeddings import Embedder
from semantic_recall.retrieval.answer import AnswerSynthesizer
from semantic_recall.retrieval.similarity import SearchHit, SimilaritySearchEngine
from semantic_recall.utils.text import preview

logger = get_logger(__name__)


@dataclass(slots=True)
class QueryResult:
    content_id: str
    chunk_id: str
    title: str
    url: str
    site_name: str | None
    content_type: str
    score: float
    snippet: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "content_id": self.content_id,
            "chunk_id": self.chunk_id,
            "title": self.title,
            "url": self.url,
            "site_name": self.site_name,
            "content_type": self.content_type,
            "score": self.score,
            "snippet": self.snippet,
        }


@dataclass(slots=True)
class QueryOutcome:
    results: list[QueryResult] = field(default_factory=list)
    answer: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"results": [result.to_dict() for result in self.results], "answer": self.answer}


class QueryService:
    """Embeds a query, ranks stored chunks, and optionally synthesizes an answer."""

    def __init__(
        self,
        engine: SimilaritySearchEngine,
        embedder: Embedder,
        synthesizer: AnswerSynthesizer,
        settings: Settings,
    ) -> None:
        self.engine = engine
        self.embedder = embedder
        self.synthesizer = synthesizer
        self.settings = settings

    def query(
        self,
        query_text: str,
        top_k: int | None = None,
        synthesize_answer: bool = False,
        owner_id: str | None = None,
        timeout: float | None = None,
    ) -> QueryOutcome:
        """Rank stored chunks by similarity to ``query_text``.

        Embedding failures propagate and fail the query. A failed synthesis
        is logged and leaves ``answer`` as None; the ranked results are kept.
        """
        if not isinstance(query_text, str) or not query_text.strip():
            raise ValidationError("Query text is required")
        k = top_k if top_k is not None else self.settings.top_k
        if k < 1:
            raise ValidationError("k must be at least 1")
        timeout = timeout if timeout is not None else self.settings.provider_timeout

        start_time = time.perf_counter()
        query_vector = self.embedder.embed(query_text, timeout=timeout)
        hits = self.engine.search(query_vector, top_k=k, owner_id=owner_id)
        outcome = QueryOutcome(results=[self._build_result(hit) for hit in hits])

        if synthesize_answer and hits:
            try:
                outcome.answer = self.synthesizer.synthesize(query_text, hits, timeout=timeout)
            except ProviderError:
                logger.exception("Answer synthesis failed; returning results without an answer")

        REQUEST_LATENCY.labels(endpoint="query", method="POST").observe(time.perf_counter() - start_time)
        logger.info(
            "Query returned %s results",
            len(outcome.results),
            extra={"ctx_owner_id": owner_id, "ctx_answered": outcome.answer is not None},
        )
        return outcome

    def _build_result(self, hit: SearchHit) -> QueryResult:
        context = hit.context
        return QueryResult(
            content_id=context.content.id,
            chunk_id=context.chunk.id,
            title=context.content.title,
            url=context.content.url,
            site_name=context.content.site_name,
            content_type=context.content.content_type.value,
            score=hit.score,
            snippet=preview(context.chunk.text, self.settings.snippet_length),
        )


__all__ = ["QueryService", "QueryOutcome", "QueryResult"]
