"""Brute-force cosine similarity search over stored chunks."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from semantic_recall.core.errors import ValidationError
from semantic_recall.core.logging import get_logger
from semantic_recall.models.entities import ChunkContext
from semantic_recall.retrieval.vector_store import VectorStore

logger = get_logger(__name__)


@dataclass(slots=True)
class SearchHit:
    context: ChunkContext
    score: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between ``a`` and ``b``, clamped to [-1, 1].

    Returns 0.0 when either vector has zero norm.
    """
    if len(a) != len(b):
        raise ValueError(f"Vector length mismatch: {len(a)} != {len(b)}")
    dot = _dot(a, b)
    norm_a = math.sqrt(_dot(a, a))
    norm_b = math.sqrt(_dot(b, b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return max(-1.0, min(1.0, dot / (norm_a * norm_b)))


class SimilaritySearchEngine:
    """Scores every stored chunk against a query vector."""

    def __init__(self, store: VectorStore) -> None:
        self.store = store

    def search(
        self,
        query_vector: Sequence[float],
        top_k: int,
        owner_id: str | None = None,
    ) -> list[SearchHit]:
        if top_k < 1:
            raise ValidationError("top_k must be at least 1")
        if not query_vector:
            raise ValidationError("Query vector is empty")
        dim = len(query_vector)
        hits: list[SearchHit] = []
        skipped = 0
        for context in self.store.all_chunks_with_context(owner_id=owner_id):
            if len(context.chunk.vector) != dim:
                skipped += 1
                continue
            hits.append(SearchHit(context=context, score=cosine_similarity(query_vector, context.chunk.vector)))
        if skipped:
            logger.warning("Skipped %s chunks whose dimension differs from the query (dim=%s)", skipped, dim)
        hits.sort(
            key=lambda hit: (-hit.score, hit.context.embedding.seq, hit.context.chunk.sequence_index)
        )
        return hits[:top_k]


def _dot(a: Sequence[float], b: Sequence[float]) -> float:
    return sum(x * y for x, y in zip(a, b))


__all__ = ["SearchHit", "SimilaritySearchEngine", "cosine_similarity"]
