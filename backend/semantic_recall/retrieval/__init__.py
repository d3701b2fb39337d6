"""Retrieval orchestration components."""

from .vector_store import VectorStore
from .similarity import SearchHit, SimilaritySearchEngine, cosine_similarity
from .answer import AnswerSynthesizer
from .search import QueryOutcome, QueryResult, QueryService

__all__ = [
    "VectorStore",
    "SearchHit",
    "SimilaritySearchEngine",
    "cosine_similarity",
    "AnswerSynthesizer",
    "QueryOutcome",
    "QueryResult",
    "QueryService",
]
