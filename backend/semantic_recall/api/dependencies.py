"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Header, HTTPException

from semantic_recall.core.config import Settings, get_settings
from semantic_recall.db.repositories import SavedContentRepository
from semantic_recall.db.sqlite import SQLiteDatabase
from semantic_recall.ingest.embeddings import Embedder
from semantic_recall.ingest.pipeline import IndexPipeline
from semantic_recall.ingest.worker import IndexWorkerPool
from semantic_recall.providers import ProviderClient, build_provider_client
from semantic_recall.retrieval import (
    AnswerSynthesizer,
    QueryService,
    SimilaritySearchEngine,
    VectorStore,
)
from semantic_recall.utils.ids import is_valid_id

_DB: SQLiteDatabase | None = None
_PROVIDER: ProviderClient | None = None
_STORE: VectorStore | None = None
_PIPELINE: IndexPipeline | None = None
_WORKERS: IndexWorkerPool | None = None
_QUERY_SERVICE: QueryService | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_database() -> SQLiteDatabase:
    global _DB
    if _DB is None:
        settings = get_app_settings()
        db = SQLiteDatabase(settings.db_path)
        db.ensure_schema()
        _DB = db
    return _DB


def get_provider_client() -> ProviderClient:
    global _PROVIDER
    if _PROVIDER is None:
        _PROVIDER = build_provider_client(get_app_settings())
    return _PROVIDER


def get_embedder() -> Embedder:
    settings = get_app_settings()
    return Embedder(
        get_provider_client(),
        batch_size=settings.embedding_batch_size,
        max_input_tokens=settings.embedding_max_input_tokens,
    )


def get_content_repository() -> SavedContentRepository:
    return SavedContentRepository(get_database())


def get_vector_store() -> VectorStore:
    global _STORE
    if _STORE is None:
        _STORE = VectorStore(get_database())
    return _STORE


def get_index_pipeline() -> IndexPipeline:
    global _PIPELINE
    if _PIPELINE is None:
        _PIPELINE = IndexPipeline(
            contents=get_content_repository(),
            store=get_vector_store(),
            embedder=get_embedder(),
            settings=get_app_settings(),
        )
    return _PIPELINE


def get_worker_pool() -> IndexWorkerPool:
    global _WORKERS
    if _WORKERS is None:
        settings = get_app_settings()
        _WORKERS = IndexWorkerPool(
            get_index_pipeline(),
            workers=settings.index_workers,
            queue_size=settings.index_queue_size,
        )
    return _WORKERS


def get_query_service() -> QueryService:
    global _QUERY_SERVICE
    if _QUERY_SERVICE is None:
        _QUERY_SERVICE = QueryService(
            engine=SimilaritySearchEngine(get_vector_store()),
            embedder=get_embedder(),
            synthesizer=AnswerSynthesizer(get_provider_client()),
            settings=get_app_settings(),
        )
    return _QUERY_SERVICE


def get_current_user(x_user_id: str | None = Header(default=None)) -> str:
    """Caller identity from the ``X-User-Id`` header set by the auth proxy."""
    if not x_user_id or not is_valid_id(x_user_id):
        raise HTTPException(status_code=401, detail="Missing or invalid X-User-Id header")
    return x_user_id


def reset_dependencies() -> None:
    """Stop background workers and forget every cached singleton."""
    global _DB, _PROVIDER, _STORE, _PIPELINE, _WORKERS, _QUERY_SERVICE
    if _WORKERS is not None:
        _WORKERS.stop()
    if _DB is not None:
        _DB.close()
    close = getattr(_PROVIDER, "close", None)
    if close is not None:
        close()
    _DB = _PROVIDER = _STORE = _PIPELINE = _WORKERS = _QUERY_SERVICE = None
    get_app_settings.cache_clear()
    get_settings.cache_clear()


__all__ = [
    "get_app_settings",
    "get_database",
    "get_provider_client",
    "get_embedder",
    "get_content_repository",
    "get_vector_store",
    "get_index_pipeline",
    "get_worker_pool",
    "get_query_service",
    "get_current_user",
    "reset_dependencies",
]
