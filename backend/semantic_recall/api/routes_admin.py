"""Administrative routes for Semantic Recall."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from semantic_recall.api.dependencies import (
    get_app_settings,
    get_content_repository,
    get_vector_store,
    get_worker_pool,
)
from semantic_recall.core.config import Settings
from semantic_recall.core.metrics import metrics_response
from semantic_recall.db.repositories import SavedContentRepository
from semantic_recall.ingest.worker import IndexWorkerPool
from semantic_recall.models.dto import StatsResponse
from semantic_recall.retrieval.vector_store import VectorStore

router = APIRouter()


@router.get("/health", summary="Liveness check")
async def health() -> dict[str, bool]:
    return {"ok": True}


@router.get("/metrics", summary="Prometheus metrics")
async def get_metrics():
    return metrics_response()


@router.get("/stats", response_model=StatsResponse, summary="Corpus and queue statistics")
def get_stats(
    settings: Settings = Depends(get_app_settings),
    contents: SavedContentRepository = Depends(get_content_repository),
    store: VectorStore = Depends(get_vector_store),
    workers: IndexWorkerPool = Depends(get_worker_pool),
) -> StatsResponse:
    return StatsResponse(
        contents=contents.count(),
        embeddings=store.count_embeddings(),
        chunks=store.count_chunks(),
        queue_depth=workers.pending,
        embedding_backend=settings.embedding_backend,
    )


__all__ = ["router"]
