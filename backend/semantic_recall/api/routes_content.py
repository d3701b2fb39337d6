"""Saved content API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from semantic_recall.api.dependencies import (
    get_content_repository,
    get_current_user,
    get_index_pipeline,
    get_vector_store,
    get_worker_pool,
)
from semantic_recall.core.logging import get_logger
from semantic_recall.db.repositories import SavedContentRepository
from semantic_recall.ingest.pipeline import IndexPipeline
from semantic_recall.ingest.worker import IndexWorkerPool
from semantic_recall.models.dto import (
    ChunkSummary,
    DeleteContentResponse,
    EmbeddingResponse,
    IndexResponse,
    SaveContentRequest,
    SaveContentResponse,
)
from semantic_recall.retrieval.vector_store import VectorStore

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=SaveContentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save content and queue it for indexing",
)
def save_content(
    request: SaveContentRequest,
    user_id: str = Depends(get_current_user),
    contents: SavedContentRepository = Depends(get_content_repository),
    workers: IndexWorkerPool = Depends(get_worker_pool),
) -> SaveContentResponse:
    content = contents.create(
        owner_id=user_id,
        content_type=request.content_type,
        content=request.content,
        title=request.title,
        url=request.url,
        site_name=request.site_name,
        tags=request.tags,
        notes=request.notes,
        saved_at=request.saved_at,
    )
    queued = workers.submit_index(content.id)
    if not queued:
        logger.warning("Indexing of %s deferred; run POST /content/%s/index later", content.id, content.id)
    return SaveContentResponse(content_id=content.id, indexing="queued" if queued else "deferred")


@router.delete("/{content_id}", response_model=DeleteContentResponse, summary="Delete content and its embedding")
def delete_content(
    content_id: str,
    user_id: str = Depends(get_current_user),
    contents: SavedContentRepository = Depends(get_content_repository),
    pipeline: IndexPipeline = Depends(get_index_pipeline),
) -> DeleteContentResponse:
    contents.get_owned(content_id, user_id)
    embedding_removed = pipeline.remove(content_id)
    deleted = contents.delete(content_id)
    return DeleteContentResponse(content_id=content_id, deleted=deleted, embedding_removed=embedding_removed)


@router.post("/{content_id}/index", response_model=IndexResponse, summary="Index content synchronously")
def index_content(
    content_id: str,
    user_id: str = Depends(get_current_user),
    contents: SavedContentRepository = Depends(get_content_repository),
    pipeline: IndexPipeline = Depends(get_index_pipeline),
) -> IndexResponse:
    contents.get_owned(content_id, user_id)
    result = pipeline.index(content_id)
    return IndexResponse(**result.to_dict())


@router.get("/{content_id}/embedding", response_model=EmbeddingResponse, summary="Describe the stored embedding")
def get_embedding(
    content_id: str,
    user_id: str = Depends(get_current_user),
    contents: SavedContentRepository = Depends(get_content_repository),
    store: VectorStore = Depends(get_vector_store),
) -> EmbeddingResponse:
    contents.get_owned(content_id, user_id)
    embedding = store.get_embedding(content_id)
    return EmbeddingResponse(
        embedding_id=embedding.id,
        saved_content_id=embedding.saved_content_id,
        dimensions=embedding.dimensions,
        chunk_count=len(embedding.chunks),
        created_at=embedding.created_at,
        chunks=[
            ChunkSummary(
                chunk_id=chunk.id,
                sequence_index=chunk.sequence_index,
                start_char=chunk.start_char,
                end_char=chunk.end_char,
                length=len(chunk.text),
            )
            for chunk in embedding.chunks
        ],
    )


__all__ = ["router"]
