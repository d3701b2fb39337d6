"""Index pipeline orchestration."""

from __future__ import annotations

import time
from typing import Sequence

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from semantic_recall.core.config import Settings
from semantic_recall.core.errors import TRANSIENT_PROVIDER_ERRORS
from semantic_recall.core.logging import get_logger
from semantic_recall.core.metrics import INDEX_DURATION, INDEX_SIZE
from semantic_recall.db.repositories import SavedContentRepository
from semantic_recall.ingest.chunker import TextChunk, iter_chunks
from semantic_recall.ingest.embeddings import Embedder
from semantic_recall.ingest.extractors import ExtractorRegistry
from semantic_recall.ingest.types import ChunkInput, IndexResult
from semantic_recall.retrieval.vector_store import VectorStore

logger = get_logger(__name__)


class IndexPipeline:
    """Coordinate extraction, chunking, embeddings, and persistence for saved content."""

    def __init__(
        self,
        contents: SavedContentRepository,
        store: VectorStore,
        embedder: Embedder,
        settings: Settings,
        extractors: ExtractorRegistry | None = None,
    ) -> None:
        self.contents = contents
        self.store = store
        self.embedder = embedder
        self.settings = settings
        self.extractors = extractors or ExtractorRegistry()

    def index(self, saved_content_id: str, timeout: float | None = None) -> IndexResult:
        """Build and store the embedding for one piece of saved content.

        Nothing is written unless every embedding call succeeds, so a failed
        run leaves any previous embedding in place. Re-running replaces it.
        """
        start_time = time.perf_counter()
        content = self.contents.get(saved_content_id)
        text = self.extractors.extract(content.content)
        chunks = list(
            iter_chunks(text, chunk_size=self.settings.chunk_size, overlap=self.settings.chunk_overlap)
        )
        if chunks:
            vectors = self._embed_with_retry([text, *(chunk.text for chunk in chunks)], timeout)
            document_vector, chunk_vectors = vectors[0], vectors[1:]
        else:
            document_vector, chunk_vectors = [], []

        embedding = self.store.upsert_embedding(
            saved_content_id,
            document_vector,
            len(document_vector),
            _chunk_inputs(chunks, chunk_vectors),
        )
        duration = time.perf_counter() - start_time
        INDEX_DURATION.observe(duration)
        INDEX_SIZE.set(self.store.count_chunks())
        logger.info(
            "Indexed %s into %s chunks in %.3fs",
            saved_content_id,
            len(chunks),
            duration,
            extra={"ctx_content_type": content.content_type.value, "ctx_text_length": len(text)},
        )
        return IndexResult(
            saved_content_id=saved_content_id,
            embedding_id=embedding.id,
            chunk_count=len(embedding.chunks),
            dimensions=embedding.dimensions,
            text_length=len(text),
        )

    def remove(self, saved_content_id: str) -> bool:
        removed = self.store.delete_embedding(saved_content_id)
        if removed:
            INDEX_SIZE.set(self.store.count_chunks())
        return removed

    def _embed_with_retry(self, texts: Sequence[str], timeout: float | None) -> list[list[float]]:
        timeout = timeout if timeout is not None else self.settings.provider_timeout
        retrying = Retrying(
            retry=retry_if_exception_type(TRANSIENT_PROVIDER_ERRORS),
            stop=stop_after_attempt(self.settings.index_retry_attempts),
            wait=wait_exponential(multiplier=self.settings.index_retry_backoff),
            before_sleep=lambda retry_state: logger.warning(
                "Embedding attempt %s failed: %s",
                retry_state.attempt_number,
                retry_state.outcome.exception() if retry_state.outcome else None,
            ),
            reraise=True,
        )
        return retrying(self.embedder.embed_batch, texts, timeout=timeout)


def _chunk_inputs(chunks: Sequence[TextChunk], vectors: Sequence[Sequence[float]]) -> list[ChunkInput]:
    return [
        ChunkInput(text=chunk.text, vector=vector, start_char=chunk.start_char, end_char=chunk.end_char)
        for chunk, vector in zip(chunks, vectors)
    ]


__all__ = ["IndexPipeline"]
