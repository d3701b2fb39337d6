"""Pydantic DTOs exposed via API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class SaveContentRequest(BaseModel):
    content_type: Literal["page", "selection", "youtube"]
    content: str | dict[str, Any] = Field(description="Plain text, or the structured payload for the content type")
    title: str = ""
    url: str = ""
    site_name: str | None = None
    tags: list[str] = Field(default_factory=list)
    notes: str | None = None
    saved_at: datetime | None = None


class SaveContentResponse(BaseModel):
    content_id: str
    indexing: Literal["queued", "deferred"]


class DeleteContentResponse(BaseModel):
    content_id: str
    deleted: bool
    embedding_removed: bool


class IndexResponse(BaseModel):
    saved_content_id: str
    embedding_id: str
    chunk_count: int
    dimensions: int
    text_length: int


class ChunkSummary(BaseModel):
    chunk_id: str
    sequence_index: int
    start_char: int
    end_char: int
    length: int


class EmbeddingResponse(BaseModel):
    embedding_id: str
    saved_content_id: str
    dimensions: int
    chunk_count: int
    created_at: datetime
    chunks: list[ChunkSummary]


class QueryRequest(BaseModel):
    query: str = Field(min_length=1)
    k: int | None = Field(default=None, ge=1, le=50)
    synthesize_answer: bool = False


class QueryResultItem(BaseModel):
    content_id: str
    chunk_id: str
    title: str
    url: str
    site_name: str | None
    content_type: str
    score: float
    snippet: str


class QueryResponse(BaseModel):
    results: list[QueryResultItem]
    answer: str | None = None


class StatsResponse(BaseModel):
    contents: int
    embeddings: int
    chunks: int
    queue_depth: int
    embedding_backend: str


__all__ = [
    "SaveContentRequest",
    "SaveContentResponse",
    "DeleteContentResponse",
    "IndexResponse",
    "ChunkSummary",
    "EmbeddingResponse",
    "QueryRequest",
    "QueryResponse",
    "QueryResultItem",
    "StatsResponse",
]
