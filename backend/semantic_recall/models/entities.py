"""Internal dataclasses representing persisted entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from semantic_recall.ingest.types import ContentPayload, ContentType


@dataclass(slots=True)
class SavedContent:
    id: str
    owner_id: str
    title: str
    url: str
    site_name: str | None
    content_type: ContentType
    content: ContentPayload
    tags: list[str]
    notes: str | None
    saved_at: datetime


@dataclass(slots=True, frozen=True)
class ContentSummary:
    """The SavedContent fields search results are decorated with."""

    id: str
    owner_id: str
    title: str
    url: str
    site_name: str | None
    content_type: ContentType
    saved_at: datetime


@dataclass(slots=True)
class ContentChunk:
    id: str
    content_embedding_id: str
    text: str
    vector: list[float]
    sequence_index: int
    start_char: int
    end_char: int


@dataclass(slots=True)
class ContentEmbedding:
    id: str
    saved_content_id: str
    vector: list[float]
    dimensions: int
    seq: int
    created_at: datetime
    chunks: list[ContentChunk] = field(default_factory=list)


@dataclass(slots=True)
class ChunkContext:
    """A stored chunk together with its parent embedding and content summary."""

    chunk: ContentChunk
    embedding: ContentEmbedding
    content: ContentSummary


__all__ = [
    "SavedContent",
    "ContentSummary",
    "ContentChunk",
    "ContentEmbedding",
    "ChunkContext",
]
