"""Persistence and lifecycle of content embeddings and their chunks."""

from __future__ import annotations

import sqlite3
from array import array
from typing import Iterator, Sequence

from semantic_recall.core.errors import NotFoundError, ValidationError
from semantic_recall.core.logging import get_logger
from semantic_recall.db.sqlite import SQLiteDatabase, iter_rows
from semantic_recall.ingest.types import ChunkInput, ContentType
from semantic_recall.models.entities import ChunkContext, ContentChunk, ContentEmbedding, ContentSummary
from semantic_recall.utils.ids import CHUNK_PREFIX, EMBEDDING_PREFIX, is_valid_id, new_id
from semantic_recall.utils.locks import KeyedLock
from semantic_recall.utils.time import from_ms, now_ms

logger = get_logger(__name__)

_CONTEXT_SQL = """
SELECT
  ch.id AS chunk_id,
  ch.text AS chunk_text,
  ch.vector AS chunk_vector,
  ch.sequence_index,
  ch.start_char,
  ch.end_char,
  emb.id AS embedding_id,
  emb.seq AS embedding_seq,
  emb.vector AS embedding_vector,
  emb.dimensions,
  emb.created_at AS embedding_created_at,
  sc.id AS content_id,
  sc.owner_id,
  sc.title,
  sc.url,
  sc.site_name,
  sc.content_type,
  sc.saved_at
FROM content_chunks ch
JOIN content_embeddings emb ON emb.id = ch.content_embedding_id
JOIN saved_content sc ON sc.id = emb.saved_content_id
{where}
ORDER BY emb.seq ASC, ch.sequence_index ASC
"""


def encode_vector(vector: Sequence[float]) -> bytes:
    return array("f", vector).tobytes()


def decode_vector(blob: bytes) -> list[float]:
    floats = array("f")
    floats.frombytes(blob)
    return list(floats)


class VectorStore:
    """SQLite-backed store keeping exactly one embedding per saved content."""

    def __init__(self, db: SQLiteDatabase) -> None:
        self.db = db
        self._locks = KeyedLock()

    def upsert_embedding(
        self,
        saved_content_id: str,
        vector: Sequence[float],
        dimensions: int,
        chunks: Sequence[ChunkInput],
    ) -> ContentEmbedding:
        """Replace the embedding for ``saved_content_id`` with a new one and its chunks.

        Old chunks are deleted before the old embedding, and the new embedding
        is inserted before its chunks, inside one transaction. Concurrent calls
        for the same id are serialized.
        """
        _require_id(saved_content_id)
        if dimensions != len(vector):
            raise ValidationError(f"dimensions={dimensions} does not match vector length {len(vector)}")
        for position, chunk in enumerate(chunks):
            if len(chunk.vector) != dimensions:
                raise ValidationError(
                    f"Chunk #{position} has {len(chunk.vector)} dimensions, expected {dimensions}"
                )

        embedding_id = new_id(EMBEDDING_PREFIX)
        created_at = now_ms()
        vector_blob = encode_vector(vector)
        chunk_rows = [
            (
                new_id(CHUNK_PREFIX),
                embedding_id,
                sequence_index,
                chunk.text,
                encode_vector(chunk.vector),
                chunk.start_char,
                chunk.end_char,
            )
            for sequence_index, chunk in enumerate(chunks)
        ]
        with self._locks.hold(saved_content_id):
            with self.db.transaction() as cursor:
                existing = cursor.execute(
                    "SELECT id FROM content_embeddings WHERE saved_content_id = ?",
                    [saved_content_id],
                ).fetchone()
                if existing is not None:
                    cursor.execute(
                        "DELETE FROM content_chunks WHERE content_embedding_id = ?", [existing["id"]]
                    )
                    cursor.execute("DELETE FROM content_embeddings WHERE id = ?", [existing["id"]])
                cursor.execute(
                    """
                    INSERT INTO content_embeddings (id, saved_content_id, vector, dimensions, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    [embedding_id, saved_content_id, vector_blob, dimensions, created_at],
                )
                # seq is the rowid alias
                seq = cursor.lastrowid
                cursor.executemany(
                    """
                    INSERT INTO content_chunks (
                      id, content_embedding_id, sequence_index, text, vector, start_char, end_char
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    chunk_rows,
                )
        logger.info(
            "Stored embedding %s for %s (%s chunks, dim=%s, replaced=%s)",
            embedding_id,
            saved_content_id,
            len(chunk_rows),
            dimensions,
            existing is not None,
        )
        # Returned from the written values, never re-read outside the lock.
        return ContentEmbedding(
            id=embedding_id,
            saved_content_id=saved_content_id,
            vector=decode_vector(vector_blob),
            dimensions=dimensions,
            seq=seq,
            created_at=from_ms(created_at),
            chunks=[
                ContentChunk(
                    id=chunk_id,
                    content_embedding_id=parent_id,
                    text=text,
                    vector=decode_vector(blob),
                    sequence_index=sequence_index,
                    start_char=start_char,
                    end_char=end_char,
                )
                for chunk_id, parent_id, sequence_index, text, blob, start_char, end_char in chunk_rows
            ],
        )

    def get_embedding(self, saved_content_id: str) -> ContentEmbedding:
        """Load an embedding and its ordered chunks from a single statement."""
        _require_id(saved_content_id)
        rows = self.db.query(
            """
            SELECT
              emb.id, emb.saved_content_id, emb.vector, emb.dimensions, emb.seq, emb.created_at,
              ch.id AS chunk_id, ch.text AS chunk_text, ch.vector AS chunk_vector,
              ch.sequence_index, ch.start_char, ch.end_char
            FROM content_embeddings emb
            LEFT JOIN content_chunks ch ON ch.content_embedding_id = emb.id
            WHERE emb.saved_content_id = ?
            ORDER BY ch.sequence_index ASC
            """,
            [saved_content_id],
        )
        if not rows:
            raise NotFoundError(f"No embedding for content {saved_content_id}")
        embedding = _row_to_embedding(rows[0])
        embedding.chunks = [
            ContentChunk(
                id=row["chunk_id"],
                content_embedding_id=embedding.id,
                text=row["chunk_text"],
                vector=decode_vector(row["chunk_vector"]),
                sequence_index=row["sequence_index"],
                start_char=row["start_char"],
                end_char=row["end_char"],
            )
            for row in rows
            if row["chunk_id"] is not None
        ]
        return embedding

    def delete_embedding(self, saved_content_id: str) -> bool:
        """Remove chunks then the embedding; returns False when there was nothing to delete."""
        _require_id(saved_content_id)
        with self._locks.hold(saved_content_id):
            with self.db.transaction() as cursor:
                existing = cursor.execute(
                    "SELECT id FROM content_embeddings WHERE saved_content_id = ?",
                    [saved_content_id],
                ).fetchone()
                if existing is None:
                    return False
                cursor.execute("DELETE FROM content_chunks WHERE content_embedding_id = ?", [existing["id"]])
                cursor.execute("DELETE FROM content_embeddings WHERE id = ?", [existing["id"]])
        logger.info("Deleted embedding for %s", saved_content_id)
        return True

    def all_chunks_with_context(self, owner_id: str | None = None) -> Iterator[ChunkContext]:
        """Lazily yield every committed chunk with its parent and content summary.

        Ordered by parent insertion order, then ``sequence_index``. The rows
        come from a single statement, so a concurrent replace is either fully
        visible or not at all.
        """
        if owner_id is None:
            cursor = self.db.execute(_CONTEXT_SQL.format(where=""))
        else:
            cursor = self.db.execute(_CONTEXT_SQL.format(where="WHERE sc.owner_id = ?"), [owner_id])
        embedding: ContentEmbedding | None = None
        summary: ContentSummary | None = None
        for row in iter_rows(cursor):
            if embedding is None or embedding.id != row["embedding_id"]:
                embedding = ContentEmbedding(
                    id=row["embedding_id"],
                    saved_content_id=row["content_id"],
                    vector=decode_vector(row["embedding_vector"]),
                    dimensions=row["dimensions"],
                    seq=row["embedding_seq"],
                    created_at=from_ms(row["embedding_created_at"]),
                )
                summary = _row_to_summary(row)
            yield ChunkContext(
                chunk=ContentChunk(
                    id=row["chunk_id"],
                    content_embedding_id=row["embedding_id"],
                    text=row["chunk_text"],
                    vector=decode_vector(row["chunk_vector"]),
                    sequence_index=row["sequence_index"],
                    start_char=row["start_char"],
                    end_char=row["end_char"],
                ),
                embedding=embedding,
                content=summary,
            )

    def count_chunks(self) -> int:
        row = self.db.execute("SELECT COUNT(*) AS count FROM content_chunks").fetchone()
        return int(row["count"]) if row else 0

    def count_embeddings(self) -> int:
        row = self.db.execute("SELECT COUNT(*) AS count FROM content_embeddings").fetchone()
        return int(row["count"]) if row else 0


def _require_id(saved_content_id: str) -> None:
    if not is_valid_id(saved_content_id):
        raise ValidationError("A saved content id is required")


def _row_to_embedding(row: sqlite3.Row) -> ContentEmbedding:
    return ContentEmbedding(
        id=row["id"],
        saved_content_id=row["saved_content_id"],
        vector=decode_vector(row["vector"]),
        dimensions=row["dimensions"],
        seq=row["seq"],
        created_at=from_ms(row["created_at"]),
    )


def _row_to_summary(row: sqlite3.Row) -> ContentSummary:
    return ContentSummary(
        id=row["content_id"],
        owner_id=row["owner_id"],
        title=row["title"],
        url=row["url"],
        site_name=row["site_name"],
        content_type=ContentType(row["content_type"]),
        saved_at=from_ms(row["saved_at"]),
    )


__all__ = ["VectorStore", "encode_vector", "decode_vector"]
