"""Saved-content persistence used at the ingestion boundary."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any, Sequence

import orjson

from semantic_recall.core.errors import NotFoundError, ValidationError
from semantic_recall.db.sqlite import SQLiteDatabase
from semantic_recall.ingest.types import ContentPayload, ContentType, parse_payload
from semantic_recall.models.entities import SavedContent
from semantic_recall.utils.ids import CONTENT_PREFIX, is_valid_id, new_id
from semantic_recall.utils.time import from_ms, now_ms, to_ms

_COLUMNS = "id, owner_id, title, url, site_name, content_type, content_json, tags_json, notes, saved_at"


class SavedContentRepository:
    """Reads and writes the ``saved_content`` relation.

    Deleting a row cascades to its embedding and chunks through the schema's
    foreign keys.
    """

    def __init__(self, db: SQLiteDatabase) -> None:
        self.db = db

    def create(
        self,
        owner_id: str,
        content_type: ContentType | str,
        content: Any,
        title: str = "",
        url: str = "",
        site_name: str | None = None,
        tags: Sequence[str] | None = None,
        notes: str | None = None,
        saved_at: datetime | None = None,
    ) -> SavedContent:
        if not is_valid_id(owner_id):
            raise ValidationError("owner_id is required")
        payload = parse_payload(content_type, content)
        content_id = new_id(CONTENT_PREFIX)
        now = now_ms()
        saved_ms = to_ms(saved_at) if saved_at is not None else now
        with self.db.transaction() as cursor:
            cursor.execute(
                f"""
                INSERT INTO saved_content ({_COLUMNS}, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    content_id,
                    owner_id,
                    title,
                    url,
                    site_name,
                    payload.content_type.value,
                    _dump_payload(payload),
                    orjson.dumps(list(tags or [])).decode("utf-8"),
                    notes,
                    saved_ms,
                    now,
                ],
            )
        return self.get(content_id)

    def get(self, content_id: str) -> SavedContent:
        if not is_valid_id(content_id):
            raise ValidationError("A content id is required")
        row = self.db.execute(f"SELECT {_COLUMNS} FROM saved_content WHERE id = ?", [content_id]).fetchone()
        if row is None:
            raise NotFoundError(f"Content {content_id} not found")
        return _row_to_content(row)

    def get_owned(self, content_id: str, owner_id: str) -> SavedContent:
        """Return the content only if ``owner_id`` owns it; otherwise NotFoundError."""
        content = self.get(content_id)
        if content.owner_id != owner_id:
            raise NotFoundError(f"Content {content_id} not found")
        return content

    def delete(self, content_id: str) -> bool:
        with self.db.transaction() as cursor:
            cursor.execute("DELETE FROM saved_content WHERE id = ?", [content_id])
            return cursor.rowcount > 0

    def count(self, owner_id: str | None = None) -> int:
        if owner_id is None:
            row = self.db.execute("SELECT COUNT(*) AS count FROM saved_content").fetchone()
        else:
            row = self.db.execute(
                "SELECT COUNT(*) AS count FROM saved_content WHERE owner_id = ?", [owner_id]
            ).fetchone()
        return int(row["count"]) if row else 0


def _dump_payload(payload: ContentPayload) -> str:
    return orjson.dumps(payload.to_dict()).decode("utf-8")


def _row_to_content(row: sqlite3.Row) -> SavedContent:
    content_type = ContentType(row["content_type"])
    return SavedContent(
        id=row["id"],
        owner_id=row["owner_id"],
        title=row["title"],
        url=row["url"],
        site_name=row["site_name"],
        content_type=content_type,
        content=parse_payload(content_type, orjson.loads(row["content_json"])),
        tags=list(orjson.loads(row["tags_json"] or "[]")),
        notes=row["notes"],
        saved_at=from_ms(row["saved_at"]),
    )


__all__ = ["SavedContentRepository"]
