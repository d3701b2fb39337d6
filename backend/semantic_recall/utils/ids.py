"""ID helpers."""

from __future__ import annotations

import uuid

CONTENT_PREFIX = "cnt"
EMBEDDING_PREFIX = "emb"
CHUNK_PREFIX = "chk"


def new_id(prefix: str | None = None) -> str:
    """Generate a random UUID4 string with optional prefix."""
    base = uuid.uuid4().hex
    return f"{prefix}_{base}" if prefix else base


def is_valid_id(value: object) -> bool:
    """Reject empty, non-string, or whitespace-padded identifiers."""
    return isinstance(value, str) and bool(value) and value == value.strip() and len(value) <= 128
