"""Text processing helpers."""

from __future__ import annotations

import re

WHITESPACE_RE = re.compile(r"\s+")
_INLINE_SPACE_RE = re.compile(r"[ \t\f\v\r]+")
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")

TRUNCATION_MARKER = " [truncated]"
ELLIPSIS = "..."


def normalize(text: str) -> str:
    """Collapse whitespace and strip."""
    return WHITESPACE_RE.sub(" ", text).strip()


def normalize_block(text: str) -> str:
    """Collapse inline whitespace, keep single line breaks and at most one blank line."""
    lines = [_INLINE_SPACE_RE.sub(" ", line).strip() for line in text.replace("\r\n", "\n").split("\n")]
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()


def truncate_with_marker(text: str, max_chars: int, marker: str = TRUNCATION_MARKER) -> str:
    """Cut text to ``max_chars`` characters, ending with ``marker`` when cut."""
    if len(text) <= max_chars:
        return text
    keep = max(0, max_chars - len(marker))
    return text[:keep] + marker


def preview(text: str, limit: int) -> str:
    """Return the first ``limit`` characters, followed by an ellipsis if cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


__all__ = ["normalize", "normalize_block", "truncate_with_marker", "preview", "TRUNCATION_MARKER"]
