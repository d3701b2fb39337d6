"""Common ingestion data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence, Union

from semantic_recall.core.errors import ValidationError


class ContentType(str, Enum):
    PAGE = "page"
    SELECTION = "selection"
    YOUTUBE = "youtube"


@dataclass(slots=True, frozen=True)
class PageContent:
    """A full web page captured by the browser extension."""

    text: str | None = None
    html: str | None = None
    description: str | None = None

    @property
    def content_type(self) -> ContentType:
        return ContentType.PAGE

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "html": self.html, "description": self.description}


@dataclass(slots=True, frozen=True)
class SelectionContent:
    """A user-highlighted selection of text."""

    text: str = ""

    @property
    def content_type(self) -> ContentType:
        return ContentType.SELECTION

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text}


@dataclass(slots=True, frozen=True)
class TranscriptSegment:
    text: str
    start: float | None = None
    duration: float | None = None


@dataclass(slots=True, frozen=True)
class YouTubeContent:
    """A video transcript, with the description as fallback text."""

    transcript: tuple[TranscriptSegment, ...] = ()
    description: str | None = None

    @property
    def content_type(self) -> ContentType:
        return ContentType.YOUTUBE

    def to_dict(self) -> dict[str, Any]:
        return {
            "transcript": [
                {"text": seg.text, "start": seg.start, "duration": seg.duration} for seg in self.transcript
            ],
            "description": self.description,
        }


ContentPayload = Union[PageContent, SelectionContent, YouTubeContent]


def parse_payload(content_type: ContentType | str, raw: Any) -> ContentPayload:
    """Resolve a loosely-shaped JSON payload into its tagged variant."""
    try:
        kind = ContentType(content_type)
    except ValueError as exc:
        raise ValidationError(f"Unsupported content type: {content_type!r}") from exc

    if raw is None:
        raw = {}
    if isinstance(raw, str):
        if kind is ContentType.PAGE:
            return PageContent(text=raw)
        if kind is ContentType.SELECTION:
            return SelectionContent(text=raw)
        return YouTubeContent(transcript=(TranscriptSegment(text=raw),))
    if not isinstance(raw, dict):
        raise ValidationError(f"{kind.value} content must be a string or an object")

    if kind is ContentType.PAGE:
        return PageContent(
            text=_optional_str(raw, "text"),
            html=_optional_str(raw, "html"),
            description=_optional_str(raw, "description"),
        )
    if kind is ContentType.SELECTION:
        return SelectionContent(text=_optional_str(raw, "text") or "")
    return YouTubeContent(
        transcript=_parse_transcript(raw.get("transcript")),
        description=_optional_str(raw, "description"),
    )


def _optional_str(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Field '{key}' must be a string")
    return value


def _parse_transcript(value: Any) -> tuple[TranscriptSegment, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (TranscriptSegment(text=value),)
    if not isinstance(value, list):
        raise ValidationError("Field 'transcript' must be a string or a list of segments")
    segments: list[TranscriptSegment] = []
    for item in value:
        if isinstance(item, str):
            segments.append(TranscriptSegment(text=item))
        elif isinstance(item, dict) and isinstance(item.get("text"), str):
            segments.append(
                TranscriptSegment(
                    text=item["text"],
                    start=_optional_float(item.get("start")),
                    duration=_optional_float(item.get("duration")),
                )
            )
        else:
            raise ValidationError("Transcript segments must be strings or objects with a 'text' field")
    return tuple(segments)


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Expected a number, got {value!r}") from exc


@dataclass(slots=True)
class ChunkInput:
    """Chunk text plus its vector, ready to be stored."""

    text: str
    vector: Sequence[float]
    start_char: int = 0
    end_char: int = 0


@dataclass(slots=True)
class IndexResult:
    """Outcome of indexing one piece of saved content."""

    saved_content_id: str
    embedding_id: str
    chunk_count: int
    dimensions: int
    text_length: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "saved_content_id": self.saved_content_id,
            "embedding_id": self.embedding_id,
            "chunk_count": self.chunk_count,
            "dimensions": self.dimensions,
            "text_length": self.text_length,
        }


__all__ = [
    "ContentType",
    "PageContent",
    "SelectionContent",
    "TranscriptSegment",
    "YouTubeContent",
    "ContentPayload",
    "parse_payload",
    "ChunkInput",
    "IndexResult",
]
