"""Text extraction for each saved-content payload variant."""

from __future__ import annotations

from bs4 import BeautifulSoup

from semantic_recall.ingest.types import (
    ContentPayload,
    ContentType,
    PageContent,
    SelectionContent,
    YouTubeContent,
)
from semantic_recall.utils.text import normalize, normalize_block

_DROP_TAGS = ("script", "style", "noscript", "template", "svg")


class BaseExtractor:
    """Common extractor interface."""

    content_type: ContentType

    def can_extract(self, payload: ContentPayload) -> bool:
        return payload.content_type is self.content_type

    def extract(self, payload: ContentPayload) -> str:  # pragma: no cover - interface
        raise NotImplementedError


class PageExtractor(BaseExtractor):
    content_type = ContentType.PAGE

    def extract(self, payload: PageContent) -> str:
        if payload.text and payload.text.strip():
            return normalize_block(payload.text)
        if payload.html and payload.html.strip():
            return html_to_text(payload.html)
        return normalize_block(payload.description or "")


class SelectionExtractor(BaseExtractor):
    content_type = ContentType.SELECTION

    def extract(self, payload: SelectionContent) -> str:
        return normalize_block(payload.text)


class YouTubeExtractor(BaseExtractor):
    content_type = ContentType.YOUTUBE

    def extract(self, payload: YouTubeContent) -> str:
        spoken = " ".join(normalize(segment.text) for segment in payload.transcript if segment.text.strip())
        if spoken:
            return spoken
        return normalize_block(payload.description or "")


class ExtractorRegistry:
    """Registry that selects the extractor for a payload variant."""

    def __init__(self) -> None:
        self._extractors: list[BaseExtractor] = [
            PageExtractor(),
            SelectionExtractor(),
            YouTubeExtractor(),
        ]

    def register(self, extractor: BaseExtractor) -> None:
        self._extractors.insert(0, extractor)

    def for_payload(self, payload: ContentPayload) -> BaseExtractor | None:
        for extractor in self._extractors:
            if extractor.can_extract(payload):
                return extractor
        return None

    def extract(self, payload: ContentPayload) -> str:
        extractor = self.for_payload(payload)
        if extractor is None:
            raise ValueError(f"No extractor registered for {type(payload).__name__}")
        return extractor.extract(payload)


def html_to_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_DROP_TAGS):
        tag.decompose()
    return normalize_block(soup.get_text(separator="\n"))


__all__ = [
    "BaseExtractor",
    "PageExtractor",
    "SelectionExtractor",
    "YouTubeExtractor",
    "ExtractorRegistry",
    "html_to_text",
]
