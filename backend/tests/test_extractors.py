"""Tests for payload parsing and text extraction."""

import pytest

from semantic_recall.core.errors import ValidationError
from semantic_recall.ingest.extractors import ExtractorRegistry, html_to_text
from semantic_recall.ingest.types import (
    ContentType,
    PageContent,
    SelectionContent,
    YouTubeContent,
    parse_payload,
)


@pytest.fixture
def registry() -> ExtractorRegistry:
    return ExtractorRegistry()


def test_bare_string_payloads() -> None:
    assert parse_payload("page", "hello") == PageContent(text="hello")
    assert parse_payload(ContentType.SELECTION, "hi") == SelectionContent(text="hi")
    youtube = parse_payload("youtube", "spoken words")
    assert isinstance(youtube, YouTubeContent)
    assert youtube.transcript[0].text == "spoken words"


def test_wrong_shapes_are_rejected() -> None:
    with pytest.raises(ValidationError):
        parse_payload("podcast", "text")
    with pytest.raises(ValidationError):
        parse_payload("page", ["not", "an", "object"])
    with pytest.raises(ValidationError):
        parse_payload("page", {"text": 42})
    with pytest.raises(ValidationError):
        parse_payload("youtube", {"transcript": [{"start": 1.0}]})


def test_page_prefers_text_then_html_then_description(registry: ExtractorRegistry) -> None:
    assert registry.extract(PageContent(text="  Plain   text ", html="<p>ignored</p>")) == "Plain text"
    html = "<html><head><style>p {}</style><script>alert(1)</script></head><body><p>Hello <b>world</b></p></body></html>"
    from_html = registry.extract(PageContent(html=html))
    assert "Hello" in from_html and "world" in from_html
    assert "alert" not in from_html and "p {}" not in from_html
    assert registry.extract(PageContent(description="Only a description")) == "Only a description"
    assert registry.extract(PageContent()) == ""


def test_youtube_joins_segments(registry: ExtractorRegistry) -> None:
    payload = parse_payload(
        "youtube",
        {"transcript": [{"text": "hello", "start": 0, "duration": 1.5}, "there", {"text": "  friend "}]},
    )
    assert registry.extract(payload) == "hello there friend"
    assert registry.extract(YouTubeContent(description="fallback")) == "fallback"


def test_selection_normalizes_whitespace(registry: ExtractorRegistry) -> None:
    text = "  line one \t here\n\n\n\nline two  "
    assert registry.extract(SelectionContent(text=text)) == "line one here\n\nline two"


def test_html_to_text_drops_scripts() -> None:
    assert html_to_text("<div><script>var x;</script>kept</div>") == "kept"
