"""Chunking utilities."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Sequence, Union

from semantic_recall.core.errors import ValidationError

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_OVERLAP = 200

# ``None`` is the last-resort separator: split into single characters.
Separator = Union[re.Pattern[str], None]

PARAGRAPH_BREAK = re.compile(r"\n\n")
LINE_BREAK = re.compile(r"\n")
SENTENCE_END = re.compile(r"(?<=[.!?]) ")
SPACE = re.compile(r" ")

DEFAULT_SEPARATORS: tuple[Separator, ...] = (PARAGRAPH_BREAK, LINE_BREAK, SENTENCE_END, SPACE, None)


@dataclass(slots=True)
class Segment:
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(slots=True, frozen=True)
class TextChunk:
    index: int
    text: str
    start_char: int
    end_char: int


def compile_separators(separators: Sequence[str | re.Pattern[str] | None]) -> tuple[Separator, ...]:
    """Turn literal separator strings into patterns; ``""`` means character-level."""
    compiled: list[Separator] = []
    for separator in separators:
        if separator is None or separator == "":
            compiled.append(None)
        elif isinstance(separator, re.Pattern):
            compiled.append(separator)
        else:
            compiled.append(re.compile(re.escape(separator)))
    return tuple(compiled)


def iter_chunks(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
    separators: Sequence[Separator] = DEFAULT_SEPARATORS,
) -> Iterator[TextChunk]:
    """Yield overlapping chunks of ``text`` with their offsets.

    Units produced by the recursive separator split are packed greedily. When
    a chunk is full, the next one starts with the trailing ``overlap``
    characters of the previous chunk, shortened when needed so that the carry
    plus the incoming unit still fits in ``chunk_size``.
    """
    _validate(chunk_size, overlap)
    if not text:
        return

    index = 0
    start = end = 0
    for unit in _split_units(text, Segment(0, len(text)), tuple(separators), chunk_size):
        if end > start and (end - start) + unit.length > chunk_size:
            yield TextChunk(index=index, text=text[start:end], start_char=start, end_char=end)
            index += 1
            carry = min(overlap, end - start, max(0, chunk_size - unit.length))
            start = end - carry
        end = unit.end
    if end > start:
        yield TextChunk(index=index, text=text[start:end], start_char=start, end_char=end)


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
    separators: Sequence[Separator] = DEFAULT_SEPARATORS,
) -> list[str]:
    """Split text into overlapping chunks of at most ``chunk_size`` characters."""
    return [chunk.text for chunk in iter_chunks(text, chunk_size, overlap, separators)]


def merge_chunks(chunks: Sequence[TextChunk]) -> str:
    """Rebuild the source text by dropping each chunk's overlapping prefix."""
    parts: list[str] = []
    covered = 0
    for chunk in sorted(chunks, key=lambda item: item.index):
        skip = max(0, covered - chunk.start_char)
        parts.append(chunk.text[skip:])
        covered = max(covered, chunk.end_char)
    return "".join(parts)


def _validate(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise ValidationError("chunk_size must be positive")
    if not 0 < overlap < chunk_size:
        raise ValidationError("overlap must be positive and smaller than chunk_size")


def _split_units(
    text: str,
    segment: Segment,
    separators: tuple[Separator, ...],
    chunk_size: int,
) -> Iterator[Segment]:
    if not separators:
        # Nothing finer to try: oversized atomic unit, emitted verbatim.
        yield segment
        return
    separator, finer = separators[0], separators[1:]
    for piece in _split_on(text, segment, separator):
        if piece.length <= chunk_size:
            yield piece
        else:
            yield from _split_units(text, piece, finer, chunk_size)


def _split_on(text: str, segment: Segment, separator: Separator) -> Iterator[Segment]:
    """Split a segment after each separator match so the pieces tile the segment."""
    if separator is None:
        for position in range(segment.start, segment.end):
            yield Segment(position, position + 1)
        return
    cursor = segment.start
    for match in separator.finditer(text, segment.start, segment.end):
        if match.end() <= cursor:
            continue
        yield Segment(cursor, match.end())
        cursor = match.end()
    if cursor < segment.end:
        yield Segment(cursor, segment.end)


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_OVERLAP",
    "DEFAULT_SEPARATORS",
    "TextChunk",
    "chunk_text",
    "compile_separators",
    "iter_chunks",
    "merge_chunks",
]
