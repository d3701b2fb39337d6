"""Deterministic hashed embeddings for offline use."""

from __future__ import annotations

import hashlib
import math
import re
from typing import Sequence

from semantic_recall.core.errors import ProviderUnavailable

_TOKEN_RE = re.compile(r"\w+")


class HashedEmbeddingClient:
    """Bag-of-words feature hashing; no network, no language model."""

    name = "hashed"

    def __init__(self, dim: int = 384) -> None:
        self._dim = dim

    @property
    def dim(self) -> int:
        return self._dim

    def embed(self, texts: Sequence[str], timeout: float | None = None) -> list[list[float]]:
        vectors: list[list[float]] = []
        for text in texts:
            vector = [0.0] * self._dim
            for token in _tokenize(text):
                vector[_hash_token(token, self._dim)] += 1.0
            _normalize(vector)
            vectors.append(vector)
        return vectors

    def complete(self, system: str, prompt: str, timeout: float | None = None) -> str:
        raise ProviderUnavailable("The hashed backend has no language model for answer synthesis")


def _tokenize(text: str) -> list[str]:
    return _TOKEN_RE.findall(text.lower())


def _hash_token(token: str, dim: int) -> int:
    digest = hashlib.blake2b(token.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big") % dim


def _normalize(vector: list[float]) -> None:
    norm = math.sqrt(sum(value * value for value in vector))
    if norm == 0:
        return
    inv = 1.0 / norm
    for idx, value in enumerate(vector):
        vector[idx] = value * inv


__all__ = ["HashedEmbeddingClient"]
