"""Provider client interface shared by the embedder and the answer synthesizer."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class ProviderClient(Protocol):
    """Remote (or local) model provider.

    Implementations raise ``ProviderUnavailable`` for network errors and
    timeouts, ``RateLimited`` when throttled, and ``InvalidInput`` for
    requests the provider rejects as malformed.
    """

    name: str

    def embed(self, texts: Sequence[str], timeout: float | None = None) -> list[list[float]]:
        ...

    def complete(self, system: str, prompt: str, timeout: float | None = None) -> str:
        ...


__all__ = ["ProviderClient"]
