"""Model provider clients."""

from __future__ import annotations

from semantic_recall.core.config import Settings
from semantic_recall.core.logging import get_logger

from .base import ProviderClient
from .hashed import HashedEmbeddingClient
from .openai_compat import OpenAICompatibleClient

logger = get_logger(__name__)


def build_provider_client(settings: Settings) -> ProviderClient:
    """Construct the provider client selected by ``embedding_backend``."""
    if settings.embedding_backend == "hashed":
        logger.info("Using hashed offline embeddings (dim=%s)", settings.embedding_dimensions)
        return HashedEmbeddingClient(dim=settings.embedding_dimensions)
    if not settings.provider_api_key:
        raise ValueError(
            "provider_api_key is not set; export RECALL_PROVIDER_API_KEY or use embedding_backend=hashed"
        )
    logger.info("Using provider at %s (model=%s)", settings.provider_base_url, settings.embedding_model)
    return OpenAICompatibleClient(
        api_key=settings.provider_api_key,
        base_url=settings.provider_base_url,
        embedding_model=settings.embedding_model,
        chat_model=settings.chat_model,
        timeout=settings.provider_timeout,
        max_tokens=settings.answer_max_tokens,
    )


__all__ = [
    "ProviderClient",
    "HashedEmbeddingClient",
    "OpenAICompatibleClient",
    "build_provider_client",
]
