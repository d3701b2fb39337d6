"""Error taxonomy shared by the indexing and retrieval paths."""

from __future__ import annotations


class RecallError(Exception):
    """Base class for all Semantic Recall errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RecallError):
    """Malformed identifier, query, or parameters supplied by the caller."""

    status_code = 400


class NotFoundError(RecallError):
    """Content or embedding is unknown, or not visible to the caller."""

    status_code = 404


class StorageError(RecallError):
    """Underlying persistence failure."""

    status_code = 500


class ProviderError(RecallError):
    """Failure reported by, or while talking to, the remote model provider."""

    status_code = 502
    retryable: bool = False


class InvalidInput(ProviderError):
    """Input the provider cannot process (e.g. empty text)."""

    status_code = 400


class ProviderUnavailable(ProviderError):
    """Network error, timeout, or server-side failure at the provider."""

    status_code = 503
    retryable = True


class RateLimited(ProviderError):
    """The provider throttled the request."""

    status_code = 429
    retryable = True

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


TRANSIENT_PROVIDER_ERRORS = (ProviderUnavailable, RateLimited)


__all__ = [
    "RecallError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "ProviderError",
    "InvalidInput",
    "ProviderUnavailable",
    "RateLimited",
    "TRANSIENT_PROVIDER_ERRORS",
]
