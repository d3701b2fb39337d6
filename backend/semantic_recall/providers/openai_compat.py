"""OpenAI-compatible HTTP provider client."""

from __future__ import annotations

from typing import Any, Sequence

import requests

from semantic_recall.core.errors import InvalidInput, ProviderError, ProviderUnavailable, RateLimited
from semantic_recall.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAICompatibleClient:
    """Calls ``/embeddings`` and ``/chat/completions`` on an OpenAI-style API.

    One instance owns one ``requests.Session``; construct it once and inject it
    wherever embeddings or completions are needed.
    """

    name = "openai"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        embedding_model: str = "text-embedding-3-small",
        chat_model: str = "gpt-3.5-turbo",
        timeout: float = 30.0,
        max_tokens: int = 512,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("An API key is required for the OpenAI-compatible provider")
        self.base_url = base_url.rstrip("/")
        self.embedding_model = embedding_model
        self.chat_model = chat_model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def embed(self, texts: Sequence[str], timeout: float | None = None) -> list[list[float]]:
        if not texts:
            return []
        data = self._post(
            "/embeddings",
            {"model": self.embedding_model, "input": list(texts)},
            timeout,
        )
        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list) or len(items) != len(texts):
            raise ProviderError("Embedding response does not match the number of inputs")
        vectors: list[list[float] | None] = [None] * len(texts)
        for position, item in enumerate(items):
            if not isinstance(item, dict) or not isinstance(item.get("embedding"), list):
                raise ProviderError("Malformed embedding response")
            slot = item.get("index", position)
            if isinstance(slot, bool) or not isinstance(slot, int) or not 0 <= slot < len(texts):
                raise ProviderError("Malformed embedding response")
            try:
                vectors[slot] = [float(value) for value in item["embedding"]]
            except (TypeError, ValueError) as exc:
                raise ProviderError("Malformed embedding response") from exc
        if any(vector is None for vector in vectors):
            raise ProviderError("Embedding response is missing entries")
        return vectors  # type: ignore[return-value]

    def complete(self, system: str, prompt: str, timeout: float | None = None) -> str:
        data = self._post(
            "/chat/completions",
            {
                "model": self.chat_model,
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                "max_tokens": self.max_tokens,
                "temperature": 0.0,
            },
            timeout,
        )
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError("Malformed chat completion response") from exc
        return (content or "").strip()

    def close(self) -> None:
        self._session.close()

    def _post(self, path: str, payload: dict[str, Any], timeout: float | None) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self._session.post(url, json=payload, timeout=timeout or self.timeout)
        except requests.Timeout as exc:
            raise ProviderUnavailable(f"Timed out calling {path}") from exc
        except requests.ConnectionError as exc:
            raise ProviderUnavailable(f"Cannot reach provider at {self.base_url}: {exc}") from exc
        except requests.RequestException as exc:
            raise ProviderUnavailable(f"Request to {path} failed: {exc}") from exc

        logger.debug("POST %s -> %s", path, resp.status_code)
        if resp.status_code == 429:
            raise RateLimited(f"Provider throttled {path}", retry_after=_retry_after(resp))
        if resp.status_code >= 500:
            raise ProviderUnavailable(f"Provider error {resp.status_code} on {path}")
        if resp.status_code in (400, 413, 422):
            raise InvalidInput(f"Provider rejected input on {path}: {_error_detail(resp)}")
        if not resp.ok:
            raise ProviderError(f"Provider returned {resp.status_code} on {path}: {_error_detail(resp)}")
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError(f"Provider returned invalid JSON on {path}") from exc


def _retry_after(resp: requests.Response) -> float | None:
    value = resp.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message", body["error"]))
    return str(body)[:200]


__all__ = ["OpenAICompatibleClient", "DEFAULT_BASE_URL"]
