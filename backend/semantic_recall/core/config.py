"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

ENV_PREFIX = "RECALL_"
DEFAULT_CONFIG_PATH = Path("~/.config/semantic-recall/config.yaml")

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("storage", "db_path"): "db_path",
    ("provider", "backend"): "embedding_backend",
    ("provider", "base_url"): "provider_base_url",
    ("provider", "api_key"): "provider_api_key",
    ("provider", "timeout"): "provider_timeout",
    ("embeddings", "model"): "embedding_model",
    ("embeddings", "dimensions"): "embedding_dimensions",
    ("embeddings", "batch_size"): "embedding_batch_size",
    ("embeddings", "max_input_tokens"): "embedding_max_input_tokens",
    ("chunking", "chunk_size"): "chunk_size",
    ("chunking", "overlap"): "chunk_overlap",
    ("retrieval", "top_k"): "top_k",
    ("retrieval", "snippet_length"): "snippet_length",
    ("answers", "model"): "chat_model",
    ("answers", "max_tokens"): "answer_max_tokens",
    ("indexing", "workers"): "index_workers",
    ("indexing", "queue_size"): "index_queue_size",
    ("indexing", "retry_attempts"): "index_retry_attempts",
    ("indexing", "retry_backoff"): "index_retry_backoff",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    db_path: Path = Field(default=Path.home() / ".semantic-recall" / "recall.db")
    embedding_backend: Literal["openai", "hashed"] = "openai"
    provider_base_url: str = "https://api.openai.com/v1"
    provider_api_key: str | None = None
    provider_timeout: float = Field(default=30.0, gt=0)
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = Field(default=384, ge=1)
    embedding_batch_size: int = Field(default=64, ge=1)
    embedding_max_input_tokens: int = Field(default=8000, ge=16)
    chunk_size: int = Field(default=1000, ge=2)
    chunk_overlap: int = Field(default=200, ge=1)
    top_k: int = Field(default=5, ge=1)
    snippet_length: int = Field(default=300, ge=1)
    chat_model: str = "gpt-3.5-turbo"
    answer_max_tokens: int = Field(default=512, ge=1)
    index_workers: int = Field(default=2, ge=1)
    index_queue_size: int = Field(default=100, ge=1)
    index_retry_attempts: int = Field(default=3, ge=1)
    index_retry_backoff: float = Field(default=1.0, ge=0)

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
    }

    @field_validator("db_path", mode="before")
    @classmethod
    def _expand_db_path(cls, value: Any) -> Path:
        if isinstance(value, Path):
            return value.expanduser()
        if isinstance(value, str):
            return Path(value).expanduser()
        raise TypeError("db_path must be a path or string")

    @model_validator(mode="after")
    def _check_overlap(self) -> "Settings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        """Load YAML config and overlay env vars; fall back to defaults."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        if not data.get("provider_api_key") and os.environ.get("OPENAI_API_KEY"):
            data["provider_api_key"] = os.environ["OPENAI_API_KEY"]
        return cls(**data)

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        if isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        else:
            mapped_key = _YAML_KEY_MAP.get(next_prefix)
            if mapped_key:
                flat[mapped_key] = value
            elif key in Settings.model_fields:
                flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with RECALL_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor for dependency injection."""
    return Settings.from_yaml()


__all__ = ["Settings", "get_settings"]
