"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "SPA_"
DEFAULT_CONFIG_PATH = Path("~/.config/spa-chat/config.yaml")
DEFAULT_SYSTEM_PROMPT = "You are a friendly spa assistant."

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("storage", "db_path"): "db_path",
    ("openai", "api_key"): "openai_api_key",
    ("openai", "base_url"): "openai_base_url",
    ("embeddings", "backend"): "embedding_backend",
    ("embeddings", "model"): "embedding_model",
    ("embeddings", "dim"): "embedding_dim",
    ("embeddings", "max_chars"): "embed_max_chars",
    ("completion", "model"): "completion_model",
    ("completion", "temperature"): "completion_temperature",
    ("retrieval", "top_k"): "rag_top_k",
    ("retrieval", "threshold"): "rag_threshold",
    ("retrieval", "widen_top_k"): "widen_top_k",
    ("retrieval", "widen_threshold"): "widen_threshold_ceiling",
    ("chat", "system_prompt"): "default_system_prompt",
    ("chat", "business_label"): "business_label",
    ("matching", "intent_table"): "intent_table_path",
    ("booking", "relay_url"): "booking_relay_url",
    ("ingest", "root_slug"): "kb_root_slug",
    ("ingest", "chunk_chars"): "kb_chunk_chars",
    ("server", "cors_origins"): "cors_origins",
}

# Bare provider variables accepted alongside the prefixed form.
_ENV_ALIASES: Mapping[str, str] = {
    "OPENAI_API_KEY": "openai_api_key",
    "OPENAI_KEY": "openai_api_key",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    db_path: Path = Field(default=Path.home() / ".spa-chat" / "spa.db")
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    request_timeout: float = 60.0

    embedding_backend: Literal["openai", "hashed"] = "openai"
    embedding_model: str = "text-embedding-3-small"
    embedding_dim: int = 1536
    embed_max_chars: int = 8000

    completion_model: str = "gpt-4o-mini"
    completion_temperature: float = 0.3

    rag_top_k: int = 5
    rag_threshold: float = 0.72
    widen_top_k: int = 8
    widen_threshold_ceiling: float = 0.5

    default_system_prompt: str = DEFAULT_SYSTEM_PROMPT
    business_label: str = "the spa"
    intent_table_path: Path | None = None
    booking_relay_url: str | None = None

    kb_root_slug: str = "serenity-spa-knowledge-base"
    kb_chunk_chars: int = 800

    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

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

    @field_validator("intent_table_path", mode="before")
    @classmethod
    def _expand_intent_table(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value).expanduser()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("openai_api_key", "booking_relay_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

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
        mapped_key = _YAML_KEY_MAP.get(next_prefix)
        if mapped_key:
            flat[mapped_key] = value
        elif isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        elif key in Settings.model_fields:
            flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with SPA_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for alias, field_name in _ENV_ALIASES.items():
        value = os.environ.get(alias)
        if value and field_name not in overrides:
            overrides[field_name] = value
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


__all__ = ["Settings", "get_settings", "DEFAULT_SYSTEM_PROMPT"]
