"""Application configuration management."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _split_models(raw: str) -> List[str]:
    return [name.strip() for name in raw.split(",") if name.strip()]


@dataclass(slots=True)
class LLMConfig:
    """Configuration for the completion backend."""

    provider: str = os.getenv("CHAT_PROVIDER", "openai").lower()
    models: List[str] = field(
        default_factory=lambda: _split_models(os.getenv("CHAT_MODELS", "gpt-3.5-turbo,gpt-4"))
    )
    base_url: Optional[str] = os.getenv("CHAT_BASE_URL")
    temperature: float = float(os.getenv("CHAT_TEMPERATURE", "0.7"))
    request_timeout: float = float(os.getenv("CHAT_TIMEOUT", "120"))

    @property
    def default_model(self) -> str:
        return self.models[0] if self.models else "gpt-3.5-turbo"


@dataclass(slots=True)
class StorageConfig:
    """Configuration for the local key-value store."""

    database_path: str = os.getenv("CHAT_DB_PATH", "./data/multichat.sqlite")
    secret: str = os.getenv("CHAT_SECRET", "secret_key")


@dataclass(slots=True)
class AppConfig:
    """Top-level application configuration."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


config = AppConfig()
