"""Factory for instantiating completion backends based on configuration."""
from __future__ import annotations

from typing import Literal, Optional

from ..config import config
from .base import LLMClient
from .http_client import HTTPChatClient
from .openai_client import OpenAIClient

Provider = Literal["openai", "http"]


def create_llm_client(api_key: Optional[str] = None, provider: Optional[str] = None) -> LLMClient:
    """Create an :class:`LLMClient` for ``api_key`` based on the current configuration."""

    selected: Provider = (provider or config.llm.provider).lower()  # type: ignore[assignment]
    if selected == "openai":
        return OpenAIClient(
            model=config.llm.default_model,
            api_key=api_key,
            base_url=config.llm.base_url,
            temperature=config.llm.temperature,
            request_timeout=config.llm.request_timeout,
        )
    if selected == "http":
        return HTTPChatClient(
            model=config.llm.default_model,
            api_key=api_key,
            base_url=config.llm.base_url,
            temperature=config.llm.temperature,
            request_timeout=config.llm.request_timeout,
        )
    raise ValueError(f"Unsupported LLM provider: {selected}")
