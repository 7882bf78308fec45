"""OpenAI chat completion client."""
from __future__ import annotations

from typing import Any, Iterable, Optional

from openai import OpenAI

from ..models import Message
from .base import CompletionError, LLMClient


class OpenAIClient(LLMClient):
    """Client for the OpenAI chat completions endpoint.

    Each call sends exactly one request; the SDK's automatic retries are
    turned off.
    """

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.7,
        request_timeout: float = 120.0,
        http_client: Any = None,
    ) -> None:
        super().__init__(model=model, temperature=temperature, request_timeout=request_timeout)
        kwargs: dict[str, Any] = {"max_retries": 0}
        if api_key:
            kwargs["api_key"] = api_key
        if base_url:
            kwargs["base_url"] = base_url
        if http_client is not None:
            kwargs["http_client"] = http_client
        self._client = OpenAI(**kwargs)

    def complete(self, messages: Iterable[Message], *, model: Optional[str] = None) -> Message:
        response = self._client.chat.completions.create(
            model=model or self.model,
            messages=self._payload_messages(messages),
            temperature=self.temperature,
            timeout=self.request_timeout,
        )
        if not response.choices:
            raise CompletionError("LLM returned no choices")
        message = response.choices[0].message
        return self._to_message(message.role, message.content)
