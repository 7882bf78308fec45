"""Plain HTTP client for OpenAI-compatible chat completion servers."""
from __future__ import annotations

import json
from typing import Iterable, Optional

import requests

from ..models import Message
from .base import CompletionError, LLMClient

DEFAULT_BASE_URL = "https://api.openai.com/v1"


class HTTPChatClient(LLMClient):
    """POST ``{model, messages, temperature}`` to ``<base_url>/chat/completions``.

    Works against OpenAI itself and against compatible servers such as
    Ollama's ``/v1`` endpoint.
    """

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.7,
        request_timeout: float = 120.0,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(model=model, temperature=temperature, request_timeout=request_timeout)
        self.api_key = api_key
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def complete(self, messages: Iterable[Message], *, model: Optional[str] = None) -> Message:
        payload = {
            "model": model or self.model,
            "messages": self._payload_messages(messages),
            "temperature": self.temperature,
        }
        response = self._session.post(
            f"{self.base_url}/chat/completions",
            data=json.dumps(payload),
            headers=self._headers(),
            timeout=self.request_timeout,
        )
        response.raise_for_status()
        data = response.json()
        choices = data.get("choices") or []
        if not choices:
            raise CompletionError("Completion response did not include choices")
        message = choices[0].get("message") or {}
        return self._to_message(message.get("role"), message.get("content"))
