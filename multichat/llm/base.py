"""Base interfaces for completion backends."""
from __future__ import annotations

import abc
from typing import Iterable, List, Optional

from ..models import ROLES, Message


class CompletionError(RuntimeError):
    """Raised when a backend returns a response that cannot be used."""


class LLMClient(abc.ABC):
    """Abstract base class for a chat completion backend."""

    def __init__(self, model: str, temperature: float = 0.7, request_timeout: float = 120.0) -> None:
        self.model = model
        self.temperature = temperature
        self.request_timeout = request_timeout

    @abc.abstractmethod
    def complete(self, messages: Iterable[Message], *, model: Optional[str] = None) -> Message:
        """Return the assistant message that follows ``messages``."""

    @staticmethod
    def _payload_messages(messages: Iterable[Message]) -> List[dict[str, str]]:
        return [message.to_dict() for message in messages]

    @staticmethod
    def _to_message(role: object, content: object) -> Message:
        if content is None:
            raise CompletionError("Completion response had empty content")
        # Servers that name the reply role differently still produce an assistant turn.
        if role not in ROLES:
            role = "assistant"
        return Message(role=str(role), content=str(content))
