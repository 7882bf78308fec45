"""Assistant replies for a conversation history."""
from __future__ import annotations

import logging
from typing import Sequence

from .llm.base import LLMClient
from .models import Message

_LOGGER = logging.getLogger(__name__)

ERROR_MESSAGE = Message(role="assistant", content="Error: Unable to fetch response.")


class CompletionService:
    """Turn a message history into exactly one assistant message.

    Failures of any kind are logged and replaced by :data:`ERROR_MESSAGE`, so
    callers always get a message to append.
    """

    def __init__(self, client: LLMClient) -> None:
        self.client = client

    def get_assistant_response(self, messages: Sequence[Message], model: str) -> Message:
        try:
            reply = self.client.complete(messages, model=model)
        except Exception:
            _LOGGER.exception("Error fetching assistant response")
            return ERROR_MESSAGE
        _LOGGER.debug("Received %d characters from %s", len(reply.content), model)
        return reply
