"""Conversation data model."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple

Role = Literal["user", "assistant", "system"]
ROLES: Tuple[str, ...] = ("user", "assistant", "system")


def validate_role(role: str) -> str:
    if role not in ROLES:
        raise ValueError(f"Unsupported message role: {role!r}")
    return role


@dataclass(frozen=True)
class Message:
    """A single turn in a conversation."""

    role: str
    content: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, payload: dict) -> "Message":
        role = validate_role(str(payload.get("role", "")))
        content = payload.get("content")
        return cls(role=role, content="" if content is None else str(content))


@dataclass(frozen=True)
class Conversation:
    """An ordered collection of messages addressed by its position in the list.

    The ``id`` is reassigned whenever an earlier conversation is deleted, so
    it identifies a position rather than a stable entity. ``None`` is only
    used by :data:`EMPTY_CONVERSATION`.
    """

    id: Optional[int]
    messages: Tuple[Message, ...] = ()

    @property
    def title(self) -> str:
        return f"Conversation {self.id}"

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "messages": [message.to_dict() for message in self.messages]}

    @classmethod
    def from_dict(cls, payload: dict) -> "Conversation":
        raw_id = payload.get("id")
        messages = tuple(Message.from_dict(item) for item in payload.get("messages") or [])
        return cls(id=None if raw_id is None else int(raw_id), messages=messages)


EMPTY_CONVERSATION = Conversation(id=None, messages=())


@dataclass(frozen=True)
class EditBuffer:
    """Staging area for the message currently being edited."""

    index: int
    content: str


@dataclass(frozen=True)
class ChatState:
    """Snapshot of the whole client state.

    ``active`` is ``None`` until a conversation has been created or selected.
    """

    conversations: Tuple[Conversation, ...] = ()
    active: Optional[Conversation] = None
    edit_buffer: Optional[EditBuffer] = field(default=None)
