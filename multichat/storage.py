"""Local key-value persistence for conversations."""
from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple

from .config import config
from .models import ChatState, Conversation

_LOGGER = logging.getLogger(__name__)

CONVERSATIONS_KEY = "conversations"

_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


def _ensure_database(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(str(path)) as conn:
        conn.executescript(_TABLE_SCHEMA)


class KeyValueStore:
    """String slots stored in a single SQLite table."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path or config.storage.database_path)
        _ensure_database(self.path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.path))
        try:
            yield conn
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return str(row[0]) if row else None

    def set(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()


def serialize_conversations(conversations: Iterable[Conversation]) -> str:
    return json.dumps([conversation.to_dict() for conversation in conversations], ensure_ascii=False)


def deserialize_conversations(raw: str) -> Tuple[Conversation, ...]:
    payload = json.loads(raw)
    if not isinstance(payload, list):
        raise ValueError("Stored conversations must be a JSON array")
    conversations = [Conversation.from_dict(item) for item in payload]
    if [c.id for c in conversations] != list(range(1, len(conversations) + 1)):
        _LOGGER.warning("Renumbering stored conversations with non-sequential ids")
        conversations = [replace(c, id=position) for position, c in enumerate(conversations, start=1)]
    return tuple(conversations)


class ConversationRepository:
    """Reads the conversation list at startup and rewrites it after every change."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load(self) -> Tuple[Conversation, ...]:
        raw = self.store.get(CONVERSATIONS_KEY)
        if not raw:
            return ()
        try:
            return deserialize_conversations(raw)
        except (ValueError, TypeError, AttributeError):
            _LOGGER.warning("Discarding unreadable stored conversations", exc_info=True)
            return ()

    def save(self, conversations: Iterable[Conversation]) -> None:
        self.store.set(CONVERSATIONS_KEY, serialize_conversations(conversations))

    def commit(self, previous: ChatState, current: ChatState) -> bool:
        """Save ``current`` if its conversation list differs from ``previous``.

        Changes confined to the detached placeholder conversation are not
        part of the list and are not written. Returns whether a write happened.
        """

        if current.conversations == previous.conversations:
            return False
        self.save(current.conversations)
        return True
