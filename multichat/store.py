"""Conversation store and message editor.

Every function takes the current :class:`ChatState` and returns the next one.
Snapshots are never mutated, so a caller holding an older state keeps seeing
exactly what it saw.
"""
from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from .models import (
    EMPTY_CONVERSATION,
    ChatState,
    Conversation,
    EditBuffer,
    Message,
    validate_role,
)

if TYPE_CHECKING:
    from .completion import CompletionService

_LOGGER = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

DELETE_CONVERSATION_PROMPT = "Are you sure you want to delete this conversation?"
DELETE_MESSAGE_PROMPT = "Do you want to delete this message?"


def _find(conversations: Tuple[Conversation, ...], conversation_id: int) -> Optional[Conversation]:
    for conversation in conversations:
        if conversation.id == conversation_id:
            return conversation
    return None


def _with_active_messages(state: ChatState, messages: Tuple[Message, ...]) -> ChatState:
    """Write ``messages`` to the active conversation and its list entry."""

    active = replace(state.active, messages=messages)
    conversations = tuple(
        active if conversation.id == active.id else conversation
        for conversation in state.conversations
    )
    return replace(state, conversations=conversations, active=active)


def active_messages(state: ChatState) -> Tuple[Message, ...]:
    if state.active is None:
        return ()
    return state.active.messages


# ----------------------------------------------------------------------
# Conversations
# ----------------------------------------------------------------------


def add_conversation(state: ChatState) -> ChatState:
    """Append an empty conversation and make it active."""

    conversation = Conversation(id=len(state.conversations) + 1)
    _LOGGER.debug("Created conversation %s", conversation.id)
    return ChatState(
        conversations=state.conversations + (conversation,),
        active=conversation,
        edit_buffer=None,
    )


def delete_conversation(
    state: ChatState,
    conversation_id: int,
    confirm: Confirm | None = None,
) -> ChatState:
    """Remove a conversation and renumber the survivors to ``1..N``.

    The active pointer is reconciled against the renumbered list using the
    active id from before the deletion: an earlier conversation keeps its
    place, a later one follows its shifted id, and a deleted active
    conversation hands over to the one just before it (or the first one when
    it was already first). Deleting the last conversation leaves
    :data:`EMPTY_CONVERSATION` active.
    """

    if _find(state.conversations, conversation_id) is None:
        _LOGGER.debug("Ignoring delete of unknown conversation %s", conversation_id)
        return state
    if confirm is not None and not confirm(DELETE_CONVERSATION_PROMPT):
        return state

    survivors = [c for c in state.conversations if c.id != conversation_id]
    renumbered = tuple(
        replace(conversation, id=position)
        for position, conversation in enumerate(survivors, start=1)
    )

    active = state.active
    edit_buffer = state.edit_buffer
    active_id = active.id if active is not None else None
    if active_id is not None and active_id >= conversation_id:
        if not renumbered:
            active = EMPTY_CONVERSATION
        elif active_id == conversation_id:
            active = renumbered[max(conversation_id - 2, 0)]
        else:
            active = renumbered[active_id - 2]
        edit_buffer = None

    _LOGGER.debug(
        "Deleted conversation %s; active %s -> %s",
        conversation_id,
        active_id,
        active.id if active is not None else None,
    )
    return ChatState(conversations=renumbered, active=active, edit_buffer=edit_buffer)


def select_conversation(state: ChatState, conversation_id: int) -> ChatState:
    """Make the conversation with ``conversation_id`` active; unknown ids are ignored."""

    conversation = _find(state.conversations, conversation_id)
    if conversation is None:
        return state
    edit_buffer = state.edit_buffer
    if state.active is None or state.active.id != conversation.id:
        edit_buffer = None
    return replace(state, active=conversation, edit_buffer=edit_buffer)


def export_messages(conversation: Conversation) -> str:
    """Return the conversation's messages as pretty-printed JSON."""

    return json.dumps([m.to_dict() for m in conversation.messages], indent=2, ensure_ascii=False)


# ----------------------------------------------------------------------
# Message editor
# ----------------------------------------------------------------------


def begin_edit(state: ChatState, index: int) -> ChatState:
    if state.active is None:
        return state
    messages = state.active.messages
    if index < 0 or index >= len(messages):
        raise IndexError("Message index out of range")
    return replace(state, edit_buffer=EditBuffer(index=index, content=messages[index].content))


def update_buffer(state: ChatState, text: str) -> ChatState:
    if state.edit_buffer is None:
        return state
    return replace(state, edit_buffer=replace(state.edit_buffer, content=text))


def save_edit(state: ChatState) -> ChatState:
    """Write the edit buffer into its message and close the buffer."""

    buffer = state.edit_buffer
    if buffer is None or state.active is None:
        return state
    messages = tuple(
        replace(message, content=buffer.content) if index == buffer.index else message
        for index, message in enumerate(state.active.messages)
    )
    return replace(_with_active_messages(state, messages), edit_buffer=None)


def cancel_edit(state: ChatState) -> ChatState:
    return replace(state, edit_buffer=None)


def add_message(state: ChatState, role: str) -> ChatState:
    """Append an empty ``role`` message and start editing it."""

    validate_role(role)
    if state.active is None:
        return state
    messages = state.active.messages + (Message(role=role, content=""),)
    next_state = _with_active_messages(state, messages)
    return replace(next_state, edit_buffer=EditBuffer(index=len(messages) - 1, content=""))


def delete_message(state: ChatState, index: int, confirm: Confirm | None = None) -> ChatState:
    """Remove the message at ``index`` from the active conversation.

    An open edit buffer on the removed message is closed; a buffer on a later
    message moves down with it.
    """

    if state.active is None:
        return state
    messages = state.active.messages
    if index < 0 or index >= len(messages):
        raise IndexError("Message index out of range")
    if confirm is not None and not confirm(DELETE_MESSAGE_PROMPT):
        return state

    next_state = _with_active_messages(state, messages[:index] + messages[index + 1:])
    buffer = state.edit_buffer
    if buffer is not None:
        if buffer.index == index:
            buffer = None
        elif buffer.index > index:
            buffer = replace(buffer, index=buffer.index - 1)
    return replace(next_state, edit_buffer=buffer)


def send_message(
    state: ChatState,
    text: str,
    model: str,
    completion: "CompletionService",
) -> ChatState:
    """Append a user message and the assistant's reply to the active conversation."""

    if not text or state.active is None:
        return state
    messages = state.active.messages + (Message(role="user", content=text),)
    reply = completion.get_assistant_response(messages, model)
    return _with_active_messages(state, messages + (reply,))
