import pytest

from multichat.models import EMPTY_CONVERSATION, ChatState, Conversation, EditBuffer, Message
from multichat.store import (
    DELETE_CONVERSATION_PROMPT,
    DELETE_MESSAGE_PROMPT,
    active_messages,
    add_conversation,
    add_message,
    begin_edit,
    cancel_edit,
    delete_conversation,
    delete_message,
    export_messages,
    save_edit,
    select_conversation,
    send_message,
    update_buffer,
)


def build_state(count: int, active_id: int | None = None) -> ChatState:
    state = ChatState()
    for _ in range(count):
        state = add_conversation(state)
    conversations = tuple(
        Conversation(id=c.id, messages=(Message("user", f"from {c.id}"),))
        for c in state.conversations
    )
    state = ChatState(conversations=conversations)
    if active_id is not None:
        state = select_conversation(state, active_id)
    return state


def with_messages(*contents: str) -> ChatState:
    conversation = Conversation(id=1, messages=tuple(Message("user", c) for c in contents))
    return ChatState(conversations=(conversation,), active=conversation)


class FakeCompletion:
    def __init__(self, reply: Message) -> None:
        self.reply = reply
        self.calls = []

    def get_assistant_response(self, messages, model):
        self.calls.append((tuple(messages), model))
        return self.reply


def test_add_conversation_assigns_dense_ids_in_call_order():
    state = ChatState()
    for _ in range(5):
        state = add_conversation(state)
    assert [c.id for c in state.conversations] == [1, 2, 3, 4, 5]
    assert state.active == state.conversations[-1]
    assert state.active.messages == ()


def test_add_conversation_does_not_mutate_previous_snapshot():
    first = add_conversation(ChatState())
    second = add_conversation(first)
    assert len(first.conversations) == 1
    assert len(second.conversations) == 2


def test_delete_conversation_renumbers_survivors_in_order():
    state = build_state(4, active_id=1)
    state = delete_conversation(state, 2)
    assert [c.id for c in state.conversations] == [1, 2, 3]
    assert [c.messages[0].content for c in state.conversations] == ["from 1", "from 3", "from 4"]


def test_deleting_active_selects_previous_conversation():
    state = delete_conversation(build_state(3, active_id=2), 2)
    assert state.active.id == 1
    assert state.active.messages[0].content == "from 1"


def test_deleting_earlier_conversation_follows_shifted_active():
    state = delete_conversation(build_state(3, active_id=3), 1)
    assert state.active.id == 2
    assert state.active.messages[0].content == "from 3"


def test_deleting_later_conversation_keeps_active():
    before = build_state(3, active_id=1)
    after = delete_conversation(before, 2)
    assert after.active is before.active


def test_deleting_first_active_conversation_selects_new_first():
    state = delete_conversation(build_state(3, active_id=1), 1)
    assert state.active.id == 1
    assert state.active.messages[0].content == "from 2"


def test_deleting_only_conversation_leaves_placeholder():
    state = delete_conversation(build_state(1, active_id=1), 1)
    assert state.conversations == ()
    assert state.active == EMPTY_CONVERSATION
    assert state.active.id is None
    assert state.active.messages == ()


def test_delete_without_active_leaves_pointer_empty():
    state = delete_conversation(build_state(2), 1)
    assert state.active is None
    assert [c.id for c in state.conversations] == [1]


def test_delete_unknown_conversation_is_noop():
    state = build_state(2, active_id=2)
    assert delete_conversation(state, 7) is state


def test_delete_conversation_respects_declined_confirmation():
    prompts = []

    def decline(prompt):
        prompts.append(prompt)
        return False

    state = build_state(2, active_id=1)
    assert delete_conversation(state, 1, confirm=decline) is state
    assert prompts == [DELETE_CONVERSATION_PROMPT]


def test_delete_conversation_with_accepted_confirmation():
    state = delete_conversation(build_state(2, active_id=1), 1, confirm=lambda prompt: True)
    assert [c.id for c in state.conversations] == [1]


def test_select_unknown_conversation_is_noop():
    state = build_state(2, active_id=1)
    assert select_conversation(state, 5) is state


def test_select_other_conversation_closes_edit_buffer():
    state = begin_edit(build_state(2, active_id=1), 0)
    state = select_conversation(state, 2)
    assert state.edit_buffer is None
    assert state.active.id == 2


def test_save_edit_replaces_only_target_message():
    state = begin_edit(with_messages("a", "b", "c"), 1)
    assert state.edit_buffer == EditBuffer(index=1, content="b")
    state = save_edit(update_buffer(state, "changed"))
    assert [m.content for m in state.active.messages] == ["a", "changed", "c"]
    assert [m.content for m in state.conversations[0].messages] == ["a", "changed", "c"]
    assert state.edit_buffer is None


def test_update_buffer_leaves_message_untouched_until_save():
    state = update_buffer(begin_edit(with_messages("a"), 0), "draft")
    assert state.active.messages[0].content == "a"
    assert state.edit_buffer.content == "draft"


def test_cancel_edit_restores_original_content():
    original = with_messages("a", "b")
    state = begin_edit(original, 0)
    state = update_buffer(state, "one")
    state = update_buffer(state, "two")
    state = cancel_edit(state)
    assert state.active.messages == original.active.messages
    assert state.edit_buffer is None


def test_begin_edit_without_active_is_noop():
    state = ChatState()
    assert begin_edit(state, 0) is state


def test_begin_edit_out_of_range_raises():
    with pytest.raises(IndexError):
        begin_edit(with_messages("a"), 3)


def test_add_message_appends_empty_message_and_opens_buffer():
    state = add_message(with_messages("a", "b"), "system")
    messages = active_messages(state)
    assert len(messages) == 3
    assert messages[-1] == Message("system", "")
    assert state.edit_buffer == EditBuffer(index=2, content="")


def test_add_message_rejects_unknown_role():
    with pytest.raises(ValueError):
        add_message(with_messages("a"), "narrator")


def test_add_message_on_placeholder_stays_detached():
    state = delete_conversation(build_state(1, active_id=1), 1)
    state = save_edit(update_buffer(add_message(state, "user"), "hello"))
    assert state.active.messages == (Message("user", "hello"),)
    assert state.conversations == ()


def test_delete_message_shifts_later_messages():
    prompts = []

    def accept(prompt):
        prompts.append(prompt)
        return True

    state = delete_message(with_messages("a", "b", "c"), 0, confirm=accept)
    assert [m.content for m in state.active.messages] == ["b", "c"]
    assert prompts == [DELETE_MESSAGE_PROMPT]


def test_delete_message_declined_is_noop():
    state = with_messages("a", "b")
    assert delete_message(state, 0, confirm=lambda prompt: False) is state


def test_delete_buffered_message_closes_buffer():
    state = begin_edit(with_messages("a", "b", "c"), 1)
    state = delete_message(state, 1)
    assert state.edit_buffer is None


def test_delete_earlier_message_moves_buffer_with_its_message():
    state = update_buffer(begin_edit(with_messages("a", "b", "c"), 2), "C")
    state = delete_message(state, 0)
    assert state.edit_buffer == EditBuffer(index=1, content="C")
    state = save_edit(state)
    assert [m.content for m in state.active.messages] == ["b", "C"]


def test_delete_later_message_keeps_buffer():
    state = begin_edit(with_messages("a", "b", "c"), 0)
    state = delete_message(state, 2)
    assert state.edit_buffer == EditBuffer(index=0, content="a")


def test_send_message_appends_user_and_assistant_turns():
    completion = FakeCompletion(Message("assistant", "hi there"))
    state = send_message(with_messages("earlier"), "hello", "gpt-4", completion)
    assert [m.to_dict() for m in state.active.messages] == [
        {"role": "user", "content": "earlier"},
        {"role": "user", "content": "hello"},
        {"role": "assistant", "content": "hi there"},
    ]
    assert state.conversations[0] == state.active
    sent, model = completion.calls[0]
    assert model == "gpt-4"
    assert sent[-1] == Message("user", "hello")


def test_send_empty_message_is_noop():
    completion = FakeCompletion(Message("assistant", "unused"))
    state = with_messages("a")
    assert send_message(state, "", "gpt-4", completion) is state
    assert completion.calls == []


def test_export_messages_is_pretty_json():
    conversation = Conversation(id=1, messages=(Message("user", "hi"),))
    assert export_messages(conversation) == '[\n  {\n    "role": "user",\n    "content": "hi"\n  }\n]'
