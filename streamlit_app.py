"""Streamlit UI for the multi-conversation chat client."""
from __future__ import annotations

from typing import Optional

import streamlit as st

from multichat.completion import CompletionService
from multichat.config import config
from multichat.credentials import CredentialVault
from multichat.llm.factory import create_llm_client
from multichat.models import ROLES, ChatState
from multichat.storage import ConversationRepository, KeyValueStore
from multichat.store import (
    DELETE_CONVERSATION_PROMPT,
    DELETE_MESSAGE_PROMPT,
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


def _rerun() -> None:
    """Trigger a Streamlit rerun compatible with newer and older versions."""
    if hasattr(st, "rerun"):
        st.rerun()
    else:  # pragma: no cover - support for older Streamlit releases
        st.experimental_rerun()


st.set_page_config(page_title="Multichat", page_icon="💬", layout="wide")


def _get_kv_store() -> KeyValueStore:
    if "kv_store" not in st.session_state:
        st.session_state.kv_store = KeyValueStore()
    return st.session_state.kv_store


def get_repository() -> ConversationRepository:
    return ConversationRepository(_get_kv_store())


def get_vault() -> CredentialVault:
    return CredentialVault(_get_kv_store())


def get_state() -> ChatState:
    if "chat_state" not in st.session_state:
        st.session_state.chat_state = ChatState(conversations=get_repository().load())
    if "pending_delete" not in st.session_state:
        st.session_state.pending_delete = None
    if "credential" not in st.session_state:
        st.session_state.credential = get_vault().load()
    return st.session_state.chat_state


def commit(next_state: ChatState) -> None:
    """Install ``next_state`` and persist the conversation list if it changed."""
    previous: ChatState = st.session_state.chat_state
    st.session_state.chat_state = next_state
    get_repository().commit(previous, next_state)


def _apply(next_state: ChatState) -> None:
    st.session_state.pending_delete = None
    commit(next_state)
    _rerun()


def _render_pending_confirmation(prompt: str, on_confirm) -> None:
    st.warning(prompt)
    col_yes, col_no = st.columns(2)
    with col_yes:
        if st.button("Yes", key="confirm_yes", use_container_width=True):
            _apply(on_confirm())
    with col_no:
        if st.button("No", key="confirm_no", use_container_width=True):
            st.session_state.pending_delete = None
            _rerun()


def render_sidebar(state: ChatState) -> Optional[str]:
    selected_model: Optional[str] = None
    with st.sidebar:
        if st.button("New Conversation", use_container_width=True):
            _apply(add_conversation(state))
        st.divider()

        pending = st.session_state.pending_delete
        if pending and pending[0] == "conversation":
            conversation_id = pending[1]
            _render_pending_confirmation(
                DELETE_CONVERSATION_PROMPT,
                lambda: delete_conversation(state, conversation_id),
            )

        for conversation in state.conversations:
            is_active = state.active is not None and state.active.id == conversation.id
            col_title, col_copy, col_delete = st.columns([6, 1, 1])
            with col_title:
                if st.button(
                    conversation.title,
                    key=f"select_{conversation.id}",
                    type="primary" if is_active else "secondary",
                    use_container_width=True,
                ):
                    _apply(select_conversation(state, conversation.id))
            with col_copy:
                st.download_button(
                    "⬇",
                    data=export_messages(conversation),
                    file_name=f"conversation-{conversation.id}.json",
                    mime="application/json",
                    key=f"export_{conversation.id}",
                )
            with col_delete:
                if st.button("🗑", key=f"delete_conversation_{conversation.id}"):
                    st.session_state.pending_delete = ("conversation", conversation.id)
                    _rerun()

        if st.session_state.credential:
            st.divider()
            selected_model = st.selectbox("Model", config.llm.models or [config.llm.default_model], key="model")
            if st.button("Forget API key", use_container_width=True):
                get_vault().clear()
                st.session_state.credential = None
                _rerun()
    return selected_model


def render_editor(state: ChatState) -> None:
    buffer = state.edit_buffer
    new_content = st.text_area(
        "Edit message",
        buffer.content,
        key=f"edit_area_{state.active.id}_{buffer.index}",
        height=150,
    )
    col_save, col_cancel = st.columns(2)
    with col_save:
        if st.button("Save", key=f"save_{buffer.index}"):
            _apply(save_edit(update_buffer(state, new_content)))
    with col_cancel:
        if st.button("Cancel", key=f"cancel_{buffer.index}"):
            _apply(cancel_edit(state))


def render_conversation(state: ChatState) -> None:
    """Render the active conversation with edit and delete controls."""

    pending = st.session_state.pending_delete
    if pending and pending[0] == "message":
        message_index = pending[1]
        _render_pending_confirmation(
            DELETE_MESSAGE_PROMPT,
            lambda: delete_message(state, message_index),
        )

    for index, message in enumerate(state.active.messages):
        with st.chat_message(message.role):
            if state.edit_buffer is not None and state.edit_buffer.index == index:
                render_editor(state)
                continue
            st.markdown(message.content)
            col_edit, col_delete, _ = st.columns([1, 1, 10])
            with col_edit:
                if st.button("✎", key=f"edit_{index}"):
                    _apply(begin_edit(state, index))
            with col_delete:
                if st.button("🗑", key=f"delete_message_{index}"):
                    st.session_state.pending_delete = ("message", index)
                    _rerun()

    columns = st.columns(len(ROLES))
    for column, role in zip(columns, ROLES):
        with column:
            if st.button(f"+ {role.capitalize()} msg", key=f"add_{role}", use_container_width=True):
                _apply(add_message(state, role))


def render_api_key_form() -> None:
    st.subheader("Enter your OpenAI API Key")
    with st.form("api_key_form"):
        api_key = st.text_input("API key", type="password")
        submitted = st.form_submit_button("Submit")
    if submitted:
        if api_key.strip():
            get_vault().save(api_key.strip())
            st.session_state.credential = api_key.strip()
            _rerun()
        else:
            st.warning("Enter an API key before submitting.")


def main() -> None:
    state = get_state()
    model = render_sidebar(state)
    st.title("Multichat")

    if state.active is not None:
        render_conversation(state)
    else:
        st.info("Start a new conversation from the sidebar.")

    if not st.session_state.credential:
        render_api_key_form()
        return

    if prompt := st.chat_input("Send a message..."):
        if state.active is None:
            st.warning("Create a conversation before sending messages.")
            return
        completion = CompletionService(create_llm_client(api_key=st.session_state.credential))
        with st.spinner("Waiting for the assistant..."):
            next_state = send_message(state, prompt, model or config.llm.default_model, completion)
        _apply(next_state)


if __name__ == "__main__":
    main()
