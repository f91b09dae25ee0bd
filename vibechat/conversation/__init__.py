"""Conversation-side consumers of the event stream."""

from vibechat.conversation.reducer import (
    ConversationReducer,
    MessageReducer,
    consume_session,
)

__all__ = ["ConversationReducer", "MessageReducer", "consume_session"]
