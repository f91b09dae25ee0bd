"""Applies streamed events to the message being displayed.

A reducer receives one call per event. Whatever way a session ends, the
reducer is left with streaming stopped and every token received so far kept;
nothing is re-submitted automatically.
"""

import asyncio
import logging
import uuid
from typing import Protocol

from vibechat.models.schemas import ChatMessage, MessageRole
from vibechat.streaming.events import (
    FinalAnswer,
    IncompleteStream,
    ServerError,
    StatusUpdate,
    StreamToken,
)
from vibechat.streaming.session import SessionState, StreamSession

logger = logging.getLogger(__name__)

CANCELLED_REASON = "Generation cancelled"


class ConversationReducer(Protocol):
    """Receiver of decoded events for one assistant message."""

    def append_token(self, token: str) -> None: ...

    def finalize(self, text: str) -> None: ...

    def fail(self, reason: str) -> None: ...

    def status_update(self, detail: str) -> None: ...


class MessageReducer:
    """Builds the assistant message shown while an answer streams in.

    Attributes:
        message: The assistant message, updated in place.
        is_streaming: True until the session finishes in any way.
        status: Latest status detail reported by the server.
        error: Failure reason, if the session did not complete.
    """

    def __init__(self, message_id: str | None = None) -> None:
        self.message = ChatMessage(
            id=message_id or str(uuid.uuid4()),
            role=MessageRole.ASSISTANT,
        )
        self.is_streaming = True
        self.status: str | None = None
        self.error: str | None = None

    def append_token(self, token: str) -> None:
        self.message.content += token

    def finalize(self, text: str) -> None:
        """Replace the streamed tokens with the final answer, when one is given."""
        if text:
            self.message.content = text
        self.is_streaming = False

    def fail(self, reason: str) -> None:
        """Stop streaming and keep the partial answer."""
        self.message.interrupted = True
        self.is_streaming = False
        self.error = reason

    def status_update(self, detail: str) -> None:
        self.status = detail


async def consume_session(
    session: StreamSession,
    reducer: ConversationReducer,
) -> SessionState:
    """Drive a session to its end, forwarding every event to a reducer.

    Args:
        session: An open stream session. It is closed on return.
        reducer: Receiver of the decoded events.

    Returns:
        The session's final state.

    Raises:
        TransportError: If the connection failed. The reducer has already
            been told through ``fail``, as for any other error raised while
            reading.
    """
    async with session:
        try:
            async for event in session:
                if isinstance(event, StreamToken):
                    reducer.append_token(event.token)
                elif isinstance(event, StatusUpdate):
                    reducer.status_update(event.detail)
                elif isinstance(event, FinalAnswer):
                    reducer.finalize(event.text)
                elif isinstance(event, (ServerError, IncompleteStream)):
                    reducer.fail(event.message)
        except asyncio.CancelledError:
            reducer.fail(CANCELLED_REASON)
            raise
        except Exception as e:
            reducer.fail(str(e) or type(e).__name__)
            raise

    if session.state is SessionState.CANCELLED:
        reducer.fail(CANCELLED_REASON)

    logger.debug(f"Session consumed with state {session.state.value}")
    return session.state
