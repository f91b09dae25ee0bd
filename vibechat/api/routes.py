"""Conversation-send endpoint of the development stub server.

Streams a scripted answer in the same text/event-stream format as the real
chat server, so the client can be exercised without a model backend.
"""

import logging
import re
from collections.abc import AsyncIterator, Callable

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from vibechat.models.schemas import (
    FinalAnswerPayload,
    SendMessageRequest,
    StatusPayload,
    StreamPayload,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversation", tags=["conversation"])

AnswerScript = Callable[[str, SendMessageRequest], AsyncIterator[str]]


async def echo_script(
    conversation_id: str,
    request: SendMessageRequest,
) -> AsyncIterator[str]:
    """Answer by echoing the message back one word at a time.

    Yields:
        Encoded frames: a status, one token per word, then the final answer.
    """
    answer = f"You said: {request.inputs}"

    yield StatusPayload(status="started").to_sse()
    for token in re.findall(r"\S+\s*", answer):
        yield StreamPayload(token=token).to_sse()
    yield FinalAnswerPayload(text=answer).to_sse()


def get_answer_script() -> AnswerScript:
    """Provide the script used to answer messages.

    Tests override this dependency to stream errors or malformed frames.
    """
    return echo_script


@router.post("/{conversation_id}")
async def send_message(
    conversation_id: str,
    request: SendMessageRequest,
    script: AnswerScript = Depends(get_answer_script),
) -> StreamingResponse:
    """Post a message and stream the answer.

    Args:
        conversation_id: Target conversation.
        request: Message body (camelCase keys).
        script: Answer generator.

    Returns:
        A text/event-stream response.

    Raises:
        422: Empty or malformed message body.
    """
    logger.info(f"Streaming stub answer for conversation {conversation_id}")

    return StreamingResponse(
        script(conversation_id, request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
