"""Pydantic models shared by the client, the decoder and the stub server.

Provides type safety and validation for both the request body and the
JSON payloads carried inside text/event-stream frames.

Models:
    - SendMessageRequest: Body of the conversation-send request
    - ChatMessage: A message as displayed in the conversation
    - StreamPayload / FinalAnswerPayload / StatusPayload / ErrorPayload:
      Wire payloads, discriminated by their ``type`` field
"""

from vibechat.models.schemas import (
    ChatMessage,
    ErrorPayload,
    ErrorResponse,
    FinalAnswerPayload,
    MessageRole,
    SendMessageRequest,
    StatusPayload,
    StreamPayload,
    WirePayload,
    wire_payload_adapter,
)

__all__ = [
    "ChatMessage",
    "ErrorPayload",
    "ErrorResponse",
    "FinalAnswerPayload",
    "MessageRole",
    "SendMessageRequest",
    "StatusPayload",
    "StreamPayload",
    "WirePayload",
    "wire_payload_adapter",
]
