from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


class MessageRole(str, Enum):
    """Speaker of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class SendMessageRequest(BaseModel):
    """Request body for the conversation-send endpoint.

    Serialized with camelCase keys (``isRetry``, ``webSearch``...) to match
    the server contract.

    Attributes:
        inputs: The user's message.
        id: Id of the message being retried or continued, if any.
        is_retry: Regenerate the answer to an existing message.
        is_continue: Continue a previously interrupted answer.
        web_search: Let the server augment the answer with a web search.
        files: Uploaded file references attached to the message.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    inputs: str = Field(..., min_length=1)
    id: str | None = None
    is_retry: bool = False
    is_continue: bool = False
    web_search: bool = False
    files: list[str] | None = None

    @field_validator("inputs", mode="before")
    @classmethod
    def strip_inputs(cls, v: str) -> str:
        """Strip whitespace from the message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class ChatMessage(BaseModel):
    """A single message as displayed in the conversation.

    Attributes:
        id: Message identifier.
        role: The speaker (user, assistant, or system).
        content: The message text accumulated so far.
        interrupted: True when generation stopped before a final answer.
    """

    id: str
    role: MessageRole
    content: str = ""
    interrupted: bool = False


class ErrorResponse(BaseModel):
    """JSON body of a rejected request."""

    message: str


class _Payload(BaseModel):
    def to_sse(self) -> str:
        """Encode this payload as one text/event-stream frame."""
        return f"data: {self.model_dump_json()}\n\n"


class StreamPayload(_Payload):
    """Partial answer token."""

    type: Literal["stream"] = "stream"
    token: str


class FinalAnswerPayload(_Payload):
    """Complete answer text, sent once at the end of generation."""

    type: Literal["finalAnswer"] = "finalAnswer"
    text: str = ""


class StatusPayload(_Payload):
    """Progress information for the UI (e.g. ``started``, ``title``)."""

    type: Literal["status"] = "status"
    status: str = ""


class ErrorPayload(_Payload):
    """Generation failed on the server."""

    type: Literal["error"] = "error"
    message: str = "The server reported an error"


WirePayload = Annotated[
    StreamPayload | FinalAnswerPayload | StatusPayload | ErrorPayload,
    Field(discriminator="type"),
]

wire_payload_adapter: TypeAdapter[WirePayload] = TypeAdapter(WirePayload)
