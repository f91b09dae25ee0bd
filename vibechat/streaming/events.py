"""Typed events decoded from text/event-stream frames.

Each frame carries one JSON payload spread over one or more ``data:`` lines.
The payload's ``type`` field selects the event:

    stream       -> StreamToken
    finalAnswer  -> FinalAnswer
    status       -> StatusUpdate
    error        -> ServerError

Anything else becomes a ProtocolError, which the session drops. Frames with
no ``data:`` line at all (comments, keep-alives) produce no event.
"""

import logging

from pydantic import BaseModel, ConfigDict, ValidationError

from vibechat.models.schemas import (
    FinalAnswerPayload,
    StatusPayload,
    StreamPayload,
    wire_payload_adapter,
)

logger = logging.getLogger(__name__)

DATA_FIELD = "data:"


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class StreamToken(_Event):
    """A partial answer token to append to the displayed message."""

    token: str


class FinalAnswer(_Event):
    """The complete answer. Terminal."""

    text: str


class StatusUpdate(_Event):
    """Progress information, UI-only."""

    detail: str


class ServerError(_Event):
    """Failure reported by the server. Terminal."""

    message: str


class IncompleteStream(_Event):
    """The stream ended without a terminal event. Synthesized, terminal."""

    message: str


class ProtocolError(_Event):
    """A frame that could not be decoded."""

    message: str
    frame: str


Event = StreamToken | FinalAnswer | StatusUpdate | ServerError | IncompleteStream


def extract_data(frame: str) -> str | None:
    """Join the ``data:`` lines of a frame.

    Args:
        frame: Decoded frame text without its trailing delimiter.

    Returns:
        The payload with lines joined by newline, or None if the frame has
        no data lines.
    """
    lines: list[str] = []
    for line in frame.split("\n"):
        if not line.startswith(DATA_FIELD):
            continue
        value = line[len(DATA_FIELD) :]
        lines.append(value[1:] if value.startswith(" ") else value)

    if not lines:
        return None
    return "\n".join(lines)


def parse_frame(frame: str) -> Event | ProtocolError | None:
    """Decode one frame into an event.

    Args:
        frame: Decoded frame text without its trailing delimiter.

    Returns:
        The decoded event, a ProtocolError for malformed payloads, or None
        when the frame carries no data.
    """
    data = extract_data(frame)
    if data is None:
        return None

    try:
        payload = wire_payload_adapter.validate_json(data)
    except ValidationError as e:
        error = e.errors(include_url=False)[0]
        logger.debug(f"Malformed frame payload: {error['msg']}")
        return ProtocolError(message=error["msg"], frame=frame)

    if isinstance(payload, StreamPayload):
        return StreamToken(token=payload.token)
    if isinstance(payload, FinalAnswerPayload):
        return FinalAnswer(text=payload.text)
    if isinstance(payload, StatusPayload):
        return StatusUpdate(detail=payload.status)
    return ServerError(message=payload.message)
