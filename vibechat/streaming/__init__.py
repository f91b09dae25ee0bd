"""Streaming chat-response decoder.

Turns the arbitrarily-chunked body of a text/event-stream response into
ordered, typed events.

Pipeline:
    - frames: bytes -> complete ``\\n\\n``-delimited frames (UTF-8 safe)
    - events: frame -> StreamToken / FinalAnswer / StatusUpdate / ServerError
    - session: pull-based, cancellable event sequence with exactly one
      terminal event

The pipeline does no I/O of its own; the chat client supplies the chunks.
"""

from vibechat.streaming.errors import (
    ChatAPIError,
    IncompleteStreamError,
    StreamingError,
    TransportError,
)
from vibechat.streaming.events import (
    Event,
    FinalAnswer,
    IncompleteStream,
    ProtocolError,
    ServerError,
    StatusUpdate,
    StreamToken,
    parse_frame,
)
from vibechat.streaming.frames import FrameAssembler, iter_frames
from vibechat.streaming.session import SessionState, StreamSession

__all__ = [
    "ChatAPIError",
    "Event",
    "FinalAnswer",
    "FrameAssembler",
    "IncompleteStream",
    "IncompleteStreamError",
    "ProtocolError",
    "ServerError",
    "SessionState",
    "StatusUpdate",
    "StreamSession",
    "StreamToken",
    "StreamingError",
    "TransportError",
    "iter_frames",
    "parse_frame",
]
