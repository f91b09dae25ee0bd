"""Unit tests for MessageReducer and consume_session."""

import asyncio

import httpx
import pytest
import pytest_check as check

from vibechat.conversation.reducer import CANCELLED_REASON, MessageReducer, consume_session
from vibechat.models.schemas import MessageRole
from vibechat.streaming.errors import TransportError
from vibechat.streaming.session import NO_TERMINAL_EVENT, SessionState, StreamSession

HEL = b'data: {"type":"stream","token":"Hel"}\n\n'
LO = b'data: {"type":"stream","token":"lo"}\n\n'
STATUS = b'data: {"type":"status","status":"started"}\n\n'
FINAL = b'data: {"type":"finalAnswer","text":"Hello!"}\n\n'


class RecordingReducer:
    """Reducer recording every call it receives."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def append_token(self, token: str) -> None:
        self.calls.append(("append_token", token))

    def finalize(self, text: str) -> None:
        self.calls.append(("finalize", text))

    def fail(self, reason: str) -> None:
        self.calls.append(("fail", reason))

    def status_update(self, detail: str) -> None:
        self.calls.append(("status_update", detail))


class TestMessageReducer:
    """Tests for the message-building reducer."""

    def test_starts_as_empty_streaming_assistant_message(self) -> None:
        """A new reducer shows an empty assistant message in progress."""
        reducer = MessageReducer(message_id="msg-1")

        check.equal(reducer.message.id, "msg-1")
        check.equal(reducer.message.role, MessageRole.ASSISTANT)
        check.equal(reducer.message.content, "")
        check.is_true(reducer.is_streaming)

    def test_generates_message_id(self) -> None:
        """Message ids are generated when not provided."""
        assert MessageReducer().message.id != MessageReducer().message.id

    def test_append_token_accumulates(self) -> None:
        """Tokens are appended in order."""
        reducer = MessageReducer()

        reducer.append_token("Hel")
        reducer.append_token("lo")

        assert reducer.message.content == "Hello"

    def test_finalize_replaces_content(self) -> None:
        """The final answer text replaces the streamed tokens."""
        reducer = MessageReducer()
        reducer.append_token("Hel")

        reducer.finalize("Hello!")

        check.equal(reducer.message.content, "Hello!")
        check.is_false(reducer.is_streaming)
        check.is_false(reducer.message.interrupted)

    def test_finalize_with_empty_text_keeps_tokens(self) -> None:
        """An empty final answer keeps what was streamed."""
        reducer = MessageReducer()
        reducer.append_token("Hello")

        reducer.finalize("")

        check.equal(reducer.message.content, "Hello")
        check.is_false(reducer.is_streaming)

    def test_fail_keeps_partial_tokens(self) -> None:
        """Failure stops streaming but keeps the partial answer."""
        reducer = MessageReducer()
        reducer.append_token("Hel")

        reducer.fail("boom")

        check.equal(reducer.message.content, "Hel")
        check.is_true(reducer.message.interrupted)
        check.is_false(reducer.is_streaming)
        check.equal(reducer.error, "boom")

    def test_status_update(self) -> None:
        """Status updates are tracked without touching the message."""
        reducer = MessageReducer()

        reducer.status_update("started")

        check.equal(reducer.status, "started")
        check.equal(reducer.message.content, "")


class TestConsumeSession:
    """Tests for driving a session into a reducer."""

    async def test_completed_session(self, make_source) -> None:
        """Every event maps onto the matching reducer call."""
        reducer = RecordingReducer()
        session = StreamSession(make_source([STATUS, HEL, LO, FINAL]))

        state = await consume_session(session, reducer)

        check.equal(state, SessionState.COMPLETED)
        check.equal(
            reducer.calls,
            [
                ("status_update", "started"),
                ("append_token", "Hel"),
                ("append_token", "lo"),
                ("finalize", "Hello!"),
            ],
        )

    async def test_server_error_calls_fail(self, make_source) -> None:
        """A server error is reported verbatim."""
        reducer = RecordingReducer()
        error = b'data: {"type":"error","message":"Quota exceeded"}\n\n'
        session = StreamSession(make_source([HEL, error]))

        state = await consume_session(session, reducer)

        check.equal(state, SessionState.FAILED)
        check.equal(reducer.calls, [("append_token", "Hel"), ("fail", "Quota exceeded")])

    async def test_incomplete_stream_calls_fail(self, make_source) -> None:
        """A stream ending early fails while keeping earlier tokens."""
        reducer = MessageReducer()
        session = StreamSession(make_source([HEL]))

        state = await consume_session(session, reducer)

        check.equal(state, SessionState.FAILED)
        check.equal(reducer.message.content, "Hel")
        check.equal(reducer.error, NO_TERMINAL_EVENT)
        check.is_false(reducer.is_streaming)

    async def test_cancelled_session_stops_streaming(self, make_source) -> None:
        """Cancellation from another task leaves the partial answer in place."""
        reducer = MessageReducer()
        source = make_source([HEL, LO, FINAL], stall_at=1)
        session = StreamSession(source)

        consumer = asyncio.create_task(consume_session(session, reducer))
        await source.stalled.wait()
        session.cancel()

        state = await consumer

        check.equal(state, SessionState.CANCELLED)
        check.equal(reducer.message.content, "Hel")
        check.equal(reducer.error, CANCELLED_REASON)
        check.is_true(source.closed)

    async def test_transport_error_reported_and_raised(self) -> None:
        """A transport fault is passed to the reducer, then re-raised."""
        reducer = RecordingReducer()

        async def broken_body():
            yield HEL
            raise httpx.RemoteProtocolError("peer closed connection")

        session = StreamSession(broken_body())

        with pytest.raises(TransportError):
            await consume_session(session, reducer)

        check.equal(reducer.calls[0], ("append_token", "Hel"))
        check.equal(reducer.calls[1][0], "fail")
        check.equal(session.state, SessionState.FAILED)

    async def test_decoding_error_reported_and_raised(self) -> None:
        """A corrupt body stops streaming and the failure is raised once."""
        reducer = MessageReducer()

        async def corrupt_body():
            yield HEL
            raise httpx.DecodingError("Error -3 while decompressing data")

        session = StreamSession(corrupt_body())

        with pytest.raises(TransportError):
            await consume_session(session, reducer)

        check.equal(reducer.message.content, "Hel")
        check.is_false(reducer.is_streaming)
        check.is_not_none(reducer.error)
        check.equal(session.state, SessionState.FAILED)

    async def test_unexpected_error_reported_and_raised(self) -> None:
        """Errors other than transport failures also stop streaming."""
        reducer = RecordingReducer()

        async def buggy_body():
            yield HEL
            raise ValueError("bad chunk")

        with pytest.raises(ValueError):
            await consume_session(StreamSession(buggy_body()), reducer)

        check.equal(reducer.calls, [("append_token", "Hel"), ("fail", "bad chunk")])

    async def test_consumer_task_cancelled(self, make_source) -> None:
        """Cancelling the consuming task stops streaming and cancels the session."""
        reducer = MessageReducer()
        source = make_source([HEL, FINAL], stall_at=1)
        session = StreamSession(source)

        consumer = asyncio.create_task(consume_session(session, reducer))
        await source.stalled.wait()
        consumer.cancel()

        with pytest.raises(asyncio.CancelledError):
            await consumer

        check.equal(reducer.message.content, "Hel")
        check.equal(reducer.error, CANCELLED_REASON)
        check.is_false(reducer.is_streaming)
        check.equal(session.state, SessionState.CANCELLED)
        check.is_true(source.closed)
