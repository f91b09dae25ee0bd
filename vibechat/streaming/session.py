"""Cancellable, pull-based event sequence over one streaming response.

A StreamSession ties the frame assembler and event parser to a single open
response body:

1. **Pull-based** - ``next_event()`` reads exactly as many chunks as needed
   for the next event. Nothing is read ahead, so a slow consumer applies
   backpressure to the connection.

2. **One terminal event** - FinalAnswer, ServerError or a synthesized
   IncompleteStream ends the session. The transport is released before the
   terminal event is handed to the caller, and every later call returns None.

3. **Cooperative cancellation** - ``cancel()`` only sets a flag, which is
   checked between frames. A read that is already waiting on the network is
   aborted rather than drained, and buffered frames are discarded.

4. **Malformed frames are not fatal** - ProtocolErrors are logged, counted
   and skipped.
"""

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable
from enum import Enum

import httpx

from vibechat.streaming.errors import IncompleteStreamError, TransportError
from vibechat.streaming.events import (
    Event,
    FinalAnswer,
    IncompleteStream,
    ProtocolError,
    ServerError,
    parse_frame,
)
from vibechat.streaming.frames import iter_frames

logger = logging.getLogger(__name__)

NO_TERMINAL_EVENT = "Stream ended without a final answer"


class SessionState(str, Enum):
    """Lifecycle state of a stream session."""

    OPEN = "open"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


async def _read_one(chunks: AsyncIterator[bytes]) -> bytes | None:
    try:
        return await chunks.__anext__()
    except StopAsyncIteration:
        return None


class StreamSession:
    """Lazy sequence of events decoded from one streaming response.

    Usage:
        async with session:
            async for event in session:
                ...

    Args:
        chunks: Raw response body chunks.
        on_close: Coroutine function releasing the connection. Called once,
            when the session reaches any final state.
        name: Label used in log messages.
    """

    def __init__(
        self,
        chunks: AsyncIterable[bytes],
        *,
        on_close: Callable[[], Awaitable[None]] | None = None,
        name: str | None = None,
    ) -> None:
        self._chunks = aiter(chunks)
        self._on_close = on_close
        self._name = name or hex(id(self))

        self._state = SessionState.OPEN
        self._error: ServerError | IncompleteStream | Exception | None = None
        self._dropped_frames = 0
        self._cancelled = asyncio.Event()
        self._busy = False
        self._released = False

        self._reader = self._read_chunks()
        self._frames = iter_frames(self._reader)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state is not SessionState.OPEN

    @property
    def error(self) -> ServerError | IncompleteStream | Exception | None:
        """The reason the session failed, if it did."""
        return self._error

    @property
    def dropped_frames(self) -> int:
        """Number of malformed frames skipped so far."""
        return self._dropped_frames

    def cancel(self) -> None:
        """Request cancellation.

        Takes effect at the next frame boundary, or immediately if a read is
        in flight. No event is delivered after the request is observed.
        """
        if self._state is SessionState.OPEN and not self._cancelled.is_set():
            logger.debug(f"Cancellation requested for session {self._name}")
            self._cancelled.set()

    async def aclose(self) -> None:
        """Cancel the session and release the connection."""
        self.cancel()
        if not self._busy:
            await self._finish(SessionState.CANCELLED)

    async def next_event(self) -> Event | None:
        """Decode the next event.

        Returns:
            The next event, or None once the session is exhausted.

        Raises:
            TransportError: If reading the response body fails. Any other
                error from the body also fails the session before it is
                re-raised.
        """
        if self._busy:
            raise RuntimeError("next_event() called while another read is in progress")

        self._busy = True
        try:
            return await self._next_event()
        except asyncio.CancelledError:
            # The consuming task itself was cancelled
            self.cancel()
            await self._finish(SessionState.CANCELLED)
            raise
        finally:
            self._busy = False

    async def _next_event(self) -> Event | None:
        while self._state is SessionState.OPEN:
            if self._cancelled.is_set():
                await self._finish(SessionState.CANCELLED)
                return None

            try:
                frame = await anext(self._frames)
            except StopAsyncIteration:
                frame = None
            except IncompleteStreamError as e:
                if self._cancelled.is_set():
                    continue
                return await self._fail(IncompleteStream(message=str(e)))
            except TransportError as e:
                logger.error(f"Session {self._name} transport failure: {e}")
                await self._finish(SessionState.FAILED, e)
                raise
            except Exception as e:
                logger.exception(f"Session {self._name} failed while decoding: {e}")
                await self._finish(SessionState.FAILED, e)
                raise

            if self._cancelled.is_set():
                continue
            if frame is None:
                return await self._fail(IncompleteStream(message=NO_TERMINAL_EVENT))

            event = parse_frame(frame)
            if event is None:
                continue
            if isinstance(event, ProtocolError):
                self._dropped_frames += 1
                logger.warning(f"Session {self._name} dropped malformed frame: {event.message}")
                continue

            if isinstance(event, FinalAnswer):
                await self._finish(SessionState.COMPLETED)
            elif isinstance(event, ServerError):
                await self._fail(event)
            return event

        return None

    def __aiter__(self) -> "StreamSession":
        return self

    async def __anext__(self) -> Event:
        event = await self.next_event()
        if event is None:
            raise StopAsyncIteration
        return event

    async def __aenter__(self) -> "StreamSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _read_chunks(self) -> AsyncIterator[bytes]:
        """Yield transport chunks, aborting a pending read on cancellation."""
        waiter = asyncio.ensure_future(self._cancelled.wait())
        try:
            while True:
                read = asyncio.ensure_future(_read_one(self._chunks))
                try:
                    await asyncio.wait({read, waiter}, return_when=asyncio.FIRST_COMPLETED)
                finally:
                    if not read.done():
                        read.cancel()
                        await asyncio.wait({read})

                if read.cancelled():
                    logger.debug(f"Aborted in-flight read for session {self._name}")
                    return

                try:
                    chunk = read.result()
                except (httpx.RequestError, OSError) as e:
                    raise TransportError(f"Failed reading response stream: {e}") from e

                if chunk is None:
                    return
                yield chunk
        finally:
            waiter.cancel()

    async def _fail(self, event: ServerError | IncompleteStream) -> Event:
        await self._finish(SessionState.FAILED, event)
        return event

    async def _finish(
        self,
        state: SessionState,
        error: ServerError | IncompleteStream | Exception | None = None,
    ) -> None:
        if self._state is SessionState.OPEN:
            self._state = state
            self._error = error
            logger.info(f"Session {self._name} {state.value}")
        await self._release()

    async def _release(self) -> None:
        if self._released:
            return
        self._released = True

        await self._frames.aclose()
        await self._reader.aclose()
        if (close_chunks := getattr(self._chunks, "aclose", None)) is not None:
            await close_chunks()
        if self._on_close is not None:
            await self._on_close()
