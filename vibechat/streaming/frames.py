"""Frame assembly for text/event-stream response bodies.

The network layer hands us bytes split at arbitrary points, including the
middle of a multi-byte UTF-8 character. Bytes are buffered untouched and only
decoded once a complete ``\\n\\n``-terminated frame is available, so a
character split across two chunks is never corrupted.
"""

import logging
from collections.abc import AsyncIterable, AsyncIterator

from vibechat.streaming.errors import IncompleteStreamError

logger = logging.getLogger(__name__)

FRAME_DELIMITER = b"\n\n"


class FrameAssembler:
    """Incremental splitter turning raw chunks into complete frames.

    The buffer only ever holds the un-terminated tail of the stream: every
    complete frame is removed from it as soon as its delimiter arrives.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet part of a complete frame."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> list[str]:
        """Append a chunk and return every frame it completes.

        Args:
            chunk: Raw bytes as received from the transport.

        Returns:
            Decoded frame texts in arrival order, without delimiters.
        """
        if not chunk:
            return []

        self._buffer.extend(chunk)
        if b"\r" in self._buffer:
            # A lone trailing \r stays buffered until its \n arrives
            self._buffer = self._buffer.replace(b"\r\n", b"\n")

        frames: list[str] = []
        while (index := self._buffer.find(FRAME_DELIMITER)) >= 0:
            frames.append(self._buffer[:index].decode("utf-8", errors="replace"))
            del self._buffer[: index + len(FRAME_DELIMITER)]
        return frames

    def finish(self) -> None:
        """Signal end of input and check nothing was left undelimited.

        Raises:
            IncompleteStreamError: If non-whitespace bytes remain buffered.
        """
        remainder = bytes(self._buffer)
        self._buffer.clear()

        if remainder.strip():
            logger.debug(f"Stream ended with {len(remainder)} undelimited bytes")
            raise IncompleteStreamError(
                f"Stream ended inside an unterminated frame ({len(remainder)} bytes)"
            )


async def iter_frames(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Lazily yield complete frames from an async chunk source.

    Reads a chunk only when no complete frame is buffered.

    Raises:
        IncompleteStreamError: If the source ends inside a frame.
    """
    assembler = FrameAssembler()
    async for chunk in chunks:
        for frame in assembler.feed(chunk):
            yield frame
    assembler.finish()
