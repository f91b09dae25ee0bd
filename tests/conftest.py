"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - make_source: Factory for in-memory chunk sources that can stall
    - stub_app: Fresh stub server application
    - async_client: HTTPX client wired to the stub server
    - chat_client: ChatClient talking to the stub server in-process
"""

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator, Callable, Iterable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from vibechat.api.app import create_app
from vibechat.client import ChatClient, ClientConfig


class FakeChunkSource:
    """In-memory response body.

    Chunks from index ``stall_at`` onward are only released once
    ``release`` is set, simulating a server that stops sending. ``stalled``
    is set as soon as a read is waiting on ``release``.

    Attributes:
        reads: Number of chunks handed out so far.
        closed: True once the body iterator has been finalized.
    """

    def __init__(self, chunks: Iterable[bytes], stall_at: int | None = None) -> None:
        self.chunks = list(chunks)
        self.stall_at = stall_at
        self.release = asyncio.Event()
        self.stalled = asyncio.Event()
        self.reads = 0
        self.closed = False

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        try:
            for index, chunk in enumerate(self.chunks):
                if self.stall_at is not None and index >= self.stall_at:
                    self.stalled.set()
                    await self.release.wait()
                self.reads += 1
                yield chunk
        finally:
            self.closed = True


@pytest.fixture
def make_source() -> Callable[..., FakeChunkSource]:
    """Return a factory building FakeChunkSource instances."""
    return FakeChunkSource


@pytest.fixture
def stub_app() -> FastAPI:
    """Create a fresh stub server app so dependency overrides stay local."""
    return create_app()


@pytest.fixture
async def async_client(stub_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for stub server testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=stub_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def chat_client(async_client: AsyncClient) -> AsyncGenerator[ChatClient]:
    """Create a ChatClient whose requests are served by the stub app.

    Yields:
        ChatClient using the in-process transport.
    """
    config = ClientConfig(base_url="http://test")
    async with ChatClient(config=config, http_client=async_client) as client:
        yield client
