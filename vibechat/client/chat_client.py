"""HTTP client for sending chat messages and streaming the answer.

The client is an explicitly constructed value: each instance owns its own
``httpx.AsyncClient`` and every ``send_message`` call returns an independent
StreamSession owning its own response. Nothing is shared between sessions.
"""

import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from vibechat.client.config import ClientConfig, get_client_config
from vibechat.models.schemas import ErrorResponse, SendMessageRequest
from vibechat.streaming.errors import ChatAPIError, TransportError
from vibechat.streaming.session import StreamSession

logger = logging.getLogger(__name__)


class ChatClient:
    """Client for the conversation-send endpoint.

    Usage:
        async with ChatClient() as client:
            session = await client.send_message(conversation_id, "Hello")
            async with session:
                async for event in session:
                    ...
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the chat client.

        Args:
            config: Optional client configuration.
                    Loads from environment if not provided.
            http_client: Optional preconfigured httpx client, e.g. with a
                    custom transport. It is not closed by this client.
        """
        self._config = config or get_client_config()
        self._owns_http_client = http_client is None
        self._http = http_client or self._create_http_client()

    def _create_http_client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(
            self._config.request_timeout,
            read=self._config.stream_timeout,
        )
        return httpx.AsyncClient(timeout=timeout)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def send_message(
        self,
        conversation_id: str,
        inputs: str,
        *,
        message_id: str | None = None,
        is_retry: bool = False,
        is_continue: bool = False,
        web_search: bool = False,
        files: list[str] | None = None,
    ) -> StreamSession:
        """Send a message and open its streaming answer.

        Args:
            conversation_id: Conversation to post the message to.
            inputs: The user's message.
            message_id: Message being retried or continued, if any.
            is_retry: Regenerate the answer to ``message_id``.
            is_continue: Continue the interrupted answer of ``message_id``.
            web_search: Ask the server to run a web search first.
            files: Uploaded file references to attach.

        Returns:
            An open StreamSession over the response body.

        Raises:
            ValidationError: If the message is empty.
            TransportError: If the connection cannot be established.
            ChatAPIError: If the server rejects the request.
        """
        body = SendMessageRequest(
            inputs=inputs,
            id=message_id,
            is_retry=is_retry,
            is_continue=is_continue,
            web_search=web_search,
            files=files,
        )
        request = self._http.build_request(
            "POST",
            f"{self._config.base_url}/conversation/{quote(conversation_id, safe='')}",
            json=body.model_dump(by_alias=True),
            headers={"Accept": "text/event-stream"},
        )

        try:
            response = await self._http.send(request, stream=True)
        except httpx.TransportError as e:
            logger.error(f"Failed to reach chat server: {e}")
            raise TransportError(f"Connection failed: {e}") from e

        if response.status_code != httpx.codes.OK:
            try:
                await response.aread()
            finally:
                await response.aclose()
            raise ChatAPIError(response.status_code, _error_message(response))

        logger.info(f"Streaming answer for conversation {conversation_id}")
        return StreamSession(
            response.aiter_bytes(),
            on_close=response.aclose,
            name=conversation_id,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _error_message(response: httpx.Response) -> str | None:
    """Extract ``{"message": ...}`` from an error body, if present."""
    try:
        return ErrorResponse.model_validate_json(response.content).message
    except ValidationError:
        return None
