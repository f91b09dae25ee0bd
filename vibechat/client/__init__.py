"""HTTP transport for the streaming decoder.

Responsibilities:
    - Client configuration from environment (.env supported)
    - Building the conversation-send request
    - Opening the streaming response and wrapping it in a StreamSession

Built on httpx. Each ChatClient is constructed and closed explicitly; there
is no process-wide client instance.
"""

from vibechat.client.chat_client import ChatClient
from vibechat.client.config import ClientConfig, get_client_config

__all__ = ["ChatClient", "ClientConfig", "get_client_config"]
