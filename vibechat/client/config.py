"""Chat client configuration with environment variable loading.

Pydantic-based configuration for the streaming chat client.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class ClientConfig(BaseModel):
    """Configuration for the chat client.

    Attributes:
        base_url: Chat server origin, without trailing slash.
        request_timeout: Connect/write/pool timeout in seconds.
        stream_timeout: Maximum wait between two chunks of a streaming
            response, in seconds. Generation can pause for a while, so this
            is much longer than request_timeout.
    """

    base_url: str = Field(
        default_factory=lambda: os.getenv("VIBECHAT_BASE_URL", "http://localhost:5173"),
        validate_default=True,
        description="Chat server origin",
    )
    request_timeout: float = Field(
        default_factory=lambda: os.getenv("VIBECHAT_REQUEST_TIMEOUT", "30"),
        gt=0,
        validate_default=True,
        description="Timeout for establishing the request, in seconds",
    )
    stream_timeout: float = Field(
        default_factory=lambda: os.getenv("VIBECHAT_STREAM_TIMEOUT", "300"),
        gt=0,
        validate_default=True,
        description="Read timeout between streamed chunks, in seconds",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) origin and drop any trailing slash."""
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                "Base URL must start with http:// or https://. Set VIBECHAT_BASE_URL in .env"
            )
        return v


def get_client_config() -> ClientConfig:
    """Create client configuration from environment.

    Returns:
        Configured ClientConfig instance.

    Raises:
        ValidationError: If an environment value is invalid.
    """
    return ClientConfig()
