"""Exception types raised by the streaming decoder and chat client."""


class StreamingError(Exception):
    """Base class for streaming failures."""

    pass


class TransportError(StreamingError):
    """Raised when the connection fails while the response body is being read."""

    pass


class IncompleteStreamError(StreamingError):
    """Raised when the byte stream ends inside an undelimited frame."""

    pass


class ChatAPIError(StreamingError):
    """Raised when the send request is answered with a non-200 status.

    Attributes:
        status_code: HTTP status returned by the server.
        message: Server-provided error message, if the body carried one.
    """

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message or f"HTTP error: {status_code}")
