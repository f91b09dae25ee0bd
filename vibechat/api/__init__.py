"""Development stub server for the chat streaming protocol.

Endpoints:
    - GET /health: Service health status
    - POST /conversation/{id}: Send a message, answer streamed as
      text/event-stream frames
"""

from vibechat.api.app import app, create_app

__all__ = ["app", "create_app"]
