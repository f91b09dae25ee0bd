"""VibeChat - streaming chat client.

Decodes the text/event-stream answers of the chat server into ordered,
typed events and applies them to the conversation being displayed.

Components:
    - streaming: Frame assembly, event parsing and cancellable sessions
    - client: httpx transport issuing the conversation-send request
    - conversation: Reducers turning events into the displayed message
    - models: Request and wire payload schemas
    - api: FastAPI stub server speaking the same protocol, for development
"""

__version__ = "0.1.0"
