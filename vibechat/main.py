"""Main application entry point.

RUN_MODE=serve (default) runs the stub server on port 8000.
RUN_MODE=chat sends the command-line arguments as one message to
CONVERSATION_ID and prints the answer as it streams in.
Environment variables are loaded from .env file.
"""

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

from vibechat.client import ChatClient  # noqa: E402
from vibechat.conversation import MessageReducer, consume_session  # noqa: E402
from vibechat.streaming import SessionState, StreamingError  # noqa: E402

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)


class PrintingReducer(MessageReducer):
    """Message reducer that also echoes tokens to stdout."""

    def append_token(self, token: str) -> None:
        super().append_token(token)
        print(token, end="", flush=True)


def run_server() -> None:
    """Run the stub server with uvicorn."""
    import uvicorn

    from vibechat.api.app import create_app

    app = create_app()

    logger.info("API docs available at http://localhost:8000/docs")

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


async def chat(conversation_id: str, message: str) -> int:
    """Send one message and print the streamed answer.

    Returns:
        Process exit code: 0 when the answer completed, 1 otherwise.
    """
    reducer = PrintingReducer()

    async with ChatClient() as client:
        try:
            session = await client.send_message(conversation_id, message)
            state = await consume_session(session, reducer)
        except StreamingError as e:
            print()
            logger.error(f"Chat failed: {e}")
            return 1

    print()
    if state is not SessionState.COMPLETED:
        logger.error(f"Answer {state.value}: {reducer.error}")
        return 1
    return 0


def main() -> None:
    """Application entry point.

    Set RUN_MODE=chat to send a message instead of running the server.
    """
    mode = os.getenv("RUN_MODE", "serve").lower()

    logger.info(f"Starting VibeChat in {mode} mode")

    if mode == "chat":
        conversation_id = os.getenv("CONVERSATION_ID", "")
        message = " ".join(sys.argv[1:]).strip()
        if not conversation_id or not message:
            logger.error("Usage: CONVERSATION_ID=<id> RUN_MODE=chat vibechat <message>")
            sys.exit(2)
        sys.exit(asyncio.run(chat(conversation_id, message)))
    else:
        run_server()


if __name__ == "__main__":
    main()
