"""FastAPI application factory for the development stub server.

The stub speaks the chat streaming protocol without a model behind it:
every message is answered by an answer script, the word-by-word echo unless
another script is installed.
"""

import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vibechat import __version__
from vibechat.api.routes import AnswerScript, get_answer_script
from vibechat.api.routes import router as conversation_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Log which answer script the stub server runs with."""
    script = app.dependency_overrides.get(get_answer_script, get_answer_script)()
    logger.info(f"Stub server answering with {getattr(script, '__name__', script)}")
    yield
    logger.info("Stub server stopped")


def create_app(script_factory: Callable[[], AnswerScript] | None = None) -> FastAPI:
    """Create the stub server.

    Args:
        script_factory: Returns the answer script used for every message.
            Defaults to the echo script.

    Returns:
        FastAPI application serving ``/conversation/{id}`` and ``/health``.
    """
    application = FastAPI(
        title="VibeChat Stub Server",
        description="Answers every message with a scripted text/event-stream response.",
        version=__version__,
        lifespan=lifespan,
    )

    # Browser clients run on another origin during development
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(conversation_router)
    if script_factory is not None:
        application.dependency_overrides[get_answer_script] = script_factory

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "vibechat-stub"}

    return application


app = create_app()
