"""FastAPI backend for AidBridge.

This module only wires things together.  Business logic lives in
``application.use_cases`` and the in-memory ``EntityStore`` so it can be
tested without HTTP.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from aidbridge import __version__
from aidbridge.application.agent import PydanticAIReplyOracle, create_reply_agent
from aidbridge.application.use_cases.chat import ChatUseCase
from aidbridge.config import Settings, get_settings
from aidbridge.logging_config import setup_logging
from aidbridge.presentation.routes import auth, chat, items
from aidbridge.services.entity_store import EntityStore
from aidbridge.services.seed_data import seeded_store
from aidbridge.telemetry import get_instrumentation_settings, setup_telemetry


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around an explicit settings object."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create the store and the reply oracle for the app's lifetime."""
        settings.validate_runtime()

        store = seeded_store() if settings.seed_sample_data else EntityStore()
        agent = create_reply_agent(settings, instrument=get_instrumentation_settings(settings))
        oracle = PydanticAIReplyOracle(agent, history_limit=settings.reply_history_limit)

        app.state.settings = settings
        app.state.store = store
        app.state.chat_uc = ChatUseCase(store=store, oracle=oracle)

        logger.info("Application startup complete")
        yield
        logger.info("Application shutdown complete; in-memory state discarded")

    app = FastAPI(
        title="AidBridge",
        description="Matches donors of physical goods with NGOs.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(items.router)
    app.include_router(chat.router)

    setup_telemetry(app, settings)
    return app


_settings = get_settings()
setup_logging(level=_settings.log_level, json=_settings.log_json)

app = create_app(_settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("aidbridge.main:app", host="0.0.0.0", port=8000, reload=True)
