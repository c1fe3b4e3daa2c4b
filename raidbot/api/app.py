"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from raidbot.api.dependencies import set_session_manager
from raidbot.api.routes import api_router
from raidbot.config import BotConfig
from raidbot.core.clock import Clock
from raidbot.engine.session_manager import SessionManager
from raidbot.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    config: BotConfig | None = None,
    autostart: bool = True,
    clock: Clock | None = None,
) -> FastAPI:
    """Build and return the fully-configured FastAPI application."""
    if config is None:
        config = BotConfig()

    _config = config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_config.log_level)
        manager = SessionManager(_config, clock=clock)
        set_session_manager(manager)
        if autostart:
            manager.start()
            logger.info("API server started, session running.")
        else:
            logger.info("API server started, session idle.")
        yield
        manager.stop()
        set_session_manager(None)
        logger.info("API server shutting down.")

    app = FastAPI(
        title="raidbot",
        description=(
            "Combat and movement coordination engine: control and inspection API.\n\n"
            "## API Groups\n\n"
            "- **State** - Live session state: player, monsters, tracked attack states, events\n"
            "- **Control** - Session lifecycle: start, pause, resume, stop, reset\n"
            "- **Config** - Read-only bot configuration\n"
        ),
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "State", "description": "Live session state polled by a dashboard."},
            {"name": "Control", "description": "Session lifecycle controls acting through the cooperative pause gate."},
            {"name": "Config", "description": "Read-only bot configuration parameters."},
        ],
    )

    # CORS: allow any origin in dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app
