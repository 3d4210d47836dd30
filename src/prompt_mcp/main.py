from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .api import build_router
from .config import Settings, get_settings
from .coordinator import ChannelCoordinator
from .errors import ChannelError
from .prompts import build_prompt_registry
from .protocol import PromptEngine
from .sessions import SessionRegistry

# Configure logging for the entire prompt_mcp package
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(
        "Prompt MCP server starting up (auth %s, prompts: %s)",
        "enabled" if settings.auth_enabled else "disabled",
        ", ".join(app.state.prompts.names()),
    )
    yield
    logger.info("Prompt MCP server shutting down with %d open session(s)", len(app.state.sessions))
    await app.state.coordinator.close_all()


async def channel_error_handler(request: Request, exc: ChannelError) -> PlainTextResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return PlainTextResponse(exc.reason, status_code=exc.status_code, headers=headers)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Prompt texts are loaded here, so a missing asset fails before the server
    starts accepting connections.
    """
    settings = settings or get_settings()
    logging.getLogger("prompt_mcp").setLevel(settings.log_level.upper())

    prompts = build_prompt_registry(settings.prompts_dir)
    engine = PromptEngine(prompts, name=settings.server_name, version=settings.server_version)
    sessions = SessionRegistry()
    coordinator = ChannelCoordinator(
        sessions,
        engine,
        mount_path=settings.mount_path,
        ping_interval=settings.sse_ping_interval,
    )

    app = FastAPI(
        title="Prompt MCP Server",
        description="Essay lecture and grading prompts served over MCP",
        version=settings.server_version,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.prompts = prompts
    app.state.sessions = sessions
    app.state.coordinator = coordinator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ChannelError, channel_error_handler)
    app.include_router(build_router(settings.mount_path))
    return app
