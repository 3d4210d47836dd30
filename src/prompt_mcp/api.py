from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from sse_starlette.sse import EventSourceResponse

from .auth import require_bearer_token
from .coordinator import ChannelCoordinator

logger = logging.getLogger(__name__)


def get_coordinator(request: Request) -> ChannelCoordinator:
    return request.app.state.coordinator


def build_router(mount_path: str = "/mcp") -> APIRouter:
    """Liveness plus the stream and request legs on ``mount_path``."""
    router = APIRouter()

    @router.get("/", response_class=PlainTextResponse)
    def liveness() -> str:
        return "OK"

    @router.get(mount_path, dependencies=[Depends(require_bearer_token)])
    async def open_stream(
        coordinator: ChannelCoordinator = Depends(get_coordinator),
    ) -> EventSourceResponse:
        return coordinator.open_stream()

    @router.post(mount_path, dependencies=[Depends(require_bearer_token)])
    async def post_message(
        request: Request,
        session_id: str | None = Query(default=None, alias="sessionId"),
        coordinator: ChannelCoordinator = Depends(get_coordinator),
    ) -> PlainTextResponse:
        body = await request.body()
        return await coordinator.forward(session_id, body)

    return router
