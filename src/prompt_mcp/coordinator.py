"""Two-leg channel protocol: SSE stream out, POST requests in.

A GET on the mount path opens a stream, registers a session and starts an
MCP engine bound to it. The first event tells the client where to POST its
messages; every later event carries a JSON-RPC message from the engine.
POSTs are routed to the session named by the ``sessionId`` query parameter
and answered with 202 once handed to the engine. Responses travel back on
the stream, never on the POST itself.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator

import anyio
from fastapi.responses import PlainTextResponse
from mcp import types
from pydantic import ValidationError
from sse_starlette.sse import EventSourceResponse

from .errors import BadRequestError, UnknownSessionError
from .protocol import PromptEngine
from .sessions import SessionRegistry, StreamChannel

logger = logging.getLogger(__name__)

_CLOSED_STREAM_ERRORS = (
    anyio.ClosedResourceError,
    anyio.BrokenResourceError,
    anyio.EndOfStream,
    ConnectionResetError,
    BrokenPipeError,
)


def _is_closed_stream_error(exc: BaseException) -> bool:
    """Return True when the exception only reflects a stream torn down underneath a write."""
    if isinstance(exc, BaseExceptionGroup):
        return all(_is_closed_stream_error(inner) for inner in exc.exceptions)
    return isinstance(exc, _CLOSED_STREAM_ERRORS)


class ChannelCoordinator:
    def __init__(
        self,
        registry: SessionRegistry,
        engine: PromptEngine,
        *,
        mount_path: str = "/mcp",
        ping_interval: int = 15,
    ) -> None:
        self.registry = registry
        self.engine = engine
        self.mount_path = mount_path
        self.ping_interval = ping_interval
        self._engine_tasks: dict[str, asyncio.Task] = {}

    def endpoint_for(self, session_id: str) -> str:
        return f"{self.mount_path}?sessionId={session_id}"

    def open_stream(self) -> EventSourceResponse:
        return EventSourceResponse(self.event_stream(), ping=self.ping_interval)

    async def event_stream(self) -> AsyncIterator[dict[str, Any]]:
        """Register a session and relay its engine output as SSE events.

        Registration happens on first iteration so a response that is never
        streamed leaves nothing behind in the registry.
        """
        channel = StreamChannel()
        session_id = self.registry.create(channel)
        server = self.engine.build_server()
        task = asyncio.create_task(
            self._run_engine(session_id, channel, server),
            name=f"mcp-session-{session_id}",
        )
        self._engine_tasks[session_id] = task
        channel.mark_open()

        try:
            yield {"event": "endpoint", "data": self.endpoint_for(session_id)}
            async for message in channel.outbound:
                yield {
                    "event": "message",
                    "data": message.message.model_dump_json(by_alias=True, exclude_none=True),
                }
        except anyio.ClosedResourceError:
            logger.debug("[SESSION] Stream for %s closed during shutdown", session_id)
        finally:
            self._teardown(session_id, channel, task)

    async def _run_engine(self, session_id: str, channel: StreamChannel, server: Any) -> None:
        try:
            await server.run(channel.inbound, channel.outbound_writer, server.create_initialization_options())
        except Exception as exc:
            if _is_closed_stream_error(exc):
                # Client went away while a response was in flight.
                logger.debug("[SESSION] Dropped late message for closed session %s", session_id)
            else:
                logger.exception("[SESSION] Engine for %s failed", session_id)
        finally:
            channel.outbound_writer.close()

    def _teardown(self, session_id: str, channel: StreamChannel, task: asyncio.Task) -> None:
        # Must not await: runs inside a cancelled response task on disconnect.
        self.registry.remove(session_id)
        channel.close()
        self._engine_tasks.pop(session_id, None)
        if not task.done():
            task.cancel()

    async def forward(self, session_id: str | None, body: bytes) -> PlainTextResponse:
        """Route one request-leg message to its session's engine."""
        if not session_id:
            raise BadRequestError()

        channel = self.registry.get(session_id)
        if channel is None or not channel.is_open:
            raise UnknownSessionError()

        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except ValidationError as exc:
            logger.warning("Could not parse message for session %s: %s", session_id, exc)
            return PlainTextResponse("Could not parse message", status_code=400)

        if not await channel.deliver(message):
            raise UnknownSessionError()

        return PlainTextResponse("Accepted", status_code=202)

    async def close_all(self) -> None:
        """Close every open session; used on shutdown."""
        channels = self.registry.drain()
        tasks = [task for sid, task in list(self._engine_tasks.items()) if sid in channels]
        for channel in channels.values():
            channel.close()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Closed %d session(s)", len(channels))
