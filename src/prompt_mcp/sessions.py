"""Session registry for open MCP streams.

Each open stream owns a StreamChannel: an inbound memory stream carrying
client messages into the protocol engine and an outbound memory stream
carrying engine messages back onto the SSE response.
"""

from __future__ import annotations

import logging
import threading
import uuid
from enum import Enum
from typing import Callable

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from mcp import types
from mcp.shared.message import SessionMessage

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    OPENING = "opening"
    OPEN = "open"
    CLOSED = "closed"


class StreamChannel:
    """Streaming handle bound to one session."""

    def __init__(self) -> None:
        self.state = SessionState.OPENING
        self._inbound_writer: MemoryObjectSendStream[SessionMessage | Exception]
        self.inbound: MemoryObjectReceiveStream[SessionMessage | Exception]
        self.outbound_writer: MemoryObjectSendStream[SessionMessage]
        self.outbound: MemoryObjectReceiveStream[SessionMessage]
        self._inbound_writer, self.inbound = anyio.create_memory_object_stream(0)
        self.outbound_writer, self.outbound = anyio.create_memory_object_stream(0)

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    def mark_open(self) -> None:
        if self.state is SessionState.OPENING:
            self.state = SessionState.OPEN

    async def deliver(self, message: types.JSONRPCMessage) -> bool:
        """Hand a client message to the engine; False once the channel is closed."""
        if self.state is SessionState.CLOSED:
            return False
        try:
            await self._inbound_writer.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            return False
        return True

    def close(self) -> None:
        """Close both directions. Safe to call more than once."""
        if self.state is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        self._inbound_writer.close()
        self.outbound.close()


class SessionRegistry:
    """Maps session ids to open stream channels.

    Insert, lookup and removal are guarded by a lock and never suspend, so
    they stay safe inside cancelled teardown paths.
    """

    def __init__(self, id_factory: Callable[[], str] | None = None) -> None:
        self._channels: dict[str, StreamChannel] = {}
        self._lock = threading.Lock()
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

    def create(self, channel: StreamChannel) -> str:
        with self._lock:
            session_id = self._id_factory()
            while session_id in self._channels:
                session_id = self._id_factory()
            self._channels[session_id] = channel
            total = len(self._channels)
        logger.info("[SESSION] Opened %s (total: %d)", session_id, total)
        return session_id

    def get(self, session_id: str) -> StreamChannel | None:
        with self._lock:
            return self._channels.get(session_id)

    def remove(self, session_id: str) -> StreamChannel | None:
        with self._lock:
            channel = self._channels.pop(session_id, None)
            total = len(self._channels)
        if channel is not None:
            logger.info("[SESSION] Closed %s (total: %d)", session_id, total)
        return channel

    def drain(self) -> dict[str, StreamChannel]:
        """Remove and return every registered channel."""
        with self._lock:
            channels, self._channels = self._channels, {}
        if channels:
            logger.info("[SESSION] Drained %d session(s)", len(channels))
        return channels

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels)
