"""Shared test helpers (fake engines, JSON-RPC builders)."""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import anyio
import uvicorn

from prompt_mcp.config import Settings

LECTURE_TEXT = "LECTURE INSTRUCTIONS"
GRADING_TEXT = "GRADING INSTRUCTIONS"


def make_settings(**overrides: Any) -> Settings:
    """Build Settings from alias keyword arguments, ignoring any .env file."""
    return Settings(_env_file=None, **overrides)  # type: ignore[call-arg]


def jsonrpc_request(request_id: int, method: str, params: dict | None = None) -> bytes:
    payload: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        payload["params"] = params
    return json.dumps(payload).encode()


def jsonrpc_notification(method: str) -> bytes:
    return json.dumps({"jsonrpc": "2.0", "method": method}).encode()


async def settle(rounds: int = 5) -> None:
    """Let cancelled background tasks finish unwinding."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class EchoServer:
    """Stands in for the MCP server: writes every inbound message back out."""

    def create_initialization_options(self) -> None:
        return None

    async def run(self, read_stream, write_stream, options) -> None:
        async with write_stream:
            async for message in read_stream:
                await write_stream.send(message)


class FailingServer:
    def __init__(self, exc: BaseException) -> None:
        self.exc = exc

    def create_initialization_options(self) -> None:
        return None

    async def run(self, read_stream, write_stream, options) -> None:
        raise self.exc


class FakeEngine:
    def __init__(self, server_factory=EchoServer) -> None:
        self.server_factory = server_factory
        self.built = 0

    def build_server(self):
        self.built += 1
        return self.server_factory()


async def next_event(stream, timeout: float = 5.0) -> dict:
    with anyio.fail_after(timeout):
        return await stream.__anext__()


@asynccontextmanager
async def serve(app, timeout: float = 10.0) -> AsyncIterator[str]:
    """Run ``app`` under uvicorn on an ephemeral port and yield its base URL."""
    server = uvicorn.Server(uvicorn.Config(app, host="127.0.0.1", port=0, log_level="warning"))
    task = asyncio.create_task(server.serve())
    try:
        with anyio.fail_after(timeout):
            while not server.started:
                await asyncio.sleep(0.01)
        port = server.servers[0].sockets[0].getsockname()[1]
        yield f"http://127.0.0.1:{port}"
    finally:
        server.should_exit = True
        await task


async def read_sse_event(lines: AsyncIterator[str], timeout: float = 5.0) -> tuple[str, str]:
    """Read one ``(event, data)`` pair from an SSE line iterator, skipping comments."""
    event, data = "message", []
    with anyio.fail_after(timeout):
        async for line in lines:
            if not line:
                if data:
                    return event, "\n".join(data)
                continue
            if line.startswith(":"):
                continue
            field, _, value = line.partition(":")
            value = value[1:] if value.startswith(" ") else value
            if field == "event":
                event = value
            elif field == "data":
                data.append(value)
    raise AssertionError("stream ended before a complete event")
