"""Bind the prompt registry to an MCP low-level server."""

from __future__ import annotations

import logging
from typing import Any, Literal

from mcp import types
from mcp.server.lowlevel import Server
from mcp.shared.exceptions import McpError

from . import prompts
from .errors import InvalidArgumentsError, UnknownPromptError
from .prompts import PromptRegistry, PromptTemplate

logger = logging.getLogger(__name__)


class PromptMessage(types.PromptMessage):
    """MCP prompt message that also admits the system role."""

    role: Literal["system", "user", "assistant"]


class PromptResult(types.GetPromptResult):
    messages: list[PromptMessage]


class PromptServerResult(types.ServerResult):
    """ServerResult dumped through its payload's own schema.

    The session serializes responses with ``model_dump``; going through the
    ServerResult union would check messages against MCP's user/assistant
    roles instead of PromptMessage above.
    """

    def model_dump(self, **kwargs: Any) -> Any:
        return self.root.model_dump(**kwargs)

    def model_dump_json(self, **kwargs: Any) -> str:
        return self.root.model_dump_json(**kwargs)


def _to_mcp_message(message: prompts.PromptMessage) -> PromptMessage:
    return PromptMessage(
        role=message.role,
        content=types.TextContent(type="text", text=message.text),
    )


def _to_mcp_prompt(template: PromptTemplate) -> types.Prompt:
    return types.Prompt(
        name=template.name,
        title=template.title,
        description=template.description,
        arguments=[
            types.PromptArgument(
                name=argument.name,
                description=argument.description,
                required=argument.required,
            )
            for argument in template.arguments
        ],
    )


class PromptEngine:
    """Serves ``prompts/list`` and ``prompts/get`` from a PromptRegistry."""

    def __init__(self, registry: PromptRegistry, *, name: str = "prompt-mcp", version: str = "0.1.0") -> None:
        self.registry = registry
        self.name = name
        self.version = version

    async def list_prompts(self) -> list[types.Prompt]:
        return [_to_mcp_prompt(template) for template in self.registry]

    async def get_prompt(self, name: str, arguments: dict[str, Any] | None) -> PromptResult:
        try:
            template = self.registry.get(name)
            messages = template.render(arguments)
        except InvalidArgumentsError as exc:
            logger.info("Rejected %s invocation: %s", name, exc)
            raise McpError(
                types.ErrorData(code=types.INVALID_PARAMS, message=str(exc), data={"argument": exc.argument})
            ) from exc
        except UnknownPromptError as exc:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=str(exc))) from exc

        return PromptResult(
            description=template.description,
            messages=[_to_mcp_message(message) for message in messages],
        )

    async def _handle_get_prompt(self, request: types.GetPromptRequest) -> types.ServerResult:
        result = await self.get_prompt(request.params.name, request.params.arguments)
        return PromptServerResult(result)

    def build_server(self) -> Server:
        """Create a low-level MCP server with the prompt handlers registered.

        A fresh server is built per stream so each session owns its engine.
        """
        server: Server = Server(self.name, version=self.version)
        server.list_prompts()(self.list_prompts)
        server.request_handlers[types.GetPromptRequest] = self._handle_get_prompt
        return server
