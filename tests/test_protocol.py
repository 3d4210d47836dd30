"""Tests for the MCP prompt engine adapter."""

from __future__ import annotations

import warnings

import pytest
from mcp import types
from mcp.shared.exceptions import McpError

from prompt_mcp.protocol import PromptEngine
from prompt_mcp.prompts import SYSTEM_GUARD
from tests.helpers import LECTURE_TEXT


@pytest.fixture
def engine(prompt_registry):
    return PromptEngine(prompt_registry)


class TestListPrompts:
    @pytest.mark.asyncio
    async def test_describes_both_templates(self, engine):
        prompts = await engine.list_prompts()

        by_name = {prompt.name: prompt for prompt in prompts}
        assert set(by_name) == {"essay-lecture", "essay-grading"}
        assert by_name["essay-lecture"].title == "作文讲义"
        assert [argument.name for argument in by_name["essay-lecture"].arguments] == ["cover_title", "material_text"]
        assert [argument.name for argument in by_name["essay-grading"].arguments] == ["material_text", "student_essay"]
        assert all(argument.required for prompt in prompts for argument in prompt.arguments)


class TestGetPrompt:
    @pytest.mark.asyncio
    async def test_returns_text_messages_with_roles(self, engine):
        result = await engine.get_prompt("essay-lecture", {"cover_title": "T", "material_text": "M"})

        assert isinstance(result, types.GetPromptResult)
        assert [message.role for message in result.messages] == ["system", "system", "user"]
        assert [message.content.text for message in result.messages] == [
            SYSTEM_GUARD,
            LECTURE_TEXT,
            "【封面主标题】\nT\n\n【作文材料原文】\nM",
        ]
        assert all(message.content.type == "text" for message in result.messages)

    @pytest.mark.asyncio
    async def test_invalid_arguments_become_protocol_error(self, engine):
        with pytest.raises(McpError) as excinfo:
            await engine.get_prompt("essay-lecture", {"cover_title": "", "material_text": "M"})

        assert excinfo.value.error.code == types.INVALID_PARAMS
        assert "cover_title" in excinfo.value.error.message
        assert excinfo.value.error.data == {"argument": "cover_title"}

    @pytest.mark.asyncio
    async def test_unknown_prompt_becomes_protocol_error(self, engine):
        with pytest.raises(McpError) as excinfo:
            await engine.get_prompt("essay-summary", {})

        assert excinfo.value.error.code == types.INVALID_PARAMS


class TestBuildServer:
    def test_registers_prompt_handlers(self, engine):
        server = engine.build_server()

        assert server.name == "prompt-mcp"
        assert types.ListPromptsRequest in server.request_handlers
        assert types.GetPromptRequest in server.request_handlers

    def test_each_call_builds_a_fresh_server(self, engine):
        assert engine.build_server() is not engine.build_server()


class TestGetPromptWire:
    """Responses as the MCP session serializes them."""

    @pytest.mark.asyncio
    async def test_system_roles_serialize_without_warnings(self, engine):
        handler = engine.build_server().request_handlers[types.GetPromptRequest]
        request = types.GetPromptRequest(
            method="prompts/get",
            params=types.GetPromptRequestParams(
                name="essay-lecture", arguments={"cover_title": "T", "material_text": "M"}
            ),
        )

        response = await handler(request)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            dumped = response.model_dump(by_alias=True, mode="json", exclude_none=True)

        assert [message["role"] for message in dumped["messages"]] == ["system", "system", "user"]
        assert dumped["messages"][2]["content"] == {"type": "text", "text": "【封面主标题】\nT\n\n【作文材料原文】\nM"}
        assert dumped["description"] == "生成作文材料的深度思辨与写作指导HTML讲义。"

    @pytest.mark.asyncio
    async def test_invalid_arguments_from_handler(self, engine):
        handler = engine.build_server().request_handlers[types.GetPromptRequest]
        request = types.GetPromptRequest(
            method="prompts/get",
            params=types.GetPromptRequestParams(name="essay-grading", arguments={"material_text": "M"}),
        )

        with pytest.raises(McpError) as excinfo:
            await handler(request)

        assert excinfo.value.error.data == {"argument": "student_essay"}
