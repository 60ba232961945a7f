# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

from __future__ import annotations

import json
from typing import Any

from mcp.shared.memory import create_connected_server_and_client_session
import mcp.types as types
import pytest

from mcp_starter.capabilities import BONUS_TOOL_NAME, bonus_tool_flag
from mcp_starter.capabilities.tools import FEEDBACK_URL
from mcp_starter.server import create_server


EXPECTED_TOOLS = [
    "ask_llm",
    "confirm_action",
    "get_feedback",
    "get_weather",
    "hello",
    "load_bonus_tool",
    "long_task",
]


def _text(result: types.CallToolResult) -> str:
    assert result.content
    return result.content[0].text


def test_factory_registers_example_tools(server):
    assert server.tool_names == EXPECTED_TOOLS

    hello = server.get_tool("hello")
    assert hello.title == "Say Hello"
    assert hello.annotations.readOnlyHint is True
    assert hello.inputSchema["required"] == ["name"]

    ask_llm = server.get_tool("ask_llm")
    assert ask_llm.inputSchema["properties"]["maxTokens"]["default"] == 100
    assert ask_llm.inputSchema["required"] == ["prompt"]

    assert server.get_tool("get_feedback").annotations.openWorldHint is True


def test_factory_builds_independent_instances(fast_config):
    first = create_server(fast_config)
    second = create_server(fast_config)
    assert first is not second
    assert first._tool_specs is not second._tool_specs


@pytest.mark.anyio
async def test_hello(server):
    async with create_connected_server_and_client_session(server) as client:
        result = await client.call_tool("hello", {"name": "Alice"})

    assert not result.isError
    assert _text(result) == "Hello, Alice! Welcome to MCP."


@pytest.mark.anyio
async def test_get_weather_returns_structured_content(server):
    async with create_connected_server_and_client_session(server) as client:
        result = await client.call_tool("get_weather", {"location": "Lisbon"})

    weather = result.structuredContent
    assert weather["location"] == "Lisbon"
    assert weather["unit"] == "celsius"
    assert 15 <= weather["temperature"] <= 35
    assert 40 <= weather["humidity"] <= 80
    assert weather["conditions"] in {"sunny", "cloudy", "rainy", "windy"}
    assert json.loads(_text(result)) == weather


@pytest.mark.anyio
async def test_ask_llm_without_sampling_is_flagged(server):
    async with create_connected_server_and_client_session(server) as client:
        result = await client.call_tool("ask_llm", {"prompt": "What is 6 * 7?"})

    assert result.isError
    assert _text(result).startswith("Sampling not supported or failed:")


@pytest.mark.anyio
async def test_ask_llm_uses_client_sampling(server):
    seen: list[types.CreateMessageRequestParams] = []

    async def sampling_callback(context: Any, params: types.CreateMessageRequestParams) -> types.CreateMessageResult:
        seen.append(params)
        return types.CreateMessageResult(
            role="assistant",
            content=types.TextContent(type="text", text="42"),
            model="test-model",
            stopReason="endTurn",
        )

    async with create_connected_server_and_client_session(server, sampling_callback=sampling_callback) as client:
        result = await client.call_tool("ask_llm", {"prompt": "What is 6 * 7?", "maxTokens": 10})

    assert not result.isError
    assert _text(result) == "LLM Response: 42"
    assert seen[0].maxTokens == 10
    assert seen[0].messages[0].content.text == "What is 6 * 7?"


@pytest.mark.anyio
async def test_long_task_reports_progress_in_order(server):
    updates: list[tuple[float, float | None]] = []

    async def on_progress(progress: float, total: float | None, message: str | None) -> None:
        updates.append((progress, total))

    async with create_connected_server_and_client_session(server) as client:
        result = await client.call_tool("long_task", {"taskName": "build"}, progress_callback=on_progress)

    assert _text(result) == 'Task "build" completed successfully after 5 steps!'
    assert [progress for progress, _ in updates] == [0.0, 0.2, 0.4, 0.6, 0.8]
    assert all(total == 1.0 for _, total in updates)


@pytest.mark.anyio
async def test_load_bonus_tool_is_idempotent(server):
    notifications: list[Any] = []

    async def message_handler(message: Any) -> None:
        if isinstance(message, types.ServerNotification):
            notifications.append(message.root)

    async with create_connected_server_and_client_session(server, message_handler=message_handler) as client:
        before = await client.list_tools()
        assert BONUS_TOOL_NAME not in [t.name for t in before.tools]

        first = await client.call_tool("load_bonus_tool", {})
        second = await client.call_tool("load_bonus_tool", {})
        after = await client.list_tools()
        calculated = await client.call_tool(BONUS_TOOL_NAME, {"a": 6, "b": 3, "operation": "multiply"})

    assert _text(first) == "Bonus tool 'bonus_calculator' has been loaded! The tools list has been updated."
    assert _text(second) == "Bonus tool is already loaded! Try calling 'bonus_calculator'."
    assert [t.name for t in after.tools].count(BONUS_TOOL_NAME) == 1
    assert _text(calculated) == "6 multiply 3 = 18"
    assert bonus_tool_flag.is_loaded
    assert any(isinstance(n, types.ToolListChangedNotification) for n in notifications)


@pytest.mark.anyio
async def test_instances_built_after_load_carry_bonus_tool(fast_config):
    early = create_server(fast_config)
    loader = create_server(fast_config)

    result = await loader.invoke_tool("load_bonus_tool")
    assert not result.isError

    late = create_server(fast_config)
    assert BONUS_TOOL_NAME in loader.tool_names
    assert BONUS_TOOL_NAME in late.tool_names
    assert BONUS_TOOL_NAME not in early.tool_names

    result = await late.invoke_tool("load_bonus_tool")
    assert _text(result) == "Bonus tool is already loaded! Try calling 'bonus_calculator'."


def test_bonus_flag_flips_once():
    assert bonus_tool_flag.try_mark_loaded() is True
    assert bonus_tool_flag.try_mark_loaded() is False
    assert bonus_tool_flag.is_loaded


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("arguments", "expected"),
    [
        ({"a": 6, "b": 3, "operation": "add"}, "6 add 3 = 9"),
        ({"a": 6, "b": 3, "operation": "subtract"}, "6 subtract 3 = 3"),
        ({"a": 1.5, "b": 2, "operation": "multiply"}, "1.5 multiply 2 = 3"),
        ({"a": 7, "b": 2, "operation": "divide"}, "7 divide 2 = 3.5"),
        ({"a": 1, "b": 0, "operation": "divide"}, "1 divide 0 = NaN"),
    ],
)
async def test_bonus_calculator(server, arguments, expected):
    await server.invoke_tool("load_bonus_tool")
    result = await server.invoke_tool(BONUS_TOOL_NAME, **arguments)
    assert _text(result) == expected


@pytest.mark.anyio
async def test_confirm_action_accepted(server):
    async def elicitation_callback(context: Any, params: Any) -> types.ElicitResult:
        assert params.message == "Please confirm: deploy"
        return types.ElicitResult(action="accept", content={"confirm": True, "reason": "tested"})

    async with create_connected_server_and_client_session(
        server, elicitation_callback=elicitation_callback
    ) as client:
        result = await client.call_tool("confirm_action", {"action": "deploy"})

    assert _text(result) == "Action confirmed: deploy\nReason: tested"


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("reply", "expected"),
    [
        (types.ElicitResult(action="accept", content={"confirm": False}), "Action declined by user: deploy"),
        (types.ElicitResult(action="decline"), "User declined to respond for: deploy"),
        (types.ElicitResult(action="cancel"), "User cancelled elicitation for: deploy"),
    ],
)
async def test_confirm_action_other_outcomes(server, reply, expected):
    async def elicitation_callback(context: Any, params: Any) -> types.ElicitResult:
        return reply

    async with create_connected_server_and_client_session(
        server, elicitation_callback=elicitation_callback
    ) as client:
        result = await client.call_tool("confirm_action", {"action": "deploy"})

    assert not result.isError
    assert _text(result) == expected


@pytest.mark.anyio
async def test_confirm_action_without_elicitation_is_flagged(server):
    async with create_connected_server_and_client_session(server) as client:
        result = await client.call_tool("confirm_action", {"action": "deploy"})

    assert result.isError
    assert _text(result).startswith("Elicitation not supported or failed:")


@pytest.mark.anyio
async def test_get_feedback_falls_back_to_plain_url(server):
    async with create_connected_server_and_client_session(server) as client:
        result = await client.call_tool("get_feedback", {"topic": "hello world"})

    assert not result.isError
    text = _text(result)
    assert text.startswith("URL elicitation not supported or failed:")
    assert f"{FEEDBACK_URL}&title=hello%20world" in text


@pytest.mark.anyio
async def test_get_feedback_survives_unexpected_failure(server, monkeypatch):
    async def broken(*args: Any, **kwargs: Any) -> types.ElicitResult:
        raise LookupError("no browser available")

    monkeypatch.setattr(server, "request_url_elicitation", broken)
    result = await server.invoke_tool("get_feedback", topic="docs")

    assert not result.isError
    text = _text(result)
    assert text.startswith("URL elicitation not supported or failed: no browser available")
    assert text.endswith(f"You can still provide feedback at: {FEEDBACK_URL}&title=docs")


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("tool_name", "method", "arguments", "prefix"),
    [
        ("ask_llm", "request_sampling", {"prompt": "hi"}, "Sampling not supported or failed: boom"),
        ("confirm_action", "request_elicitation", {"action": "deploy"}, "Elicitation not supported or failed: boom"),
    ],
)
async def test_client_request_failures_are_flagged(server, monkeypatch, tool_name, method, arguments, prefix):
    async def broken(*args: Any, **kwargs: Any) -> None:
        raise RuntimeError("boom")

    monkeypatch.setattr(server, method, broken)
    result = await server.invoke_tool(tool_name, **arguments)

    assert result.isError
    assert _text(result) == prefix
