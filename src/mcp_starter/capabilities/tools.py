# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Example tools.

Every tool carries annotations so clients can reason about its behaviour:

- ``read_only``: only reads data
- ``destructive``: may permanently modify or delete data
- ``idempotent``: repeated calls with the same arguments have the same effect
- ``open_world``: reaches systems outside the server (web, APIs ...)

See: https://modelcontextprotocol.io/specification/2025-06-18/server/tools
"""

from __future__ import annotations

import json
import math
import random
import time
from typing import TYPE_CHECKING, Literal
from urllib.parse import quote

import anyio
import mcp.types as types
from mcp.shared.exceptions import McpError

from ..exceptions import ToolError, ToolErrorCode
from ..tool import tool
from ..utils import get_logger
from .flags import bonus_tool_flag

if TYPE_CHECKING:
    from ..server import MCPServer


BONUS_TOOL_NAME = "bonus_calculator"
FEEDBACK_URL = "https://github.com/SamMorrowDrums/mcp-starters/issues/new?template=workshop-feedback.yml"

_CONDITIONS = ("sunny", "cloudy", "rainy", "windy")

logger = get_logger("tools")


@tool(
    name=BONUS_TOOL_NAME,
    description="A calculator that was dynamically loaded",
    title="Bonus Calculator",
    read_only=True,
    destructive=False,
    idempotent=True,
    open_world=False,
)
def bonus_calculator(a: float, b: float, operation: Literal["add", "subtract", "multiply", "divide"]) -> str:
    if operation == "add":
        result = a + b
    elif operation == "subtract":
        result = a - b
    elif operation == "multiply":
        result = a * b
    elif operation == "divide":
        result = a / b if b != 0 else math.nan
    else:
        raise ToolError(f"Unknown operation: {operation}", code=ToolErrorCode.INVALID_INPUT)
    return f"{_format_number(a)} {operation} {_format_number(b)} = {_format_number(result)}"


def _format_number(value: float) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if value.is_integer():
            return str(int(value))
    return str(value)


def register_tools(server: MCPServer) -> None:
    """Attach the example tools to *server*.

    ``bonus_calculator`` is attached as well when another session already
    loaded it.
    """

    with server.collecting():

        @tool(
            description="A friendly greeting tool that says hello to someone",
            title="Say Hello",
            read_only=True,
            destructive=False,
            idempotent=True,
            open_world=False,
        )
        def hello(name: str) -> str:
            return f"Hello, {name}! Welcome to MCP."

        @tool(
            description="Get current weather for a location (simulated)",
            title="Get Weather",
            read_only=True,
            destructive=False,
            idempotent=False,
            open_world=False,
        )
        def get_weather(location: str) -> types.CallToolResult:
            weather = {
                "location": location,
                "temperature": round(15 + random.random() * 20),
                "unit": "celsius",
                "conditions": random.choice(_CONDITIONS),
                "humidity": round(40 + random.random() * 40),
            }
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=json.dumps(weather, indent=2))],
                structuredContent=weather,
            )

        @tool(
            description="Ask the connected LLM a question using sampling",
            title="Ask LLM",
            read_only=True,
            destructive=False,
            idempotent=False,
            open_world=False,
        )
        async def ask_llm(prompt: str, maxTokens: int = 100) -> types.CallToolResult:  # noqa: N803
            params = types.CreateMessageRequestParams(
                messages=[types.SamplingMessage(role="user", content=types.TextContent(type="text", text=prompt))],
                maxTokens=maxTokens,
            )
            try:
                result = await server.request_sampling(params)
            except Exception as exc:
                return _flagged(f"Sampling not supported or failed: {_describe(exc)}")

            content = result.content
            if isinstance(content, list):
                content = content[0] if content else None
            text = content.text if isinstance(content, types.TextContent) else "[non-text response]"
            return types.CallToolResult(content=[types.TextContent(type="text", text=f"LLM Response: {text}")])

        @tool(
            description="A task that takes 5 seconds and reports progress along the way",
            title="Long Running Task",
            read_only=True,
            destructive=False,
            idempotent=True,
            open_world=False,
        )
        async def long_task(taskName: str) -> str:  # noqa: N803
            steps = server.config.long_task_steps
            for step in range(steps):
                await server.report_progress(step / steps, total=1.0, message=f"Step {step}/{steps}")
                await anyio.sleep(server.config.long_task_step_delay)
            return f'Task "{taskName}" completed successfully after {steps} steps!'

        @tool(
            description="Dynamically loads a bonus tool that wasn't available at startup",
            title="Load Bonus Tool",
            read_only=False,
            destructive=False,
            idempotent=True,
            open_world=False,
        )
        async def load_bonus_tool() -> str:
            if BONUS_TOOL_NAME in server.tool_names:
                return f"Bonus tool is already loaded! Try calling '{BONUS_TOOL_NAME}'."

            server.register_tool(bonus_calculator)
            if bonus_tool_flag.try_mark_loaded():
                logger.info("%s loaded for the first time in this process", BONUS_TOOL_NAME)
            await server.notify_tools_list_changed()
            return f"Bonus tool '{BONUS_TOOL_NAME}' has been loaded! The tools list has been updated."

        @tool(
            description="Demonstrates elicitation - requests user confirmation before proceeding",
            title="Confirm Action",
            read_only=True,
            destructive=False,
            idempotent=False,
            open_world=False,
        )
        async def confirm_action(action: str) -> types.CallToolResult:
            schema = {
                "type": "object",
                "properties": {
                    "confirm": {"type": "boolean", "title": "Confirm", "description": "Confirm the action"},
                    "reason": {
                        "type": "string",
                        "title": "Reason",
                        "description": "Optional reason for your choice",
                    },
                },
                "required": ["confirm"],
            }
            try:
                result = await server.request_elicitation(f"Please confirm: {action}", schema)
            except Exception as exc:
                return _flagged(f"Elicitation not supported or failed: {_describe(exc)}")

            if result.action == "accept":
                content = result.content or {}
                if content.get("confirm"):
                    reason = content.get("reason") or "No reason provided"
                    return _text(f"Action confirmed: {action}\nReason: {reason}")
                return _text(f"Action declined by user: {action}")
            if result.action == "decline":
                return _text(f"User declined to respond for: {action}")
            return _text(f"User cancelled elicitation for: {action}")

        @tool(
            description="Demonstrates URL elicitation - opens a feedback form in the browser",
            title="Get Feedback",
            read_only=True,
            destructive=False,
            idempotent=False,
            open_world=True,
        )
        async def get_feedback(topic: str | None = None) -> types.CallToolResult:
            url = FEEDBACK_URL
            if topic:
                url += f"&title={quote(topic, safe='')}"

            try:
                result = await server.request_url_elicitation(
                    "Please provide feedback on MCP Starters by completing the form at the URL below:",
                    url,
                    f"feedback-{int(time.time() * 1000)}",
                )
            except Exception as exc:
                return _text(
                    f"URL elicitation not supported or failed: {_describe(exc)}\n\n"
                    f"You can still provide feedback at: {url}"
                )

            if result.action == "accept":
                return _text("Thank you for providing feedback! Your input helps improve MCP Starters.")
            if result.action == "decline":
                return _text(f"No problem! Feel free to provide feedback anytime at: {url}")
            return _text("Feedback request cancelled.")

        if bonus_tool_flag.is_loaded:
            server.register_tool(bonus_calculator)


def _text(text: str) -> types.CallToolResult:
    return types.CallToolResult(content=[types.TextContent(type="text", text=text)])


def _flagged(text: str) -> types.CallToolResult:
    return types.CallToolResult(content=[types.TextContent(type="text", text=text)], isError=True)


def _describe(exc: Exception) -> str:
    if isinstance(exc, McpError):
        return exc.error.message
    return str(exc) or type(exc).__name__


__all__ = ["BONUS_TOOL_NAME", "FEEDBACK_URL", "bonus_calculator", "register_tools"]
