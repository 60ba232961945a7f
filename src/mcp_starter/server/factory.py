# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Server factory: one fully registered :class:`MCPServer` per call."""

from __future__ import annotations

from .app import MCPServer, NotificationFlags
from .config import ServerConfig


SERVER_INSTRUCTIONS = """This is a demonstration MCP server showcasing the protocol's capabilities.

Available tools:
- hello: simple greeting
- get_weather: simulated weather with structured output
- ask_llm: asks the connected client's LLM through sampling
- long_task: reports progress while it runs
- load_bonus_tool: adds bonus_calculator to the tool list at runtime
- confirm_action: asks the user for confirmation through form elicitation
- get_feedback: opens a feedback form through URL elicitation

Resources: info://about, greeting://{name}, data://items/{id}
Prompts: greet (with completion for 'style'), code_review"""


def create_server(config: ServerConfig | None = None) -> MCPServer:
    """Build a fresh server with every example capability registered.

    Instances share nothing except the process-wide bonus tool flag, which
    is read while the tools are registered.
    """

    from ..capabilities import register_all

    config = config or ServerConfig()
    server = MCPServer(
        config.name,
        version=config.version,
        instructions=SERVER_INSTRUCTIONS,
        notification_flags=NotificationFlags(tools_changed=True),
        config=config,
    )
    register_all(server)
    return server


__all__ = ["SERVER_INSTRUCTIONS", "create_server"]
