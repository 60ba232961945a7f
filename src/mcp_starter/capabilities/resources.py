# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Example resources and resource templates."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from ..resource import resource
from ..resource_template import resource_template
from ..server.config import SERVER_NAME, SERVER_VERSION

if TYPE_CHECKING:
    from ..server import MCPServer


ITEMS: dict[str, dict[str, str]] = {
    "1": {"name": "Widget", "description": "A useful widget"},
    "2": {"name": "Gadget", "description": "A fancy gadget"},
    "3": {"name": "Gizmo", "description": "A mysterious gizmo"},
}

ABOUT_TEXT = f"""{SERVER_NAME} v{SERVER_VERSION}

This is a feature-complete MCP server demonstrating:
- Tools with annotations and structured output
- Resources (static and dynamic)
- Resource templates
- Prompts with completions
- Sampling, elicitation, progress updates, and dynamic tool loading

For more information, visit: https://modelcontextprotocol.io"""


def register_resources(server: MCPServer) -> None:
    with server.collecting():

        @resource(
            "info://about",
            name="About",
            description="Information about this MCP server",
            mime_type="text/plain",
        )
        def about() -> str:
            return ABOUT_TEXT

        @resource_template(
            "Personalized Greeting",
            uri_template="greeting://{name}",
            description="Generate a personalized greeting",
            mime_type="text/plain",
        )
        def greeting(name: str) -> str:
            return f"Hello, {name}! This greeting was generated just for you."

        @resource_template(
            "Item Data",
            uri_template="data://items/{id}",
            description="Get data for a specific item by ID",
            mime_type="application/json",
        )
        def item_data(id: str) -> str:  # noqa: A002
            item = ITEMS.get(id)
            if item is None:
                raise LookupError(f"Item not found: {id}")
            return json.dumps({"id": id, **item}, indent=2)


__all__ = ["ABOUT_TEXT", "ITEMS", "register_resources"]
