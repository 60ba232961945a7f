# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Example prompt templates."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..completion import completion
from ..prompt import prompt

if TYPE_CHECKING:
    import mcp.types as types

    from ..server import MCPServer


GREETING_STYLES = {
    "formal": "Please compose a formal, professional greeting for {name}.",
    "casual": "Write a casual, friendly hello to {name}.",
}


def register_prompts(server: MCPServer) -> None:
    with server.collecting():

        @prompt(
            "greet",
            description="Generate a greeting message",
            arguments=[
                {"name": "name", "description": "Name of the person to greet", "required": True},
                {"name": "style", "description": "Greeting style (formal/casual)", "required": False},
            ],
        )
        def greet(arguments: dict[str, str]) -> list[dict[str, str]]:
            template = GREETING_STYLES.get(arguments.get("style") or "casual", GREETING_STYLES["casual"])
            return [{"role": "user", "content": template.format(name=arguments["name"])}]

        @completion(prompt="greet")
        def greet_style(argument: types.CompletionArgument, context: types.CompletionContext | None) -> list[str]:
            if argument.name != "style":
                return []
            return [style for style in GREETING_STYLES if style.startswith(argument.value)]

        @prompt(
            "code_review",
            description="Review code for potential improvements",
            arguments=[{"name": "code", "description": "The code to review", "required": True}],
        )
        def code_review(arguments: dict[str, str]) -> list[dict[str, str]]:
            text = (
                "Please review the following code for potential improvements, security issues, "
                "performance optimizations, and readability:\n\n"
                f"```\n{arguments['code']}\n```"
            )
            return [{"role": "user", "content": text}]


__all__ = ["GREETING_STYLES", "register_prompts"]
