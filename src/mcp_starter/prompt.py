# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Prompt registration utilities.

Follows ``prompts/list`` and ``prompts/get`` from
https://modelcontextprotocol.io/specification/2025-06-18/server/prompts
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import mcp.types as types

if TYPE_CHECKING:  # pragma: no cover
    from .server import MCPServer


@dataclass(slots=True)
class PromptSpec:
    name: str
    fn: Callable[..., Any]
    description: str | None = None
    title: str | None = None
    arguments: list[types.PromptArgument] | None = None


_PROMPT_ATTR = "__mcp_starter_prompt__"
_ACTIVE_SERVER: ContextVar["MCPServer | None"] = ContextVar(
    "_mcp_starter_prompt_server",
    default=None,
)


def get_active_server() -> "MCPServer | None":
    return _ACTIVE_SERVER.get()


def set_active_server(server: "MCPServer") -> object:
    return _ACTIVE_SERVER.set(server)


def reset_active_server(token: object) -> None:
    _ACTIVE_SERVER.reset(token)  # type: ignore[arg-type]


def _coerce_argument(value: types.PromptArgument | Mapping[str, Any]) -> types.PromptArgument:
    if isinstance(value, types.PromptArgument):
        return value
    return types.PromptArgument(**value)


def prompt(
    name: str,
    *,
    description: str | None = None,
    title: str | None = None,
    arguments: Iterable[types.PromptArgument | Mapping[str, Any]] | None = None,
):
    """Register a prompt renderer.

    The renderer receives the provided arguments as a single ``dict`` (or
    nothing, when it takes no parameters) and returns messages as
    ``PromptMessage`` objects, ``{"role": ..., "content": ...}`` mappings or
    ``(role, content)`` tuples.
    """

    argument_list = [_coerce_argument(arg) for arg in arguments] if arguments else None

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        spec = PromptSpec(
            name=name,
            fn=fn,
            description=description or (fn.__doc__ or "").strip() or None,
            title=title,
            arguments=argument_list,
        )
        setattr(fn, _PROMPT_ATTR, spec)

        server = get_active_server()
        if server is not None:
            server.register_prompt(spec)
        return fn

    return decorator


def extract_prompt_spec(obj: Any) -> PromptSpec | None:
    spec = getattr(obj, _PROMPT_ATTR, None)
    if isinstance(spec, PromptSpec):
        return spec
    return None


__all__ = [
    "prompt",
    "PromptSpec",
    "extract_prompt_spec",
    "set_active_server",
    "reset_active_server",
]
