# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Tool registration utilities.

``@tool`` stores a :class:`ToolSpec` on the decorated function and, when a
server is collecting (see :meth:`MCPServer.collecting`), registers it right
away.  Outside that scope the decorator only attaches metadata, so modules
defining tools can be imported without an active server.

Follows ``tools/list`` and ``tools/call`` from
https://modelcontextprotocol.io/specification/2025-06-18/server/tools
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import mcp.types as types

if TYPE_CHECKING:  # pragma: no cover
    from .server import MCPServer


@dataclass(slots=True)
class ToolSpec:
    name: str
    fn: Callable[..., Any]
    description: str = ""
    title: str | None = None
    input_schema: Mapping[str, Any] | None = None
    annotations: types.ToolAnnotations | None = None


_TOOL_ATTR = "__mcp_starter_tool__"
_ACTIVE_SERVER: ContextVar["MCPServer | None"] = ContextVar(
    "_mcp_starter_tool_server",
    default=None,
)


def get_active_server() -> "MCPServer | None":
    return _ACTIVE_SERVER.get()


def set_active_server(server: "MCPServer") -> object:
    return _ACTIVE_SERVER.set(server)


def reset_active_server(token: object) -> None:
    _ACTIVE_SERVER.reset(token)  # type: ignore[arg-type]


def tool(
    name: str | None = None,
    *,
    description: str | None = None,
    title: str | None = None,
    input_schema: Mapping[str, Any] | None = None,
    read_only: bool | None = None,
    destructive: bool | None = None,
    idempotent: bool | None = None,
    open_world: bool | None = None,
):
    """Mark a function as an MCP tool.

    The behavioural hints map onto ``ToolAnnotations``
    (``readOnlyHint``, ``destructiveHint``, ``idempotentHint``,
    ``openWorldHint``).  When no hint and no title are given the tool is
    published without annotations.
    """

    hints = (read_only, destructive, idempotent, open_world)
    annotations = None
    if title is not None or any(hint is not None for hint in hints):
        annotations = types.ToolAnnotations(
            title=title,
            readOnlyHint=read_only,
            destructiveHint=destructive,
            idempotentHint=idempotent,
            openWorldHint=open_world,
        )

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        spec = ToolSpec(
            name=name or fn.__name__,
            fn=fn,
            description=description or (fn.__doc__ or "").strip(),
            title=title,
            input_schema=input_schema,
            annotations=annotations,
        )
        setattr(fn, _TOOL_ATTR, spec)

        server = get_active_server()
        if server is not None:
            server.register_tool(spec)
        return fn

    return decorator


def extract_tool_spec(obj: Any) -> ToolSpec | None:
    spec = getattr(obj, _TOOL_ATTR, None)
    if isinstance(spec, ToolSpec):
        return spec
    return None


__all__ = [
    "tool",
    "ToolSpec",
    "extract_tool_spec",
    "set_active_server",
    "reset_active_server",
]
