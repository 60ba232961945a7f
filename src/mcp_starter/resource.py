# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Static resource registration utilities.

Follows ``resources/list`` and ``resources/read`` from
https://modelcontextprotocol.io/specification/2025-06-18/server/resources
"""

from __future__ import annotations

from collections.abc import Callable
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from .server import MCPServer


@dataclass(slots=True)
class ResourceSpec:
    uri: str
    fn: Callable[[], Any]
    name: str | None = None
    description: str | None = None
    mime_type: str | None = None


_RESOURCE_ATTR = "__mcp_starter_resource__"
_ACTIVE_SERVER: ContextVar["MCPServer | None"] = ContextVar(
    "_mcp_starter_resource_server",
    default=None,
)


def get_active_server() -> "MCPServer | None":
    return _ACTIVE_SERVER.get()


def set_active_server(server: "MCPServer") -> object:
    return _ACTIVE_SERVER.set(server)


def reset_active_server(token: object) -> None:
    _ACTIVE_SERVER.reset(token)  # type: ignore[arg-type]


def resource(
    uri: str,
    *,
    name: str | None = None,
    description: str | None = None,
    mime_type: str | None = None,
):
    """Register a zero-argument function as the reader for *uri*.

    The function may be sync or async and returns ``str`` (text contents) or
    ``bytes`` (base64 blob contents).
    """

    def decorator(fn: Callable[[], Any]) -> Callable[[], Any]:
        spec = ResourceSpec(
            uri=uri,
            fn=fn,
            name=name,
            description=description or (fn.__doc__ or "").strip() or None,
            mime_type=mime_type,
        )
        setattr(fn, _RESOURCE_ATTR, spec)

        server = get_active_server()
        if server is not None:
            server.register_resource(spec)
        return fn

    return decorator


def extract_resource_spec(obj: Any) -> ResourceSpec | None:
    spec = getattr(obj, _RESOURCE_ATTR, None)
    if isinstance(spec, ResourceSpec):
        return spec
    return None


__all__ = [
    "resource",
    "ResourceSpec",
    "extract_resource_spec",
    "set_active_server",
    "reset_active_server",
]
