# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Argument completion providers (``completion/complete``).

See https://modelcontextprotocol.io/specification/2025-06-18/server/utilities/completion
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:  # pragma: no cover
    from .server import MCPServer


@dataclass(slots=True)
class CompletionResult:
    values: Iterable[str]
    total: int | None = None
    has_more: bool | None = None


@dataclass(slots=True)
class CompletionSpec:
    ref_type: Literal["prompt", "resource"]
    key: str
    fn: Callable[..., Any]


_COMPLETION_ATTR = "__mcp_starter_completion__"
_ACTIVE_SERVER: ContextVar["MCPServer | None"] = ContextVar(
    "_mcp_starter_completion_server",
    default=None,
)


def get_active_server() -> "MCPServer | None":
    return _ACTIVE_SERVER.get()


def set_active_server(server: "MCPServer") -> object:
    return _ACTIVE_SERVER.set(server)


def reset_active_server(token: object) -> None:
    _ACTIVE_SERVER.reset(token)  # type: ignore[arg-type]


def completion(*, prompt: str | None = None, resource: str | None = None):
    """Register a completion provider for a prompt name or a resource template URI.

    The provider is called as ``fn(argument, context)`` with the SDK's
    ``CompletionArgument`` and ``CompletionContext`` and may return a list of
    strings, a :class:`CompletionResult`, or a ``types.Completion``.
    """

    if (prompt is None) == (resource is None):
        raise ValueError("completion() needs exactly one of prompt= or resource=")

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        if prompt is not None:
            spec = CompletionSpec(ref_type="prompt", key=prompt, fn=fn)
        else:
            spec = CompletionSpec(ref_type="resource", key=resource, fn=fn)  # type: ignore[arg-type]
        setattr(fn, _COMPLETION_ATTR, spec)

        server = get_active_server()
        if server is not None:
            server.register_completion(spec)
        return fn

    return decorator


def extract_completion_spec(obj: Any) -> CompletionSpec | None:
    spec = getattr(obj, _COMPLETION_ATTR, None)
    if isinstance(spec, CompletionSpec):
        return spec
    return None


__all__ = [
    "completion",
    "CompletionResult",
    "CompletionSpec",
    "extract_completion_spec",
    "set_active_server",
    "reset_active_server",
]
