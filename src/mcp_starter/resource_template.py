# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Resource template registration utilities.

Follows ``resources/templates/list`` from
https://modelcontextprotocol.io/specification/2025-06-18/server/resources

Only simple ``{var}`` expansions are understood; each one matches a single
path segment (no ``/``).
"""

from __future__ import annotations

from collections.abc import Callable
from contextvars import ContextVar
from dataclasses import dataclass, field
import re
from typing import TYPE_CHECKING, Any

import mcp.types as types

if TYPE_CHECKING:  # pragma: no cover
    from .server import MCPServer


_VARIABLE = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def compile_uri_template(uri_template: str) -> re.Pattern[str]:
    parts: list[str] = []
    last = 0
    for match in _VARIABLE.finditer(uri_template):
        parts.append(re.escape(uri_template[last : match.start()]))
        parts.append(f"(?P<{match.group(1)}>[^/]+)")
        last = match.end()
    parts.append(re.escape(uri_template[last:]))
    return re.compile("^" + "".join(parts) + "$")


@dataclass(slots=True)
class ResourceTemplateSpec:
    name: str
    uri_template: str
    fn: Callable[..., Any]
    description: str | None = None
    mime_type: str | None = None
    pattern: re.Pattern[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.pattern = compile_uri_template(self.uri_template)

    def match(self, uri: str) -> dict[str, str] | None:
        """Return the template variables bound by *uri*, or ``None``."""

        found = self.pattern.match(uri)
        if found is None:
            return None
        return found.groupdict()

    def to_resource_template(self) -> types.ResourceTemplate:
        return types.ResourceTemplate(
            name=self.name,
            uriTemplate=self.uri_template,
            description=self.description,
            mimeType=self.mime_type,
        )


_TEMPLATE_ATTR = "__mcp_starter_resource_template__"
_ACTIVE_SERVER: ContextVar["MCPServer | None"] = ContextVar(
    "_mcp_starter_resource_template_server",
    default=None,
)


def get_active_server() -> "MCPServer | None":
    return _ACTIVE_SERVER.get()


def set_active_server(server: "MCPServer") -> object:
    return _ACTIVE_SERVER.set(server)


def reset_active_server(token: object) -> None:
    _ACTIVE_SERVER.reset(token)  # type: ignore[arg-type]


def resource_template(
    name: str,
    *,
    uri_template: str,
    description: str | None = None,
    mime_type: str | None = None,
):
    """Register metadata for a resource template.

    The decorated function receives the template variables as keyword
    arguments and returns ``str`` or ``bytes``.
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        spec = ResourceTemplateSpec(
            name=name,
            uri_template=uri_template,
            fn=fn,
            description=description,
            mime_type=mime_type,
        )
        setattr(fn, _TEMPLATE_ATTR, spec)

        server = get_active_server()
        if server is not None:
            server.register_resource_template(spec)
        return fn

    return decorator


def extract_resource_template_spec(obj: Any) -> ResourceTemplateSpec | None:
    spec = getattr(obj, _TEMPLATE_ATTR, None)
    if isinstance(spec, ResourceTemplateSpec):
        return spec
    return None


__all__ = [
    "resource_template",
    "ResourceTemplateSpec",
    "compile_uri_template",
    "extract_resource_template_spec",
    "set_active_server",
    "reset_active_server",
]
