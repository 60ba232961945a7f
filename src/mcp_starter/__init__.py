# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""MCP starter server.

Exports the registration decorators and the server surface:

- ``mcp_starter.server`` - server class, factory, config, HTTP session manager
- ``mcp_starter.capabilities`` - the example tools, resources and prompts
- ``mcp_starter.http`` / ``mcp_starter.stdio`` - process entrypoints
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .completion import CompletionResult, completion
from .exceptions import ToolError, ToolErrorCode
from .prompt import prompt
from .resource import resource
from .resource_template import resource_template
from .server import MCPServer, create_server
from .tool import tool

try:
    __version__ = version("mcp-python-starter")
except PackageNotFoundError:  # pragma: no cover - source checkout
    __version__ = "1.0.0"


__all__ = [
    "MCPServer",
    "create_server",
    "tool",
    "resource",
    "resource_template",
    "prompt",
    "completion",
    "CompletionResult",
    "ToolError",
    "ToolErrorCode",
    "__version__",
]
