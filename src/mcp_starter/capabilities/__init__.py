# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Example capabilities: tools, resources and prompts.

:func:`register_all` attaches every unit to a server instance; the server
factory calls it once per instance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .flags import BonusToolFlag, bonus_tool_flag
from .prompts import register_prompts
from .resources import register_resources
from .tools import BONUS_TOOL_NAME, register_tools

if TYPE_CHECKING:
    from ..server import MCPServer


def register_all(server: MCPServer) -> None:
    register_tools(server)
    register_resources(server)
    register_prompts(server)


__all__ = [
    "BONUS_TOOL_NAME",
    "BonusToolFlag",
    "bonus_tool_flag",
    "register_all",
    "register_prompts",
    "register_resources",
    "register_tools",
]
