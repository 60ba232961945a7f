# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Exceptions for tool implementations."""

from __future__ import annotations

from enum import Enum


class ToolErrorCode(str, Enum):
    """Error codes for tool failures, optimized for LLM pattern-matching."""

    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    UNSUPPORTED = "UNSUPPORTED"
    TIMEOUT = "TIMEOUT"
    INTERNAL = "INTERNAL"
    ERROR = "ERROR"


class ToolError(Exception):
    """Exception for tool failures with structured error codes.

    Raised inside a tool body, it is caught at the tool boundary and returned
    to the client as a ``CallToolResult`` flagged with ``isError``:

        from mcp_starter import tool
        from mcp_starter.exceptions import ToolError

        @tool(description="Fetch item by ID")
        async def get_item(item_id: str) -> dict:
            item = ITEMS.get(item_id)
            if item is None:
                raise ToolError(f"Item not found: {item_id}", code="NOT_FOUND")
            return item
    """

    def __init__(self, message: str, *, code: str | ToolErrorCode = ToolErrorCode.ERROR) -> None:
        super().__init__(message)
        self.code = code.value if isinstance(code, ToolErrorCode) else code


__all__ = ["ToolError", "ToolErrorCode"]
