# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Elicitation capability service for user-input requests.

Two modes are supported: ``form`` (the client renders a dialog from a
restricted JSON schema) and ``url`` (the client opens a page in the user's
browser).

See: https://modelcontextprotocol.io/specification/2025-06-18/client/elicitation
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import anyio
import mcp.types as types
from mcp.server.lowlevel.server import request_ctx
from mcp.shared.exceptions import McpError

from ...utils import get_logger


if TYPE_CHECKING:
    from mcp.server.session import ServerSession

_PRIMITIVE_TYPES = {"string", "number", "integer", "boolean"}


class ElicitationService:
    """Proxy for ``elicitation/create`` requests.

    Args:
        timeout: Request timeout in seconds.
    """

    def __init__(self, *, timeout: float = 300.0) -> None:
        self._timeout = timeout
        self._logger = get_logger("elicitation")

    async def request_form(self, message: str, requested_schema: Mapping[str, Any]) -> types.ElicitResult:
        _validate_schema(requested_schema)
        session, request_id = self._current_session()
        self._require_capability(session)
        return await self._with_timeout(
            session.elicit_form(
                message=message,
                requestedSchema=dict(requested_schema),
                related_request_id=request_id,
            )
        )

    async def request_url(self, message: str, url: str, elicitation_id: str) -> types.ElicitResult:
        session, request_id = self._current_session()
        self._require_capability(session)
        return await self._with_timeout(
            session.elicit_url(
                message=message,
                url=url,
                elicitation_id=elicitation_id,
                related_request_id=request_id,
            )
        )

    async def _with_timeout(self, pending) -> types.ElicitResult:
        try:
            with anyio.fail_after(self._timeout):
                return await pending
        except TimeoutError:
            self._logger.warning("elicitation request timed out after %.1fs", self._timeout)
            raise McpError(
                types.ErrorData(code=types.INTERNAL_ERROR, message="elicitation request timed out")
            ) from None

    def _require_capability(self, session: ServerSession) -> None:
        if not session.check_client_capability(types.ClientCapabilities(elicitation=types.ElicitationCapability())):
            raise McpError(
                types.ErrorData(
                    code=types.METHOD_NOT_FOUND, message="Client does not advertise the elicitation capability"
                )
            )

    def _current_session(self) -> tuple[ServerSession, types.RequestId | None]:
        try:
            ctx = request_ctx.get()
        except LookupError as exc:
            raise RuntimeError("Elicitation requests require an active MCP session") from exc
        return ctx.session, ctx.request_id


def _validate_schema(schema: Mapping[str, Any]) -> None:
    """Form schemas are flat objects of primitive properties."""

    if schema.get("type") != "object":
        raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message="requestedSchema must be an object"))
    properties = schema.get("properties")
    if not isinstance(properties, Mapping) or not properties:
        raise McpError(
            types.ErrorData(code=types.INVALID_PARAMS, message="requestedSchema must declare at least one property")
        )
    for name, definition in properties.items():
        if not isinstance(definition, Mapping) or definition.get("type") not in _PRIMITIVE_TYPES:
            raise McpError(
                types.ErrorData(
                    code=types.INVALID_PARAMS,
                    message=f"requestedSchema property '{name}' must be a primitive type",
                )
            )


__all__ = ["ElicitationService"]
