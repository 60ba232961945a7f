# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Sampling capability service for LLM interaction requests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import anyio
import mcp.types as types
from mcp.server.lowlevel.server import request_ctx
from mcp.shared.exceptions import McpError
from mcp.shared.message import ServerMessageMetadata

from ...utils import get_logger


if TYPE_CHECKING:
    from mcp.server.session import ServerSession


class SamplingService:
    """Proxy for ``sampling/createMessage`` requests.

    See: https://modelcontextprotocol.io/specification/2025-06-18/client/sampling

    Args:
        timeout: Request timeout in seconds.
    """

    def __init__(self, *, timeout: float = 60.0) -> None:
        self._timeout = timeout
        self._logger = get_logger("sampling")

    async def create_message(self, params: types.CreateMessageRequestParams) -> types.CreateMessageResult:
        session, request_id = self._current_session()

        if not session.check_client_capability(types.ClientCapabilities(sampling=types.SamplingCapability())):
            raise McpError(
                types.ErrorData(
                    code=types.METHOD_NOT_FOUND, message="Client does not advertise the sampling capability"
                )
            )

        try:
            with anyio.fail_after(self._timeout):
                request = types.ServerRequest(types.CreateMessageRequest(params=params))
                return await session.send_request(
                    request,
                    types.CreateMessageResult,
                    metadata=_related_to(request_id),
                )
        except TimeoutError:
            self._logger.warning("sampling request timed out after %.1fs", self._timeout)
            raise McpError(
                types.ErrorData(code=types.INTERNAL_ERROR, message="sampling request timed out")
            ) from None

    def _current_session(self) -> tuple[ServerSession, types.RequestId | None]:
        try:
            ctx = request_ctx.get()
        except LookupError as exc:
            raise RuntimeError("Sampling requests require an active MCP session") from exc
        return ctx.session, ctx.request_id


def _related_to(request_id: types.RequestId | None) -> ServerMessageMetadata | None:
    # Streamable HTTP routes the request onto the stream of the call that issued it.
    if request_id is None:
        return None
    return ServerMessageMetadata(related_request_id=request_id)


__all__ = ["SamplingService"]
