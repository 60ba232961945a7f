# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Session-multiplexed Streamable HTTP transport.

Every client that completes the ``initialize`` handshake gets its own token,
its own :class:`~mcp_starter.server.app.MCPServer` instance (built by the
server factory) and its own SDK transport.  Later requests carrying the
token in ``mcp-session-id`` are routed to that transport.

See https://modelcontextprotocol.io/specification/2025-06-18/basic/transports#session-management

Usage::

    manager = SessionTransportManager()

    async with manager.run():
        ...  # mount ``manager`` as an ASGI app at /mcp

Mutations of the session table never straddle an ``await``, so the table is
consistent between any two suspension points without locking.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
import json
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import anyio
from anyio.abc import TaskGroup, TaskStatus
import mcp.types as types
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import Message, Receive, Scope, Send

from ..utils import get_logger
from .app import MCPServer
from .factory import create_server

if TYPE_CHECKING:  # pragma: no cover
    from mcp.server.transport_security import TransportSecuritySettings


logger = get_logger("sessions")


@dataclass(frozen=True, slots=True)
class Session:
    """One client session: the token and what it is bound to."""

    token: str
    server: MCPServer
    transport: StreamableHTTPServerTransport


class SessionTable:
    """Token-keyed mapping of live sessions, owned by one manager."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def insert(self, session: Session) -> None:
        if session.token in self._sessions:
            raise ValueError(f"Session {session.token} already exists")
        self._sessions[session.token] = session

    def remove(self, token: str) -> Session | None:
        """Drop *token*; returns the removed session, ``None`` if it was absent."""

        return self._sessions.pop(token, None)

    def get(self, token: str | None) -> Session | None:
        if token is None:
            return None
        return self._sessions.get(token)

    def tokens(self) -> list[str]:
        return list(self._sessions)

    def clear(self) -> None:
        self._sessions.clear()

    def __contains__(self, token: object) -> bool:
        return token in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))


class SessionTransportManager:
    """ASGI app that routes ``/mcp`` traffic to per-session transports.

    ``server_factory`` is called once per accepted handshake and must return
    a fresh server; no two sessions ever share an instance.
    """

    def __init__(
        self,
        server_factory: Callable[[], MCPServer] = create_server,
        *,
        json_response: bool = False,
        security_settings: TransportSecuritySettings | None = None,
    ) -> None:
        self.server_factory = server_factory
        self.json_response = json_response
        self.security_settings = security_settings

        self._sessions = SessionTable()
        self._task_group: TaskGroup | None = None
        self._has_started = False

    @property
    def sessions(self) -> SessionTable:
        return self._sessions

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    @asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        """Own the task group that hosts every session's server loop.

        May be entered once per manager.  On exit all sessions are terminated
        and the table is cleared.
        """

        if self._has_started:
            raise RuntimeError("SessionTransportManager.run() can only be called once per instance")
        self._has_started = True

        async with anyio.create_task_group() as tg:
            self._task_group = tg
            logger.debug("session manager started")
            try:
                yield
            finally:
                with anyio.CancelScope(shield=True):
                    for session in self._sessions:
                        await session.transport.terminate()
                self._sessions.clear()
                tg.cancel_scope.cancel()
                self._task_group = None
                logger.debug("session manager stopped")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.handle_request(scope, receive, send)

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self._task_group is None:
            raise RuntimeError("Task group is not initialized. Make sure to use run().")

        method = scope["method"]
        if method == "GET":
            await self._handle_get(scope, receive, send)
        elif method == "POST":
            await self._handle_post(scope, receive, send)
        elif method == "DELETE":
            await self._handle_delete(scope, receive, send)
        else:
            await JSONResponse({"error": "Method not allowed"}, status_code=405)(scope, receive, send)

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    async def _handle_get(self, scope: Scope, receive: Receive, send: Send) -> None:
        session = self._sessions.get(_session_token(scope))
        if session is None:
            response = JSONResponse({"error": "Invalid or missing session ID"}, status_code=400)
            await response(scope, receive, send)
            return
        await session.transport.handle_request(scope, receive, send)

    async def _handle_post(self, scope: Scope, receive: Receive, send: Send) -> None:
        token = _session_token(scope)
        session = self._sessions.get(token)
        if session is not None:
            await session.transport.handle_request(scope, receive, send)
            return

        body = await Request(scope, receive).body()
        try:
            payload = json.loads(body)
        except ValueError as exc:
            logger.debug("rejected unparseable body without session: %s", exc)
            response = _jsonrpc_error(types.PARSE_ERROR, f"Parse error: {exc}", 400)
            await response(scope, receive, send)
            return

        if not _is_initialize(payload):
            if token is None:
                response = _jsonrpc_error(types.INVALID_REQUEST, "Bad Request: No valid session ID provided", 400)
            else:
                logger.debug("rejected request for unknown session %s", token)
                response = _jsonrpc_error(types.INVALID_REQUEST, "Session not found", 404)
            await response(scope, receive, send)
            return

        await self._open_session(_without_session_header(scope), _replay(body, receive), send)

    async def _handle_delete(self, scope: Scope, receive: Receive, send: Send) -> None:
        token = _session_token(scope)
        session = self._sessions.get(token)
        if session is None:
            await JSONResponse({"error": "Session not found"}, status_code=404)(scope, receive, send)
            return

        await session.transport.terminate()
        if self._sessions.remove(session.token) is not None:
            logger.info("Session closed: %s", session.token)
        await JSONResponse({"message": "Session closed"})(scope, receive, send)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def _open_session(self, scope: Scope, receive: Receive, send: Send) -> None:
        assert self._task_group is not None

        token = uuid4().hex
        transport = StreamableHTTPServerTransport(
            mcp_session_id=token,
            is_json_response_enabled=self.json_response,
            security_settings=self.security_settings,
        )
        session = Session(token=token, server=self.server_factory(), transport=transport)
        self._sessions.insert(session)

        try:
            await self._task_group.start(self._run_session, session)
        except Exception:
            self._sessions.remove(token)
            raise

        status: int | None = None

        async def send_and_record(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        try:
            await transport.handle_request(scope, receive, send_and_record)
        except BaseException:
            logger.warning("handshake for session %s failed while answering", token)
            with anyio.CancelScope(shield=True):
                await self._discard(session)
            raise

        if status is not None and status >= 400:
            logger.warning("handshake for session %s rejected with HTTP %s", token, status)
            await self._discard(session)
            return

        logger.info("New session: %s", token)

    async def _discard(self, session: Session) -> None:
        """Tear down a session whose token never reached the client."""

        await session.transport.terminate()
        self._sessions.remove(session.token)

    async def _run_session(
        self,
        session: Session,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        server = session.server
        async with session.transport.connect() as (read_stream, write_stream):
            task_status.started()
            try:
                await server.run(
                    read_stream,
                    write_stream,
                    server.create_initialization_options(),
                    stateless=False,
                )
            except Exception:
                logger.exception("server loop for session %s crashed", session.token)
            finally:
                if self._sessions.remove(session.token) is not None:
                    logger.info("Session closed: %s", session.token)


def _session_token(scope: Scope) -> str | None:
    header = MCP_SESSION_ID_HEADER.lower().encode("latin-1")
    for key, value in scope.get("headers", []):
        if key.lower() == header:
            return value.decode("latin-1")
    return None


def _without_session_header(scope: Scope) -> Scope:
    header = MCP_SESSION_ID_HEADER.lower().encode("latin-1")
    headers = [(key, value) for key, value in scope.get("headers", []) if key.lower() != header]
    return {**scope, "headers": headers}


def _is_initialize(payload: Any) -> bool:
    return isinstance(payload, dict) and payload.get("method") == "initialize" and "id" in payload


def _replay(body: bytes, receive: Receive) -> Receive:
    """Hand the already-read *body* to the next consumer, then defer to *receive*."""

    delivered = False

    async def replay() -> Message:
        nonlocal delivered
        if not delivered:
            delivered = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


def _jsonrpc_error(code: int, message: str, status_code: int) -> JSONResponse:
    error = types.JSONRPCError(
        jsonrpc="2.0",
        id="server-error",
        error=types.ErrorData(code=code, message=message),
    )
    return JSONResponse(error.model_dump(by_alias=True, mode="json", exclude_none=True), status_code=status_code)


__all__ = ["Session", "SessionTable", "SessionTransportManager"]
