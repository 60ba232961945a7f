# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Streamable HTTP entrypoint.

Usage::

    mcp-starter-http
    PORT=8080 mcp-starter-http

Endpoints:

- ``/mcp``: MCP traffic (POST, GET for the SSE stream, DELETE to close)
- ``/health``: liveness plus the number of open sessions

See https://modelcontextprotocol.io/docs/develop/transports#streamable-http
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import sys

import anyio
from dotenv import load_dotenv
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
import uvicorn

from .server import HTTPConfig, SessionTransportManager
from .server.config import SERVER_NAME, SERVER_VERSION
from .utils import configure_logging, get_logger


logger = get_logger("http")


def create_app(manager: SessionTransportManager | None = None) -> Starlette:
    """Build the ASGI app serving ``/mcp`` and ``/health``.

    The lifespan owns ``manager.run()``; callers driving the app without a
    lifespan (e.g. ``httpx.ASGITransport``) must enter it themselves.
    """

    manager = manager or SessionTransportManager()

    async def health(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "status": "ok",
                "server": SERVER_NAME,
                "version": SERVER_VERSION,
                "sessions": manager.session_count,
            }
        )

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with manager.run():
            yield

    app = Starlette(
        debug=False,
        routes=[
            Route("/mcp", manager),
            Route("/health", health, methods=["GET"]),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["GET", "POST", "DELETE"],
                allow_headers=["*"],
                expose_headers=["Mcp-Session-Id"],
            )
        ],
        lifespan=lifespan,
    )
    app.state.session_manager = manager
    return app


def build_manager(config: HTTPConfig) -> SessionTransportManager:
    return SessionTransportManager(
        json_response=config.json_response,
        security_settings=config.security_settings(),
    )


async def serve(config: HTTPConfig) -> None:
    app = create_app(build_manager(config))

    base = f"http://localhost:{config.port}"
    logger.info("%s running on %s", SERVER_NAME, base)
    logger.info("  MCP endpoint: %s/mcp", base)
    logger.info("  Health check: %s/health", base)
    if config.allowed_hosts:
        logger.info("  Allowed hosts: %s", ", ".join(config.allowed_hosts))

    server = uvicorn.Server(
        uvicorn.Config(
            app=app,
            host=config.host,
            port=config.port,
            log_level=config.log_level,
        )
    )
    await server.serve()


def main() -> None:
    load_dotenv()
    config = HTTPConfig.from_env()
    configure_logging(config.log_level)
    try:
        anyio.run(serve, config)
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
