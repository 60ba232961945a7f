# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""STDIO entrypoint.

Runs one server over stdin/stdout, the transport local clients (VS Code,
Claude Desktop ...) spawn directly.  Logs go to stderr.

Usage::

    mcp-starter-stdio

See https://modelcontextprotocol.io/docs/develop/transports#stdio
"""

from __future__ import annotations

import os
import sys

import anyio
from dotenv import load_dotenv

from .server import create_server
from .utils import configure_logging, get_logger


logger = get_logger("stdio")


async def serve() -> None:
    server = create_server()
    logger.info("%s running on stdio", server.name)
    await server.serve_stdio()


def main() -> None:
    load_dotenv()
    configure_logging(os.environ.get("LOG_LEVEL", "info"))
    try:
        anyio.run(serve)
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
