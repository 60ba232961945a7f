# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

from __future__ import annotations

import pytest

from mcp_starter.capabilities import bonus_tool_flag
from mcp_starter.server import MCPServer, ServerConfig, create_server


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_bonus_tool_flag():
    bonus_tool_flag.reset()
    yield
    bonus_tool_flag.reset()


@pytest.fixture
def fast_config() -> ServerConfig:
    return ServerConfig(long_task_step_delay=0.0)


@pytest.fixture
def server(fast_config: ServerConfig) -> MCPServer:
    return create_server(fast_config)
