# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Public server-side surface for the starter.

Host applications import the server class, its factory, configuration and
the session-multiplexed HTTP transport from here.
"""

from __future__ import annotations

from mcp.server.transport_security import TransportSecuritySettings

from .app import MCPServer, NotificationFlags
from .config import ElicitationConfig, HTTPConfig, SamplingConfig, ServerConfig
from .factory import SERVER_INSTRUCTIONS, create_server
from .sessions import Session, SessionTable, SessionTransportManager


__all__ = [
    # Core
    "MCPServer",
    "NotificationFlags",
    "create_server",
    "SERVER_INSTRUCTIONS",
    # Config
    "ServerConfig",
    "SamplingConfig",
    "ElicitationConfig",
    "HTTPConfig",
    # Transport
    "TransportSecuritySettings",
    "Session",
    "SessionTable",
    "SessionTransportManager",
]
