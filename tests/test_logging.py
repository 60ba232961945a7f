# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

from __future__ import annotations

import logging

from mcp_starter.utils import configure_logging, get_logger


def test_loggers_live_under_package_namespace():
    assert get_logger("sessions").name == "mcp_starter.sessions"
    assert get_logger("mcp_starter.http").name == "mcp_starter.http"
    assert get_logger().name == "mcp_starter"


def test_configure_logging_installs_single_stderr_handler():
    root = logging.getLogger("mcp_starter")
    saved = list(root.handlers), root.level, root.propagate
    try:
        configure_logging("debug", force=True)
        configure_logging("info")
        assert len(root.handlers) == 1
        assert root.level == logging.INFO
        assert root.propagate is False
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
        root.propagate = saved[2]
