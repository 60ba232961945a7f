# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Utility helpers for mcp_starter."""

from .logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
