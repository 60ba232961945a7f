# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Logging helpers.

Everything logs to stderr: the stdio transport owns stdout for protocol
frames.
"""

from __future__ import annotations

import logging
import sys

_ROOT = "mcp_starter"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``mcp_starter`` namespace."""

    if not name:
        return logging.getLogger(_ROOT)
    if name == _ROOT or name.startswith(f"{_ROOT}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")


def configure_logging(level: int | str = logging.INFO, *, force: bool = False) -> None:
    """Attach a single stderr handler to the package logger.

    Calling this more than once is harmless unless ``force`` is set, in
    which case existing handlers are replaced.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(_ROOT)
    if logger.handlers and not force:
        logger.setLevel(level)
        return

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


__all__ = ["configure_logging", "get_logger"]
