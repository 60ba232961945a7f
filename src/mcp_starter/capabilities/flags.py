# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Process-wide record of dynamically loaded capabilities."""

from __future__ import annotations

import threading


class BonusToolFlag:
    """One-way flag recording that the bonus tool has been loaded.

    Starts false, flips to true once, never resets (outside tests).  The
    flag is shared by every session in the process; what it *controls* is
    per server instance: the factory attaches the bonus tool to instances
    built after the flag is set.
    """

    def __init__(self) -> None:
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def try_mark_loaded(self) -> bool:
        """Set the flag; return ``True`` only for the caller that flipped it."""

        with self._lock:
            if self._loaded:
                return False
            self._loaded = True
            return True

    def reset(self) -> None:
        """Clear the flag. Test helper only."""

        with self._lock:
            self._loaded = False


bonus_tool_flag = BonusToolFlag()


__all__ = ["BonusToolFlag", "bonus_tool_flag"]
