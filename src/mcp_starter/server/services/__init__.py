# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Server-to-client request services."""

from .elicitation import ElicitationService
from .sampling import SamplingService

__all__ = ["ElicitationService", "SamplingService"]
