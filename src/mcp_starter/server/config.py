# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

"""Server configuration dataclasses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import os

from mcp.server.transport_security import TransportSecuritySettings


SERVER_NAME = "mcp-python-starter"
SERVER_VERSION = "1.0.0"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


@dataclass(slots=True, frozen=True)
class SamplingConfig:
    """Configuration for the sampling service.

    Sampling allows the server to request LLM completions from the client.

    See: https://modelcontextprotocol.io/specification/2025-06-18/client/sampling
    """

    timeout: float = 60.0
    """Timeout in seconds for sampling requests."""


@dataclass(slots=True, frozen=True)
class ElicitationConfig:
    """Configuration for the elicitation service.

    Elicitation allows the server to request structured input from the user.
    A human sits on the other end, so the timeout is generous.

    See: https://modelcontextprotocol.io/specification/2025-06-18/client/elicitation
    """

    timeout: float = 300.0
    """Timeout in seconds for elicitation requests."""


@dataclass(slots=True)
class ServerConfig:
    """Tunable parameters for :func:`mcp_starter.server.create_server`.

    All fields have sane defaults. Override only what you need.

    Example:
        >>> from mcp_starter.server import ServerConfig
        >>>
        >>> config = ServerConfig(long_task_step_delay=0.0)
    """

    name: str = SERVER_NAME
    """Server name reported in ``serverInfo``."""

    version: str = SERVER_VERSION
    """Server version reported in ``serverInfo``."""

    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    """Sampling service configuration."""

    elicitation: ElicitationConfig = field(default_factory=ElicitationConfig)
    """Elicitation service configuration."""

    pagination_limit: int = 50
    """Page size for list operations (tools, resources, prompts)."""

    long_task_steps: int = 5
    """Number of progress steps reported by ``long_task``."""

    long_task_step_delay: float = 1.0
    """Seconds slept between ``long_task`` steps."""


@dataclass(slots=True, frozen=True)
class HTTPConfig:
    """Listener settings for the Streamable HTTP entrypoint."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    json_response: bool = False
    log_level: str = "info"
    allowed_hosts: tuple[str, ...] = ()
    """Host headers accepted on ``/mcp``; empty disables DNS rebinding protection."""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> HTTPConfig:
        """Read ``PORT``, ``HOST``, ``LOG_LEVEL`` and ``ALLOWED_HOSTS`` from the environment.

        ``PORT`` falls back to 3000 when unset or not an integer.
        ``ALLOWED_HOSTS`` is comma separated (``localhost:*,example.com``).
        """

        env = os.environ if environ is None else environ
        return cls(
            host=env.get("HOST") or DEFAULT_HOST,
            port=_parse_port(env.get("PORT")),
            log_level=(env.get("LOG_LEVEL") or "info").lower(),
            allowed_hosts=_parse_hosts(env.get("ALLOWED_HOSTS")),
        )

    def security_settings(self) -> TransportSecuritySettings | None:
        if not self.allowed_hosts:
            return None
        return TransportSecuritySettings(
            enable_dns_rebinding_protection=True,
            allowed_hosts=list(self.allowed_hosts),
            allowed_origins=[f"http://{host}" for host in self.allowed_hosts],
        )


def _parse_port(raw: str | None) -> int:
    if raw is None:
        return DEFAULT_PORT
    try:
        return int(raw.strip())
    except ValueError:
        return DEFAULT_PORT


def _parse_hosts(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(host.strip() for host in raw.split(",") if host.strip())


__all__ = [
    "DEFAULT_PORT",
    "SERVER_NAME",
    "SERVER_VERSION",
    "ElicitationConfig",
    "HTTPConfig",
    "SamplingConfig",
    "ServerConfig",
]
