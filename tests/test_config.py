# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

from __future__ import annotations

import pytest

from mcp_starter.server import ElicitationConfig, HTTPConfig, SamplingConfig, ServerConfig
from mcp_starter.server.config import DEFAULT_PORT


def test_server_config_defaults():
    config = ServerConfig()
    assert config.name == "mcp-python-starter"
    assert config.version == "1.0.0"
    assert config.pagination_limit == 50
    assert config.long_task_steps == 5
    assert config.sampling == SamplingConfig(timeout=60.0)
    assert config.elicitation == ElicitationConfig(timeout=300.0)


def test_http_config_defaults_to_port_3000():
    config = HTTPConfig.from_env({})
    assert config.port == DEFAULT_PORT == 3000
    assert config.host == "0.0.0.0"
    assert config.log_level == "info"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("8080", 8080), (" 9000 ", 9000), ("", 3000), ("abc", 3000), ("80.5", 3000)],
)
def test_http_config_parses_port(raw, expected):
    assert HTTPConfig.from_env({"PORT": raw}).port == expected


def test_http_config_reads_host_and_log_level():
    config = HTTPConfig.from_env({"HOST": "127.0.0.1", "LOG_LEVEL": "DEBUG"})
    assert config.host == "127.0.0.1"
    assert config.log_level == "debug"


def test_http_config_reads_process_environment(monkeypatch):
    monkeypatch.setenv("PORT", "4321")
    assert HTTPConfig.from_env().port == 4321


def test_http_config_reads_allowed_hosts():
    config = HTTPConfig.from_env({"ALLOWED_HOSTS": " localhost:*, example.com ,,"})
    assert config.allowed_hosts == ("localhost:*", "example.com")

    settings = config.security_settings()
    assert settings.enable_dns_rebinding_protection is True
    assert settings.allowed_hosts == ["localhost:*", "example.com"]
    assert settings.allowed_origins == ["http://localhost:*", "http://example.com"]


def test_http_config_without_allowed_hosts_has_no_security_settings():
    config = HTTPConfig.from_env({})
    assert config.allowed_hosts == ()
    assert config.security_settings() is None
