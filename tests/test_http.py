# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

from __future__ import annotations

from functools import partial

import httpx
import mcp.types as types
import pytest

import mcp_starter.http as http_entrypoint
from mcp_starter.http import build_manager, create_app, serve
from mcp_starter.server import HTTPConfig, SessionTransportManager, create_server


HEADERS = {
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": types.LATEST_PROTOCOL_VERSION,
        "capabilities": {},
        "clientInfo": {"name": "pytest", "version": "1.0"},
    },
}


@pytest.fixture
def manager(fast_config) -> SessionTransportManager:
    return SessionTransportManager(partial(create_server, fast_config), json_response=True)


@pytest.mark.anyio
async def test_health_reports_session_count(manager):
    app = create_app(manager)

    async with manager.run():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/health")
            assert response.status_code == 200
            assert response.json() == {
                "status": "ok",
                "server": "mcp-python-starter",
                "version": "1.0.0",
                "sessions": 0,
            }

            handshake = await client.post("/mcp", json=INITIALIZE, headers=HEADERS)
            assert handshake.status_code == 200

            response = await client.get("/health")
            assert response.json()["sessions"] == 1

            await client.delete("/mcp", headers={"mcp-session-id": handshake.headers["mcp-session-id"]})
            response = await client.get("/health")
            assert response.json()["sessions"] == 0


@pytest.mark.anyio
async def test_cors_exposes_session_header(manager):
    app = create_app(manager)

    async with manager.run():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.post(
                "/mcp",
                json=INITIALIZE,
                headers={**HEADERS, "Origin": "http://localhost:5173"},
            )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "mcp-session-id" in response.headers["access-control-expose-headers"].lower()


def test_create_app_builds_default_manager():
    app = create_app()
    assert isinstance(app.state.session_manager, SessionTransportManager)
    paths = {route.path for route in app.routes}
    assert {"/mcp", "/health"} <= paths


def test_build_manager_applies_listener_settings():
    manager = build_manager(HTTPConfig(json_response=True, allowed_hosts=("localhost:3000",)))
    assert manager.json_response is True
    assert manager.security_settings.enable_dns_rebinding_protection is True
    assert manager.security_settings.allowed_hosts == ["localhost:3000"]

    assert build_manager(HTTPConfig()).security_settings is None


def test_main_runs_server_under_anyio(monkeypatch):
    calls = []
    monkeypatch.setenv("PORT", "4100")
    monkeypatch.setattr(http_entrypoint, "configure_logging", lambda level: None)
    monkeypatch.setattr(http_entrypoint.anyio, "run", lambda fn, *args: calls.append((fn, args)))

    http_entrypoint.main()

    [(fn, args)] = calls
    assert fn is serve
    assert args[0].port == 4100
