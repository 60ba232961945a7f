# Copyright (c) 2026 Dedalus Labs, Inc. and its contributors
# SPDX-License-Identifier: MIT

from __future__ import annotations

import json

from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session
import mcp.types as types
from pydantic import AnyUrl
import pytest

from mcp_starter.capabilities.resources import ABOUT_TEXT


def test_factory_registers_resources(server):
    assert server.resource_uris == ["info://about"]
    assert server.resource_template_uris == ["data://items/{id}", "greeting://{name}"]


@pytest.mark.anyio
async def test_about_resource(server):
    result = await server.invoke_resource("info://about")
    content = result.contents[0]
    assert isinstance(content, types.TextResourceContents)
    assert content.mimeType == "text/plain"
    assert content.text == ABOUT_TEXT
    assert content.text.startswith("mcp-python-starter v1.0.0")


@pytest.mark.anyio
async def test_greeting_template(server):
    result = await server.invoke_resource("greeting://Alice")
    assert result.contents[0].text == "Hello, Alice! This greeting was generated just for you."


@pytest.mark.anyio
@pytest.mark.parametrize(("item_id", "name"), [("1", "Widget"), ("2", "Gadget"), ("3", "Gizmo")])
async def test_item_template(server, item_id, name):
    result = await server.invoke_resource(f"data://items/{item_id}")
    content = result.contents[0]
    assert content.mimeType == "application/json"
    payload = json.loads(content.text)
    assert payload["id"] == item_id
    assert payload["name"] == name


@pytest.mark.anyio
async def test_unknown_item_is_an_error(server):
    with pytest.raises(McpError) as exc:
        await server.invoke_resource("data://items/99")
    assert exc.value.error.message == "Item not found: 99"


@pytest.mark.anyio
async def test_resources_over_client_session(server):
    async with create_connected_server_and_client_session(server) as client:
        listed = await client.list_resources()
        templates = await client.list_resource_templates()
        about = await client.read_resource(AnyUrl("info://about"))
        item = await client.read_resource(AnyUrl("data://items/2"))

        with pytest.raises(McpError) as exc:
            await client.read_resource(AnyUrl("data://items/404"))

    assert [str(r.uri) for r in listed.resources] == ["info://about"]
    assert {t.name for t in templates.resourceTemplates} == {"Personalized Greeting", "Item Data"}
    assert about.contents[0].text == ABOUT_TEXT
    assert json.loads(item.contents[0].text)["name"] == "Gadget"
    assert "Item not found: 404" in exc.value.error.message
