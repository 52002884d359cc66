"""Tests for the MCP server wiring."""

import pytest
from mcp.types import CallToolRequest, CallToolRequestParams, ListToolsRequest

from dynamics_assistant.server import create_server
from dynamics_assistant.tools.dispatcher import ToolDispatcher


@pytest.fixture
def app(services):
    return create_server(ToolDispatcher(services), name="test-server")


class TestCreateServer:
    def test_name(self, app):
        assert app.name == "test-server"

    def test_handlers_registered(self, app):
        assert ListToolsRequest in app.request_handlers
        assert CallToolRequest in app.request_handlers

    @pytest.mark.asyncio
    async def test_list_tools(self, app):
        handler = app.request_handlers[ListToolsRequest]
        result = await handler(ListToolsRequest(method="tools/list"))
        assert len(result.root.tools) == 6

    @pytest.mark.asyncio
    async def test_call_tool_runs_dispatcher(self, app):
        handler = app.request_handlers[CallToolRequest]
        request = CallToolRequest(
            method="tools/call",
            params=CallToolRequestParams(name="d365", arguments={"command": "incident:count"}),
        )
        result = await handler(request)
        assert not result.root.isError
        assert result.root.content[0].text == "Total de registros de incidents: 3"
