"""
MCP server exposing the query tools over stdio.

Usage:
    python main.py
"""

import asyncio
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.types import TextContent, Tool

from dynamics_assistant.config import settings
from dynamics_assistant.services import Services, build_services
from dynamics_assistant.tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)


def create_server(dispatcher: ToolDispatcher, name: Optional[str] = None) -> Server:
    """Register the dispatcher's tools on a new MCP server."""
    app = Server(name or settings.server_name)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        logger.info("Listing available tools...")
        return dispatcher.list_tools()

    @app.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        # Connector calls are blocking; keep them off the event loop
        result = await asyncio.to_thread(dispatcher.call_tool, name, arguments)
        logger.info("Tool %s executed", name)
        return result

    return app


async def run_stdio(services: Optional[Services] = None) -> None:
    """Serve the tools on stdin/stdout until the client disconnects."""
    from mcp.server.stdio import stdio_server

    owned = services is None
    svc = services or build_services()
    app = create_server(ToolDispatcher(svc))
    logger.info("Starting MCP server '%s'...", settings.server_name)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        if owned:
            svc.dispose()
        logger.info("MCP server stopped")
