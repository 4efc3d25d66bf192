"""MCP stdio transport adapter.

Exposes the tool router over the Model Context Protocol. The router already
turns every failure into an envelope; this layer converts envelopes to MCP
content and flags failed ones with ``isError``.
"""

from __future__ import annotations

import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from adapters.mcp_toolspecs import build_tools
from core.dispatch import ToolRouter
from core.models import Envelope

LOGGER = logging.getLogger(__name__)

SERVER_NAME = "sitewire"


class ToolCallFailed(Exception):
    """A rendered tool failure; the server reports it as an ``isError`` result."""


def to_content(envelope: Envelope) -> list[TextContent]:
    # The low-level server turns a raised exception into isError content
    # carrying str(exc), so failures keep their rendered text.
    if envelope.is_error:
        raise ToolCallFailed(envelope.text)
    return [TextContent(type="text", text=item["text"]) for item in envelope.content]


def build_server(router: ToolRouter) -> Server:
    server = Server(SERVER_NAME)
    tools = [tool for tool in build_tools() if tool.name in router.names]

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        return to_content(await router.dispatch(name, arguments))

    return server


async def serve_stdio(server: Server) -> None:
    LOGGER.info("MCP server listening on stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
