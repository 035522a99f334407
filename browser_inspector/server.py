"""MCP server exposing the browser inspection tools over stdio.

Each tool call runs in a brand new browser session: optional login from the
server configuration, the tool action, then the session is closed. Nothing
is kept between calls.

Configuration comes from the environment at startup (see
``InspectorConfig.from_env``). Logs go to stderr so they never interleave
with the JSON-RPC stream on stdout.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from pydantic import ValidationError

from .automation import BrowserAutomation
from .config import InspectorConfig, setup_logging
from .errors import UnknownToolError
from .tools import InspectorTools

SERVER_NAME = "mcp-browser-inspector"
SERVER_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def _text_result(text: str, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


class InspectorServer:
    """MCP server for the browser inspection tools."""

    def __init__(
        self,
        config: Optional[InspectorConfig] = None,
        *,
        tools: Optional[InspectorTools] = None,
    ):
        self.config = config or InspectorConfig()
        self.tools = tools or InspectorTools(BrowserAutomation(config=self.config))
        self.server: Server = Server(SERVER_NAME)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            return self.list_tool_definitions()

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
            return await self.call_tool(name, arguments or {})

    def list_tool_definitions(self) -> List[types.Tool]:
        definitions: List[types.Tool] = []
        for tool in self.tools.get_tools():
            schema = tool.args_schema.model_json_schema() if tool.args_schema else {"type": "object"}
            definitions.append(
                types.Tool(
                    name=tool.name,
                    description=tool.description.split("\n\n", 1)[0],
                    inputSchema=schema,
                )
            )
        return definitions

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> types.CallToolResult:
        try:
            tool = self.tools.get_tool(name)
        except UnknownToolError as e:
            logger.warning("%s", e)
            return _text_result(str(e), is_error=True)

        try:
            payload = tool.args_schema.model_validate(arguments)
            result = await tool.coroutine(**payload.model_dump())
        except ValidationError as e:
            return _text_result(f"Error: invalid arguments for {name}: {e}", is_error=True)
        except Exception as e:
            logger.debug("Tool %s failed", name, exc_info=True)
            return _text_result(f"Error: {e}", is_error=True)

        return _text_result(result.text, is_error=result.is_error)

    async def run(self) -> None:
        async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
            logger.info("%s is running", SERVER_NAME)
            await self.server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=SERVER_VERSION,
                    capabilities=self.server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )


def main() -> None:
    setup_logging(os.environ.get("LOG_LEVEL") or "WARNING")
    config = InspectorConfig.from_env()
    asyncio.run(InspectorServer(config).run())


if __name__ == "__main__":
    main()
