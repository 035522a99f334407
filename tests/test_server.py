"""Tests for the MCP tool server dispatch."""

from __future__ import annotations

import mcp.types as types
import pytest

from browser_inspector.config import InspectorConfig, LoginSettings
from browser_inspector.server import SERVER_NAME, InspectorServer
from browser_inspector.tools import TOOL_NAMES

from .conftest import console_message

PAGE = "https://app.test/"


def _server(tmp_path, **config_kwargs) -> InspectorServer:
    return InspectorServer(InspectorConfig(settle_ms=0, screenshot_dir=str(tmp_path), **config_kwargs))


class TestToolListing:
    def test_server_name(self, tmp_path) -> None:
        assert _server(tmp_path).server.name == SERVER_NAME

    def test_lists_six_tools(self, tmp_path) -> None:
        definitions = _server(tmp_path).list_tool_definitions()
        assert [d.name for d in definitions] == list(TOOL_NAMES)

    def test_input_schemas_use_wire_names(self, tmp_path) -> None:
        definitions = {d.name: d for d in _server(tmp_path).list_tool_definitions()}

        extract = definitions["extract_elements"].inputSchema
        assert set(extract["required"]) == {"targetPage", "selectors"}
        assert extract["properties"]["selectors"]["type"] == "array"

        capture = definitions["get_console_logs_and_take_screenshot"].inputSchema
        assert capture["required"] == ["targetPage"]
        assert "outputPath" in capture["properties"]

    def test_descriptions_are_single_paragraph(self, tmp_path) -> None:
        definitions = {d.name: d for d in _server(tmp_path).list_tool_definitions()}
        assert definitions["get_console_logs"].description == "Check our browser logs."


class TestCallTool:
    @pytest.mark.asyncio
    async def test_unknown_tool_is_error_response(self, tmp_path, fake_playwright) -> None:
        result = await _server(tmp_path).call_tool("format_disk", {})
        assert result.isError is True
        assert result.content[0].text == "Unknown tool: format_disk"
        assert fake_playwright.launches == []

    @pytest.mark.asyncio
    async def test_console_logs(self, tmp_path, fake_playwright) -> None:
        fake_playwright.page_events[PAGE] = [("console", console_message("log", "hello"))]

        result = await _server(tmp_path).call_tool(
            "get_console_logs", {"targetPage": PAGE, "randomString": "abc"}
        )

        assert result.isError is False
        assert result.content[0].type == "text"
        assert result.content[0].text == "[log] hello"
        assert fake_playwright.launches[0]["headless"] is True
        assert fake_playwright.browsers[0].closed is True

    @pytest.mark.asyncio
    async def test_capture_honors_output_path(self, tmp_path, fake_playwright) -> None:
        out_dir = tmp_path / "elsewhere"
        result = await _server(tmp_path).call_tool(
            "get_console_logs_and_take_screenshot",
            {"targetPage": PAGE, "randomString": "x", "outputPath": str(out_dir)},
        )
        assert result.isError is False
        assert out_dir.is_dir()
        assert result.content[0].text.startswith(f"Screenshot saved to {out_dir}")

    @pytest.mark.asyncio
    async def test_extract_elements(self, tmp_path, fake_playwright) -> None:
        fake_playwright.elements = {"h1": ["hello"]}
        result = await _server(tmp_path).call_tool(
            "extract_elements", {"targetPage": PAGE, "selectors": ["h1", "#missing"]}
        )
        assert result.isError is False
        assert result.content[0].text == "Selector: h1\n  - hello\n\nSelector: #missing"

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, tmp_path, fake_playwright) -> None:
        result = await _server(tmp_path).call_tool("extract_elements", {"targetPage": PAGE})
        assert result.isError is True
        assert result.content[0].text.startswith("Error: invalid arguments for extract_elements")
        assert fake_playwright.launches == []

    @pytest.mark.asyncio
    async def test_in_flight_error_closes_session(self, tmp_path, fake_playwright) -> None:
        fake_playwright.goto_error = RuntimeError("net::ERR_NAME_NOT_RESOLVED")
        result = await _server(tmp_path).call_tool("get_network_logs", {"targetPage": PAGE})
        assert result.isError is True
        assert result.content[0].text == "Error: net::ERR_NAME_NOT_RESOLVED"
        assert fake_playwright.browsers[0].closed is True

    @pytest.mark.asyncio
    async def test_missing_login_configuration(self, tmp_path, fake_playwright) -> None:
        server = _server(tmp_path, login=LoginSettings(enabled=True, login_url="https://app.test/login"))
        result = await server.call_tool("get_console_errors", {"targetPage": PAGE})
        assert result.isError is True
        assert "Missing login configuration" in result.content[0].text
        assert fake_playwright.launches == []


class TestRegisteredHandlers:
    """Requests dispatched through the handlers registered on the MCP server."""

    @staticmethod
    async def _dispatch_call(server: InspectorServer, name: str, arguments: dict) -> types.CallToolResult:
        handler = server.server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name=name, arguments=arguments),
        )
        response = await handler(request)
        return response.root

    @pytest.mark.asyncio
    async def test_list_tools_request(self, tmp_path) -> None:
        server = _server(tmp_path)
        handler = server.server.request_handlers[types.ListToolsRequest]

        response = await handler(types.ListToolsRequest(method="tools/list"))

        assert [t.name for t in response.root.tools] == list(TOOL_NAMES)

    @pytest.mark.asyncio
    async def test_call_tool_request(self, tmp_path, fake_playwright) -> None:
        fake_playwright.page_events[PAGE] = [
            ("console", console_message("log", "fine")),
            ("console", console_message("error", "x")),
        ]
        result = await self._dispatch_call(_server(tmp_path), "get_console_errors", {"targetPage": PAGE})

        assert result.isError is False
        assert result.content[0].text == "[error] x"
        assert fake_playwright.browsers[0].closed is True

    @pytest.mark.asyncio
    async def test_unknown_tool_request(self, tmp_path, fake_playwright) -> None:
        result = await self._dispatch_call(_server(tmp_path), "nope", {})

        assert result.isError is True
        assert result.content[0].text == "Unknown tool: nope"
        assert fake_playwright.launches == []

    @pytest.mark.asyncio
    async def test_missing_selectors_rejected_before_launch(self, tmp_path, fake_playwright) -> None:
        server = _server(tmp_path)
        await server.server.request_handlers[types.ListToolsRequest](types.ListToolsRequest(method="tools/list"))

        result = await self._dispatch_call(server, "extract_elements", {"targetPage": PAGE})

        assert result.isError is True
        assert "selectors" in result.content[0].text
        assert fake_playwright.launches == []
