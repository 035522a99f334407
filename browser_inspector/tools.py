"""Browser inspection tools shared by the CLI and the MCP server."""

from __future__ import annotations

import inspect
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from langchain_core.tools import StructuredTool
from pydantic import BaseModel

from .automation import BrowserAutomation
from .errors import UnknownToolError
from .models import CaptureArgs, ConsoleLogEntry, ExtractArgs, NetworkLogEntry, PageArgs, ToolResult
from .session import AutomationSession

CAPTURE_TOOL = "get_console_logs_and_take_screenshot"
EXTRACT_TOOL = "extract_elements"
CONSOLE_LOGS_TOOL = "get_console_logs"
CONSOLE_ERRORS_TOOL = "get_console_errors"
NETWORK_LOGS_TOOL = "get_network_logs"
NETWORK_ERRORS_TOOL = "get_network_errors"

TOOL_NAMES = (
    CAPTURE_TOOL,
    EXTRACT_TOOL,
    CONSOLE_LOGS_TOOL,
    CONSOLE_ERRORS_TOOL,
    NETWORK_LOGS_TOOL,
    NETWORK_ERRORS_TOOL,
)


def mcp_tool(
    _func: Optional[Callable[..., Any]] = None,
    *,
    name: Optional[str] = None,
    args_schema: Optional[Type[BaseModel]] = None,
    examples: Optional[List[str]] = None,
) -> Any:
    """Decorator to mark a method as an MCP-exposed tool."""

    def _decorate(func: Callable[..., Any]) -> Callable[..., Any]:
        setattr(func, "_is_mcp_tool", True)
        setattr(func, "_mcp_name", name or func.__name__)
        setattr(func, "_mcp_args_schema", args_schema)
        setattr(func, "_mcp_examples", examples or [])
        return func

    if _func is None:
        return _decorate
    return _decorate(_func)


def format_console_entries(entries: Sequence[ConsoleLogEntry]) -> str:
    return "\n".join(f"[{e.type}] {e.text}" for e in entries)


def format_network_entries(entries: Sequence[NetworkLogEntry]) -> str:
    return "\n".join(
        f"{e.method} {e.status if e.status is not None else '-'} {e.url}" for e in entries
    )


def format_extracted(extracted: Dict[str, List[str]]) -> str:
    blocks = []
    for selector, texts in extracted.items():
        lines = [f"Selector: {selector}"] + [f"  - {text}" for text in texts]
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def screenshot_filename(now: Optional[datetime] = None) -> str:
    """``login_capture_<UTC ISO timestamp>.png`` with ``:`` replaced by ``-``."""
    moment = now or datetime.now(timezone.utc)
    stamp = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    stamp = stamp.replace("+00:00", "Z").replace(":", "-")
    return f"login_capture_{stamp}.png"


class InspectorTools:
    """Navigate, wait for page activity to settle, then report what was captured."""

    def __init__(
        self,
        automation: BrowserAutomation,
        *,
        screenshot_dir: Optional[str] = None,
        settle_ms: Optional[int] = None,
        logger: Any = None,
    ):
        self.automation = automation
        self.screenshot_dir = str(screenshot_dir or automation.config.screenshot_dir)
        self.settle_ms = int(automation.config.settle_ms if settle_ms is None else settle_ms)
        self.logger = logger or logging.getLogger(__name__)
        self._tools: List[StructuredTool] = []

    def get_tools(self) -> List[StructuredTool]:
        """Export the MCP tools as langchain structured tools."""
        if self._tools:
            return self._tools

        tools: List[StructuredTool] = []
        for method_name in dir(self):
            method = getattr(self, method_name, None)
            if not callable(method):
                continue
            if not bool(getattr(method, "_is_mcp_tool", False)):
                continue

            tool_name = str(getattr(method, "_mcp_name", method.__name__) or method.__name__)
            doc = inspect.getdoc(method) or f"MCP tool: {tool_name}"
            examples = list(getattr(method, "_mcp_examples", []) or [])
            if examples:
                doc = f"{doc}\n\nExamples:\n" + "\n".join(f"- {x}" for x in examples)

            tools.append(
                StructuredTool.from_function(
                    name=tool_name,
                    description=doc,
                    coroutine=method,
                    args_schema=getattr(method, "_mcp_args_schema", None),
                )
            )

        tools.sort(key=lambda t: TOOL_NAMES.index(t.name) if t.name in TOOL_NAMES else len(TOOL_NAMES))
        self._tools = tools
        return self._tools

    def get_tool(self, name: str) -> StructuredTool:
        for tool in self.get_tools():
            if tool.name == name:
                return tool
        raise UnknownToolError(name)

    async def _open(self, session: AutomationSession, target_page: str, settle: bool = True) -> None:
        await session.navigate_to(target_page)
        if settle:
            await session.wait(self.settle_ms)

    def _ensure_dir(self, directory: str) -> None:
        try:
            Path(directory).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error("Failed to create directory %s: %s", directory, e)

    async def capture(
        self,
        target_page: str,
        *,
        screenshot_path: Optional[str] = None,
        output_dir: Optional[str] = None,
    ) -> ToolResult:
        """Screenshot the page and report its console log.

        ``screenshot_path`` wins when given; otherwise a timestamped file is
        written under ``output_dir`` (or the configured screenshot dir).
        """

        async def _action(session: AutomationSession) -> ToolResult:
            await self._open(session, target_page)
            if screenshot_path:
                path = str(screenshot_path)
            else:
                directory = str(output_dir or self.screenshot_dir)
                self._ensure_dir(directory)
                path = str(Path(directory) / screenshot_filename())
            await session.take_screenshot(path)
            logs = format_console_entries(session.get_console_logs())
            return ToolResult(text=f"Screenshot saved to {path}. Logs:\n{logs}")

        return await self.automation.run(_action)

    async def extract(self, target_page: str, selectors: Sequence[str]) -> ToolResult:
        async def _action(session: AutomationSession) -> ToolResult:
            await self._open(session, target_page, settle=False)
            marker = session.config.login_path_marker
            if self.automation.login_enabled and marker in str(session.current_url or ""):
                return ToolResult(text="Still on login page after login attempt.", is_error=True)
            extracted = await session.extract_elements(list(selectors))
            return ToolResult(text=format_extracted(extracted))

        return await self.automation.run(_action)

    async def console_logs(self, target_page: str) -> ToolResult:
        async def _action(session: AutomationSession) -> str:
            await self._open(session, target_page)
            return format_console_entries(session.get_console_logs()) or "No console logs."

        return await self.automation.run(_action)

    async def console_errors(self, target_page: str) -> ToolResult:
        async def _action(session: AutomationSession) -> str:
            await self._open(session, target_page)
            return format_console_entries(session.get_console_errors()) or "No console errors."

        return await self.automation.run(_action)

    async def network_logs(self, target_page: str) -> ToolResult:
        async def _action(session: AutomationSession) -> str:
            await self._open(session, target_page)
            return format_network_entries(session.get_network_logs()) or "No network logs."

        return await self.automation.run(_action)

    async def network_errors(self, target_page: str) -> ToolResult:
        async def _action(session: AutomationSession) -> str:
            await self._open(session, target_page)
            errors = session.get_network_errors()
            return "\n".join(errors) if errors else "No network errors."

        return await self.automation.run(_action)

    @mcp_tool(
        name=CAPTURE_TOOL,
        args_schema=CaptureArgs,
        examples=[
            "get_console_logs_and_take_screenshot(targetPage='https://example.com')",
            "get_console_logs_and_take_screenshot(targetPage='https://example.com', outputPath='/tmp/shots')",
        ],
    )
    async def mcp_capture(
        self,
        target_page: str,
        random_string: Optional[str] = None,
        output_path: Optional[str] = None,
    ) -> ToolResult:
        """
        Check our browser logs and take a screenshot of the current page.

        Args:
            target_page: URL to open before capturing.
            random_string (optional): Caller-supplied tag, ignored.
            output_path (optional): Directory for the screenshot. Falls back to
                the configured screenshot directory.

        Returns:
            ToolResult with the screenshot path followed by `[type] text` console lines.
        """
        return await self.capture(target_page, output_dir=output_path)

    @mcp_tool(
        name=EXTRACT_TOOL,
        args_schema=ExtractArgs,
        examples=["extract_elements(targetPage='https://example.com', selectors=['h1', '.price'])"],
    )
    async def mcp_extract_elements(self, target_page: str, selectors: List[str]) -> ToolResult:
        """
        Extract elements from a specified URL using provided CSS selectors.

        Returns one `Selector: <css>` block per selector listing the trimmed
        text of every match. Selectors without matches produce an empty block.
        """
        return await self.extract(target_page, selectors)

    @mcp_tool(name=CONSOLE_LOGS_TOOL, args_schema=PageArgs)
    async def mcp_console_logs(self, target_page: str, random_string: Optional[str] = None) -> ToolResult:
        """Check our browser logs."""
        return await self.console_logs(target_page)

    @mcp_tool(name=CONSOLE_ERRORS_TOOL, args_schema=PageArgs)
    async def mcp_console_errors(self, target_page: str, random_string: Optional[str] = None) -> ToolResult:
        """Get console errors for a given URL."""
        return await self.console_errors(target_page)

    @mcp_tool(name=NETWORK_LOGS_TOOL, args_schema=PageArgs)
    async def mcp_network_logs(self, target_page: str, random_string: Optional[str] = None) -> ToolResult:
        """Capture network logs for a page visit."""
        return await self.network_logs(target_page)

    @mcp_tool(name=NETWORK_ERRORS_TOOL, args_schema=PageArgs)
    async def mcp_network_errors(self, target_page: str, random_string: Optional[str] = None) -> ToolResult:
        """Capture failed network requests for a page."""
        return await self.network_errors(target_page)
