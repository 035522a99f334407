"""Console and network capture for an automation session."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from .event_log import SessionEventLog
from .models import ConsoleLogEntry, NetworkLogEntry

_EVENTS = ("console", "requestfinished", "requestfailed")


def format_location(location: Any) -> str:
    """Compose ``url:line:column``; missing parts are rendered as ``None``."""
    loc = location if isinstance(location, dict) else {}
    return f"{loc.get('url')}:{loc.get('lineNumber')}:{loc.get('columnNumber')}"


def format_request_failure(method: Any, url: Any, error_text: Any) -> str:
    return f"{method} {url} failed: {error_text}"


class NetworkInspector:
    """Attach page observers that feed a ``SessionEventLog``."""

    def __init__(self, event_log: SessionEventLog, logger: Any = None):
        self.event_log = event_log
        self.logger = logger or logging.getLogger(__name__)
        self._page: Any = None
        self._handlers: Dict[str, Any] = {}
        self._tasks: Set[asyncio.Task[Any]] = set()

    def attach_listeners(self, page: Any) -> None:
        if self._page is not None:
            return
        if page is None:
            raise RuntimeError("No active browser page for listener attachment")

        def _on_console(msg: Any) -> None:
            self._handle_console(msg)

        def _on_request_finished(request: Any) -> None:
            self._spawn(self._handle_request_finished(request))

        def _on_request_failed(request: Any) -> None:
            self._handle_request_failed(request)

        page.on("console", _on_console)
        page.on("requestfinished", _on_request_finished)
        page.on("requestfailed", _on_request_failed)

        self._handlers = {
            "console": _on_console,
            "requestfinished": _on_request_finished,
            "requestfailed": _on_request_failed,
        }
        self._page = page

    async def detach_listeners(self) -> None:
        page = self._page
        if page is not None:
            for evt in _EVENTS:
                handler = self._handlers.get(evt)
                if handler is None:
                    continue
                try:
                    page.remove_listener(evt, handler)
                except Exception as e:
                    self.logger.debug("Failed to remove %s listener: %s", evt, e)
        self._page = None
        self._handlers = {}
        tasks = list(self._tasks)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    def pending_tasks(self) -> int:
        return len([t for t in self._tasks if not t.done()])

    def _spawn(self, coro: Any) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _handle_console(self, msg: Any) -> None:
        self.event_log.append_console(
            ConsoleLogEntry(
                type=str(getattr(msg, "type", "") or ""),
                text=str(getattr(msg, "text", "") or ""),
                location=format_location(getattr(msg, "location", None)),
            )
        )

    async def _handle_request_finished(self, request: Any) -> None:
        # A missing response and a response that fails to resolve both
        # count as an absent status; neither is a transport failure.
        status: Optional[int] = None
        try:
            response = await request.response()
            if response is not None:
                status = int(response.status)
        except Exception as e:
            self.logger.debug("Response unavailable for %s: %s", request.url, e)
            status = None
        self.event_log.append_network(
            NetworkLogEntry(url=str(request.url), method=str(request.method), status=status)
        )

    def _handle_request_failed(self, request: Any) -> None:
        message = format_request_failure(request.method, request.url, request.failure)
        self.logger.debug("Request failed: %s", message)
        self.event_log.append_network_error(message)
