"""Shared fixtures: an in-memory stand-in for the Playwright driver."""

from __future__ import annotations

from collections import defaultdict
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


def console_message(kind: str, text: str, location: Optional[Dict[str, Any]] = None) -> Any:
    return SimpleNamespace(
        type=kind,
        text=text,
        location=location if location is not None else {"url": "https://app.test/main.js", "lineNumber": 3, "columnNumber": 7},
    )


class FakeRequest:
    def __init__(
        self,
        url: str,
        method: str = "GET",
        status: Optional[int] = 200,
        failure: Optional[str] = None,
        response_error: Optional[Exception] = None,
    ):
        self.url = url
        self.method = method
        self.status = status
        self.failure = failure
        self.response_error = response_error

    async def response(self) -> Any:
        if self.response_error is not None:
            raise self.response_error
        if self.status is None:
            return None
        return SimpleNamespace(status=self.status)


class FakePage:
    def __init__(self, driver: "FakePlaywright"):
        self.driver = driver
        self.url = "about:blank"
        self.listeners: Dict[str, List[Any]] = defaultdict(list)
        self.calls: List[Tuple[Any, ...]] = []
        self.screenshots: List[Tuple[str, bool]] = []
        self.default_timeout: Optional[float] = None

    def on(self, event: str, handler: Any) -> None:
        self.listeners[event].append(handler)

    def remove_listener(self, event: str, handler: Any) -> None:
        self.listeners[event].remove(handler)

    def emit(self, event: str, payload: Any) -> None:
        for handler in list(self.listeners[event]):
            handler(payload)

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    def set_default_navigation_timeout(self, timeout: float) -> None:
        self.calls.append(("set_default_navigation_timeout", timeout))

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.calls.append(("goto", url, wait_until))
        if self.driver.goto_error is not None:
            raise self.driver.goto_error
        self.url = self.driver.redirects.get(url, url)
        for event, payload in self.driver.page_events.get(url, []):
            self.emit(event, payload)

    async def wait_for_selector(self, selector: str) -> None:
        self.calls.append(("wait_for_selector", selector))

    async def fill(self, selector: str, value: str) -> None:
        self.calls.append(("fill", selector, value))

    async def click(self, selector: str) -> None:
        self.calls.append(("click", selector))
        if self.driver.submit_redirect:
            self.url = self.driver.submit_redirect

    async def wait_for_function(self, expression: str, arg: Any = None, timeout: Optional[float] = None) -> None:
        self.calls.append(("wait_for_function", arg, timeout))
        if str(arg) in urlparse(self.url).path:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def screenshot(self, path: Optional[str] = None, full_page: bool = False) -> bytes:
        if self.driver.screenshot_error is not None:
            raise self.driver.screenshot_error
        self.screenshots.append((str(path), full_page))
        return b"\x89PNG"

    async def eval_on_selector_all(self, selector: str, expression: str) -> List[str]:
        self.calls.append(("eval_on_selector_all", selector))
        # Mirrors the page-side textContent trim; null text becomes empty.
        return [(raw or "").strip() for raw in self.driver.elements.get(selector, [])]


class FakeContext:
    def __init__(self, driver: "FakePlaywright"):
        self.driver = driver
        self.closed = False

    async def new_page(self) -> FakePage:
        page = FakePage(self.driver)
        self.driver.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, driver: "FakePlaywright"):
        self.driver = driver
        self.closed = False

    async def new_context(self) -> FakeContext:
        return FakeContext(self.driver)

    async def close(self) -> None:
        self.closed = True


class FakeChromium:
    def __init__(self, driver: "FakePlaywright"):
        self.driver = driver

    async def launch(self, headless: bool = True, args: Optional[List[str]] = None) -> FakeBrowser:
        self.driver.launches.append({"headless": headless, "args": list(args or [])})
        if self.driver.launch_error is not None:
            raise self.driver.launch_error
        browser = FakeBrowser(self.driver)
        self.driver.browsers.append(browser)
        return browser


class FakePlaywright:
    """Scriptable driver: every launched browser opens a page sharing this script."""

    def __init__(self) -> None:
        self.chromium = FakeChromium(self)
        self.launches: List[Dict[str, Any]] = []
        self.browsers: List[FakeBrowser] = []
        self.pages: List[FakePage] = []
        self.starts = 0
        self.stops = 0
        self.page_events: Dict[str, List[Tuple[str, Any]]] = {}
        self.redirects: Dict[str, str] = {}
        self.elements: Dict[str, List[str]] = {}
        self.submit_redirect: Optional[str] = None
        self.goto_error: Optional[Exception] = None
        self.launch_error: Optional[Exception] = None
        self.screenshot_error: Optional[Exception] = None

    @property
    def page(self) -> FakePage:
        return self.pages[-1]

    async def stop(self) -> None:
        self.stops += 1


class _Starter:
    def __init__(self, driver: FakePlaywright):
        self.driver = driver

    async def start(self) -> FakePlaywright:
        self.driver.starts += 1
        return self.driver


@pytest.fixture
def fake_playwright(monkeypatch: pytest.MonkeyPatch) -> FakePlaywright:
    driver = FakePlaywright()
    monkeypatch.setattr("browser_inspector.session.async_playwright", lambda: _Starter(driver))
    return driver
