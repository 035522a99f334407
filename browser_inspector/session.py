"""Playwright automation session: one browser, one page, captured logs."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .errors import SessionNotInitializedError, SessionStateError
from .event_log import SessionEventLog
from .models import (
    ConsoleLogEntry,
    LoginCredentials,
    LoginResult,
    LoginSelectors,
    LoginStatus,
    NetworkLogEntry,
    SessionConfig,
    SessionState,
)
from .network_inspector import NetworkInspector

_EXTRACT_TEXT_JS = "elements => elements.map(el => (el.textContent || '').trim())"
_LEFT_LOGIN_JS = "marker => !window.location.pathname.includes(marker)"


class AutomationSession:
    """Own one Playwright browser + page and record its console/network activity.

    Lifecycle is ``UNINITIALIZED -> INITIALIZED -> CLOSED``. A closed session
    cannot be initialized again; construct a new one instead.

    Page operations share a single page handle without locking, so callers
    must await them one at a time.

    Typical use:
        session = AutomationSession(SessionConfig(headless=True))
        await session.initialize()
        try:
            await session.navigate_to("https://example.com")
            await session.wait(2000)
            errors = session.get_console_errors()
        finally:
            await session.close()
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        *,
        event_log: Optional[SessionEventLog] = None,
        logger: Any = None,
    ):
        self.config = config or SessionConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.event_log = event_log or SessionEventLog()
        self.inspector = NetworkInspector(self.event_log, logger=self.logger)
        self._state = SessionState.UNINITIALIZED
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._page: Any = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def page(self) -> Any:
        return self._page

    @property
    def current_url(self) -> Optional[str]:
        if self._page is None:
            return None
        try:
            return self._page.url
        except Exception:
            return None

    async def __aenter__(self) -> "AutomationSession":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def initialize(self, headless: Optional[bool] = None) -> None:
        if self._state is SessionState.INITIALIZED:
            raise SessionStateError("Session is already initialized")
        if self._state is SessionState.CLOSED:
            raise SessionStateError("Session is closed; create a new session")

        resolved_headless = self.config.headless if headless is None else bool(headless)
        pw = await async_playwright().start()
        try:
            browser = await pw.chromium.launch(
                headless=resolved_headless,
                args=list(self.config.launch_args),
            )
            context = await browser.new_context()
            page = await context.new_page()
        except Exception:
            await pw.stop()
            raise

        if self.config.timeout_ms is not None:
            page.set_default_timeout(float(self.config.timeout_ms))
            page.set_default_navigation_timeout(float(self.config.timeout_ms))

        self._playwright = pw
        self._browser = browser
        self._context = context
        self._page = page
        self.event_log.reset()
        self.inspector.attach_listeners(page)
        self._state = SessionState.INITIALIZED
        self.logger.info("Browser session initialized (headless=%s)", resolved_headless)

    def _require_page(self) -> Any:
        if self._state is not SessionState.INITIALIZED or self._page is None:
            raise SessionNotInitializedError()
        return self._page

    async def navigate_to(self, url: str) -> None:
        page = self._require_page()
        target = str(url or "").strip()
        if not target:
            raise ValueError("URL is required")
        self.logger.debug("Navigating to %s", target)
        await page.goto(target, wait_until="domcontentloaded")

    async def wait(self, ms: Union[int, float]) -> None:
        """Sleep for ``ms`` milliseconds so pending page events can land."""
        await asyncio.sleep(max(0.0, float(ms)) / 1000.0)

    async def login(self, credentials: LoginCredentials, selectors: LoginSelectors) -> LoginResult:
        """Fill and submit a login form, then check the URL left the login path.

        A URL that still contains the login marker after the wait window is
        not an error: a warning is logged, a diagnostic screenshot is written
        and an UNVERIFIED result is returned.
        """
        page = self._require_page()

        await page.wait_for_selector(selectors.username_field)
        await page.fill(selectors.username_field, credentials.username)

        await page.wait_for_selector(selectors.password_field)
        await page.fill(selectors.password_field, credentials.password)

        await page.wait_for_selector(selectors.submit_button)
        await page.click(selectors.submit_button)

        marker = self.config.login_path_marker
        try:
            await page.wait_for_function(
                _LEFT_LOGIN_JS,
                arg=marker,
                timeout=float(self.config.login_timeout_ms),
            )
        except PlaywrightTimeoutError:
            self.logger.warning("Login may have failed (still on %s): %s", marker, self.current_url)
            screenshot = await self.take_screenshot(self.config.login_failure_screenshot)
            return LoginResult(
                status=LoginStatus.UNVERIFIED,
                final_url=self.current_url,
                diagnostic_screenshot=screenshot,
            )

        self.logger.info("Login success (URL changed to %s)", self.current_url)
        return LoginResult(status=LoginStatus.VERIFIED, final_url=self.current_url)

    async def take_screenshot(self, path: Union[str, Path]) -> str:
        page = self._require_page()
        target = str(path)
        await page.screenshot(path=target, full_page=True)
        self.logger.debug("Screenshot written to %s", target)
        return target

    async def extract_elements(self, selectors: Sequence[str]) -> Dict[str, List[str]]:
        page = self._require_page()
        results: Dict[str, List[str]] = {}
        for selector in selectors:
            texts = await page.eval_on_selector_all(selector, _EXTRACT_TEXT_JS)
            results[selector] = [str(t) for t in (texts or [])]
        return results

    def get_console_logs(self) -> List[ConsoleLogEntry]:
        return self.event_log.console_entries()

    def get_console_errors(self) -> List[ConsoleLogEntry]:
        return self.event_log.console_errors()

    def get_network_logs(self) -> List[NetworkLogEntry]:
        return self.event_log.network_entries()

    def get_network_errors(self) -> List[str]:
        return self.event_log.network_errors()

    async def close(self) -> None:
        if self._state is SessionState.CLOSED:
            return

        await self.inspector.detach_listeners()

        try:
            if self._context is not None:
                await self._context.close()
        except Exception as e:
            self.logger.debug("Failed to close browser context: %s", e)

        try:
            if self._browser is not None:
                await self._browser.close()
        except Exception as e:
            self.logger.debug("Failed to close browser: %s", e)

        try:
            if self._playwright is not None:
                await self._playwright.stop()
        except Exception as e:
            self.logger.debug("Failed to stop playwright: %s", e)

        had_browser = self._browser is not None
        captured = self.event_log.counts()
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None
        self.event_log.reset()
        self._state = SessionState.CLOSED
        if had_browser:
            self.logger.info(
                "Browser session closed (console=%d, network=%d, network_errors=%d)",
                captured["console"],
                captured["network"],
                captured["network_errors"],
            )
