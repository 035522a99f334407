"""Run one tool action inside a fresh automation session."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, Union

from .config import InspectorConfig
from .models import LoginResult, SessionConfig, ToolResult
from .session import AutomationSession

SessionAction = Callable[[AutomationSession], Awaitable[Union[str, ToolResult]]]
SessionFactory = Callable[[SessionConfig], AutomationSession]


class BrowserAutomation:
    """Create, optionally log in, use and always close one session per call."""

    def __init__(
        self,
        *,
        config: Optional[InspectorConfig] = None,
        session_factory: Optional[SessionFactory] = None,
        logger: Any = None,
    ):
        self.config = config or InspectorConfig()
        self.logger = logger or logging.getLogger(__name__)
        self._session_factory = session_factory or self._default_session

    def _default_session(self, session_config: SessionConfig) -> AutomationSession:
        return AutomationSession(session_config, logger=self.logger)

    @property
    def login_enabled(self) -> bool:
        return bool(self.config.login.enabled)

    async def run(self, action: SessionAction) -> ToolResult:
        """Execute ``action`` against a new session and return its result.

        Missing login settings fail before a browser is launched. Any error
        raised by initialization, login or the action propagates after the
        session has been closed.
        """
        login_plan = self.config.login.resolve() if self.login_enabled else None

        session = self._session_factory(self.config.session)
        try:
            await session.initialize()

            login_result: Optional[LoginResult] = None
            if login_plan is not None:
                login_url, credentials, selectors = login_plan
                self.logger.info("Logging in as %s via %s", credentials.username, login_url)
                await session.navigate_to(login_url)
                login_result = await session.login(credentials, selectors)
                if not login_result.verified:
                    self.logger.warning(
                        "Continuing without verified login (url=%s, screenshot=%s)",
                        login_result.final_url,
                        login_result.diagnostic_screenshot,
                    )

            outcome = await action(session)
            result = outcome if isinstance(outcome, ToolResult) else ToolResult(text=str(outcome))
            if result.login is None:
                result.login = login_result
            return result
        except Exception as e:
            self.logger.error("Browser automation error: %s", e)
            raise
        finally:
            await session.close()
