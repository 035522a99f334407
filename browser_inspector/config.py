"""Front-end configuration for the browser inspector CLI and MCP server."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Tuple

from .errors import MissingConfigurationError
from .models import LoginCredentials, LoginSelectors, SessionConfig

DEFAULT_SCREENSHOT_DIR = "/tmp/mcp-screenshots"
DEFAULT_SETTLE_MS = 2000
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None or not str(value).strip():
        return default
    return str(value).strip().lower() in _TRUE_VALUES


def split_selectors(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated CSS selector list, dropping blanks."""
    if not raw:
        return ()
    return tuple(part.strip() for part in str(raw).split(",") if part.strip())


@dataclass(frozen=True)
class LoginSettings:
    """Optional form login performed before each tool action."""

    enabled: bool = False
    login_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    selectors: LoginSelectors = field(default_factory=LoginSelectors)

    def missing_fields(self) -> Tuple[str, ...]:
        if not self.enabled:
            return ()
        missing = []
        if not self.login_url:
            missing.append("login_url")
        if not self.username:
            missing.append("username")
        if not self.password:
            missing.append("password")
        return tuple(missing)

    def resolve(self) -> Tuple[str, LoginCredentials, LoginSelectors]:
        missing = self.missing_fields()
        if missing:
            raise MissingConfigurationError(
                "Missing login configuration: " + ", ".join(missing)
            )
        return (
            str(self.login_url),
            LoginCredentials(username=str(self.username), password=str(self.password)),
            self.selectors,
        )


@dataclass(frozen=True)
class InspectorConfig:
    """Everything a front end needs to run tools against fresh sessions."""

    session: SessionConfig = field(default_factory=SessionConfig)
    login: LoginSettings = field(default_factory=LoginSettings)
    screenshot_dir: str = DEFAULT_SCREENSHOT_DIR
    settle_ms: int = DEFAULT_SETTLE_MS

    def with_headless(self, headless: bool) -> "InspectorConfig":
        return replace(self, session=replace(self.session, headless=bool(headless)))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "InspectorConfig":
        env = os.environ if environ is None else environ
        defaults = LoginSelectors()
        selectors = LoginSelectors(
            username_field=env.get("USERNAME_FIELD") or defaults.username_field,
            password_field=env.get("PASSWORD_FIELD") or defaults.password_field,
            submit_button=env.get("SUBMIT_BUTTON_SELECTOR") or defaults.submit_button,
        )
        login = LoginSettings(
            enabled=env_flag(env.get("USE_LOGIN")),
            login_url=env.get("LOGIN_URL") or None,
            username=env.get("LOGIN_USERNAME") or env.get("USERNAME") or None,
            password=env.get("LOGIN_PASSWORD") or env.get("PASSWORD") or None,
            selectors=selectors,
        )
        try:
            settle_ms = int(env.get("SETTLE_MS") or DEFAULT_SETTLE_MS)
        except ValueError as e:
            raise MissingConfigurationError(f"SETTLE_MS must be an integer: {e}") from e
        return cls(
            session=SessionConfig(headless=env_flag(env.get("HEADLESS"), default=True)),
            login=login,
            screenshot_dir=env.get("SCREENSHOT_PATH") or DEFAULT_SCREENSHOT_DIR,
            settle_ms=settle_ms,
        )


def setup_logging(level: Optional[str] = None, stream: Any = None) -> None:
    """Send log records to stderr; stdout carries tool output or JSON-RPC."""
    resolved = str(level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        stream=stream or sys.stderr,
        level=getattr(logging, resolved, logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )
