"""Shared models for the browser inspector runtime."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LAUNCH_ARGS: Tuple[str, ...] = (
    "--no-sandbox",
    "--disable-dev-shm-usage",
)


@dataclass(frozen=True)
class SessionConfig:
    """Immutable session-level configuration."""

    headless: bool = True
    launch_args: Tuple[str, ...] = DEFAULT_LAUNCH_ARGS
    # None keeps Playwright's own default timeouts.
    timeout_ms: Optional[int] = None
    login_timeout_ms: int = 10000
    login_path_marker: str = "/login"
    login_failure_screenshot: str = "login_maybe_failed.png"


@dataclass(frozen=True)
class LoginCredentials:
    username: str
    password: str


@dataclass(frozen=True)
class LoginSelectors:
    username_field: str = "#email"
    password_field: str = "#password"
    submit_button: str = 'button[type="submit"]'


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    CLOSED = "closed"


class LoginStatus(str, Enum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a form login.

    UNVERIFIED means the URL still looked like a login page once the wait
    window elapsed; the caller proceeded anyway and a diagnostic screenshot
    was written.
    """

    status: LoginStatus
    final_url: Optional[str] = None
    diagnostic_screenshot: Optional[str] = None

    @property
    def verified(self) -> bool:
        return self.status is LoginStatus.VERIFIED


@dataclass(frozen=True)
class ConsoleLogEntry:
    """Browser console message captured from the page."""

    type: str
    text: str
    location: Optional[str] = None


@dataclass(frozen=True)
class NetworkLogEntry:
    """Request that reached the HTTP response stage."""

    url: str
    method: str
    status: Optional[int] = None


@dataclass
class ToolResult:
    """Text payload returned by one tool call."""

    text: str
    is_error: bool = False
    login: Optional[LoginResult] = None


class PageArgs(BaseModel):
    """Arguments shared by the page inspection tools."""

    model_config = ConfigDict(populate_by_name=True)

    target_page: str = Field(
        alias="targetPage",
        description="The URL of the page to navigate to and inspect.",
    )
    random_string: Optional[str] = Field(
        default=None,
        alias="randomString",
        description="Free-form tag identifying the request. Ignored by the tool.",
    )


class CaptureArgs(PageArgs):
    output_path: Optional[str] = Field(
        default=None,
        alias="outputPath",
        description="Directory to write the screenshot into.",
    )


class ExtractArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_page: str = Field(
        alias="targetPage",
        description="The URL of the page to navigate to and extract elements from.",
    )
    selectors: List[str] = Field(
        description="CSS selectors used to identify and extract elements from the page.",
    )
