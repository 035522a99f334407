"""Browser inspection runtime: Playwright session, log capture and tools."""

from .automation import BrowserAutomation
from .config import InspectorConfig, LoginSettings
from .errors import (
    BrowserInspectorError,
    MissingConfigurationError,
    SessionNotInitializedError,
    SessionStateError,
    UnknownToolError,
)
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
    ToolResult,
)
from .network_inspector import NetworkInspector
from .session import AutomationSession
from .tools import InspectorTools

__all__ = [
    "AutomationSession",
    "BrowserAutomation",
    "BrowserInspectorError",
    "ConsoleLogEntry",
    "InspectorConfig",
    "InspectorTools",
    "LoginCredentials",
    "LoginResult",
    "LoginSelectors",
    "LoginSettings",
    "LoginStatus",
    "MissingConfigurationError",
    "NetworkInspector",
    "NetworkLogEntry",
    "SessionConfig",
    "SessionEventLog",
    "SessionNotInitializedError",
    "SessionState",
    "SessionStateError",
    "ToolResult",
    "UnknownToolError",
]
