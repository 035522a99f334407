"""Exceptions raised by the browser inspector."""

from __future__ import annotations


class BrowserInspectorError(Exception):
    """Base class for inspector errors."""


class SessionStateError(BrowserInspectorError, RuntimeError):
    """Operation is not valid in the session's current lifecycle state."""


class SessionNotInitializedError(SessionStateError):
    """Page operation issued before ``initialize`` or after ``close``."""

    def __init__(self, message: str = "Agent not initialized."):
        super().__init__(message)


class MissingConfigurationError(BrowserInspectorError, ValueError):
    """Required login or tool configuration is absent."""


class UnknownToolError(BrowserInspectorError, KeyError):
    """Tool name is not one of the registered tools."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown tool: {self.name}"
