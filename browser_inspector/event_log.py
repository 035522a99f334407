"""In-memory browser activity buffers for one session."""

from __future__ import annotations

import threading
from typing import Dict, List

from .models import ConsoleLogEntry, NetworkLogEntry

CONSOLE_ERROR_TYPE = "error"


class SessionEventLog:
    """Append-only console and network buffers scoped to one browser session.

    Observers write, callers read. Reads always return new lists so a caller
    can never mutate the live buffers. Observers fire asynchronously, so a read
    only reflects the events that have arrived so far; there is no flush.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._console: List[ConsoleLogEntry] = []
        self._network: List[NetworkLogEntry] = []
        self._network_errors: List[str] = []

    def reset(self) -> None:
        with self._lock:
            self._console = []
            self._network = []
            self._network_errors = []

    def append_console(self, entry: ConsoleLogEntry) -> None:
        with self._lock:
            self._console.append(entry)

    def append_network(self, entry: NetworkLogEntry) -> None:
        with self._lock:
            self._network.append(entry)

    def append_network_error(self, message: str) -> None:
        with self._lock:
            self._network_errors.append(str(message))

    def console_entries(self) -> List[ConsoleLogEntry]:
        with self._lock:
            return list(self._console)

    def console_errors(self) -> List[ConsoleLogEntry]:
        with self._lock:
            return [entry for entry in self._console if entry.type == CONSOLE_ERROR_TYPE]

    def network_entries(self) -> List[NetworkLogEntry]:
        with self._lock:
            return list(self._network)

    def network_errors(self) -> List[str]:
        with self._lock:
            return list(self._network_errors)

    def counts(self) -> Dict[str, int]:
        with self._lock:
            return {
                "console": len(self._console),
                "network": len(self._network),
                "network_errors": len(self._network_errors),
            }
