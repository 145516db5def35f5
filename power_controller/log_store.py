"""Bounded, newest-first event log shared by the listener and its readers."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import threading
import uuid

DEFAULT_CAPACITY = 100
MAX_CAPACITY = 100


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    @property
    def level(self) -> str:
        """Console level tag understood by utils.log_utils."""
        return {
            Severity.INFO: "INFO",
            Severity.SUCCESS: "SUCCESS",
            Severity.WARNING: "WARN",
            Severity.ERROR: "ERROR",
        }[self]


@dataclass(frozen=True)
class LogEntry:
    message: str
    severity: Severity
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(timespec="milliseconds"),
            "message": self.message,
            "severity": self.severity.value,
        }


class LogStore:
    """Newest-first log capped at ``capacity`` entries (never more than 100).

    Appends come from the network thread while snapshots are taken from
    whatever thread renders the log, so every operation holds the lock.
    """

    CLEARED_MESSAGE = "Logs cleared"

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        capacity = min(capacity, MAX_CAPACITY)
        self._lock = threading.Lock()
        # appendleft keeps the newest at index 0; maxlen drops from the right.
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self.capacity = capacity

    def append(self, message: str, severity: Severity = Severity.INFO) -> LogEntry:
        severity = Severity(severity)
        with self._lock:
            # Stamped under the lock so timestamps follow insertion order.
            entry = LogEntry(message=message, severity=severity)
            self._entries.appendleft(entry)
        return entry

    def clear(self) -> LogEntry:
        """Drop every entry and leave a single "Logs cleared" marker."""
        with self._lock:
            entry = LogEntry(message=self.CLEARED_MESSAGE, severity=Severity.INFO)
            self._entries.clear()
            self._entries.appendleft(entry)
        return entry

    def snapshot(self) -> list[LogEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
