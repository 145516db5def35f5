"""Error types raised by the remote power listener."""

from __future__ import annotations


class RemoteShutdownError(RuntimeError):
    """Base class for listener, configuration and host action failures."""


class BindError(RemoteShutdownError):
    """The UDP endpoint could not be bound (port in use, no permission, bad port)."""

    def __init__(self, port: int, reason: str) -> None:
        super().__init__(f"Cannot bind UDP port {port}: {reason}")
        self.port = port
        self.reason = reason


class ConfigurationLockedError(RemoteShutdownError):
    """Configuration was changed while the listener is running."""

    def __init__(self, message: str = "Stop the server before changing its configuration") -> None:
        super().__init__(message)


class ReceiveError(RemoteShutdownError):
    """Transport fault on a single exchange; the listener stays up."""

    def __init__(self, reason: str, errno: int | None = None) -> None:
        super().__init__(f"Receive error: {reason}")
        self.reason = reason
        self.errno = errno


class ActionInvocationError(RemoteShutdownError):
    """The host power command could not be launched or exited with an error."""

    def __init__(self, action: str, reason: str, result: object | None = None) -> None:
        super().__init__(f"Failed to execute {action}: {reason}")
        self.action = action
        self.reason = reason
        self.result = result
