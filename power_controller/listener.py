"""UDP listener that turns command datagrams into scheduled power actions.

One listener instance covers one lifecycle: STOPPED -> STARTING -> READY ->
STOPPED. A network thread owns the socket and handles each datagram as an
independent exchange: read one message, decode, log, classify, dispatch. The
receive wait has no timeout; ``stop()`` interrupts it through a wake-up socket
pair watched by the same selector.
"""

from __future__ import annotations

import errno
import selectors
import socket
import threading
from collections.abc import Callable
from enum import Enum

from power_controller.errors import BindError, ReceiveError
from power_controller.executor import DEFAULT_DELAY_SECS, ActionExecutor
from power_controller.log_store import Severity
from power_controller.matcher import Command, classify, command_strings
from utils.settings_store import deep_log
from utils.threading_utils import join_unless_current, run_async

DEFAULT_BUFFER_BYTES = 65535
JOIN_TIMEOUT_SECS = 2.0

# errno values meaning the socket itself is gone rather than one bad exchange.
_FATAL_ERRNOS = {errno.EBADF, errno.ENOTSOCK, errno.EINVAL}

LogHandler = Callable[[str, Severity], None]
StateHandler = Callable[["ListenerState"], None]


class ListenerState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    READY = "ready"


def decode_payload(data: bytes) -> str | None:
    """Decode and trim a datagram; None when it is not valid UTF-8."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return None
    return text.strip()


class UDPListener:
    def __init__(
        self,
        *,
        port: int,
        machine_identifier: str,
        executor: ActionExecutor,
        on_log: LogHandler,
        on_state: StateHandler | None = None,
        bind_host: str = "0.0.0.0",
        action_delay_secs: float = DEFAULT_DELAY_SECS,
        buffer_bytes: int = DEFAULT_BUFFER_BYTES,
    ) -> None:
        self.port = port
        self.machine_identifier = machine_identifier
        self.executor = executor
        self.bind_host = bind_host
        self.action_delay_secs = action_delay_secs
        self.buffer_bytes = buffer_bytes
        self.bound_port: int | None = None
        self._on_log = on_log
        self._on_state = on_state
        self._lock = threading.Lock()
        self._state = ListenerState.STOPPED
        self._sock: socket.socket | None = None
        self._wake_r: socket.socket | None = None
        self._wake_w: socket.socket | None = None
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> ListenerState:
        return self._state

    def is_ready(self) -> bool:
        return self._state is ListenerState.READY

    # -------- Lifecycle --------

    def start(self) -> bool:
        """Bind and start serving. Returns False when already started.

        Raises BindError after logging when the endpoint cannot be bound.
        """
        with self._lock:
            if self._state is not ListenerState.STOPPED:
                return False
            self._state = ListenerState.STARTING
        self._notify_state(ListenerState.STARTING)

        try:
            sock = self._bind()
        except (OSError, OverflowError, TypeError, ValueError) as exc:
            with self._lock:
                self._state = ListenerState.STOPPED
            self._notify_state(ListenerState.STOPPED)
            self._log(f"Failed to start server: {exc}", Severity.ERROR)
            raise BindError(self.port, str(exc)) from exc

        with self._lock:
            if self._state is not ListenerState.STARTING:
                # stop() ran while we were binding
                sock.close()
                return False
            self._sock = sock
            self._wake_r, self._wake_w = socket.socketpair()
            self.bound_port = sock.getsockname()[1]
            self._state = ListenerState.READY
        self._notify_state(ListenerState.READY)

        reboot, shutdown = command_strings(self.machine_identifier)
        self._log(f"Server started on UDP port {self.bound_port}", Severity.SUCCESS)
        self._log(f"Listening for: {reboot} and {shutdown}", Severity.INFO)
        self._thread = run_async(self._serve, name=f"UDPListener-{self.bound_port}")
        return True

    def stop(self) -> bool:
        """Cancel the socket and any exchange waiting on it. No-op when stopped."""
        with self._lock:
            if self._state is ListenerState.STOPPED:
                return False
            self._state = ListenerState.STOPPED
            self._wake()
            thread = self._thread
        join_unless_current(thread, timeout=JOIN_TIMEOUT_SECS)
        self._close()
        self._notify_state(ListenerState.STOPPED)
        self._log("Server stopped by user", Severity.WARNING)
        return True

    def _bind(self) -> socket.socket:
        if not isinstance(self.port, int) or isinstance(self.port, bool):
            raise TypeError(f"port must be an integer, got {self.port!r}")
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            # No SO_REUSEADDR: on UDP it lets a second listener share the port.
            if hasattr(socket, "SO_EXCLUSIVEADDRUSE"):
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_EXCLUSIVEADDRUSE, 1)
            sock.bind((self.bind_host, self.port))
        except BaseException:
            sock.close()
            raise
        return sock

    def _wake(self) -> None:
        if self._wake_w is None:
            return
        try:
            self._wake_w.send(b"\0")
        except OSError:
            pass

    def _close(self) -> None:
        with self._lock:
            sockets = [self._sock, self._wake_r, self._wake_w]
            self._sock = self._wake_r = self._wake_w = None
        for sock in sockets:
            if sock is not None:
                sock.close()

    def _fail(self, exc: BaseException) -> None:
        """Socket died underneath us: same end state as stop(), different log line."""
        with self._lock:
            if self._state is ListenerState.STOPPED:
                return
            self._state = ListenerState.STOPPED
        self._close()
        self._notify_state(ListenerState.STOPPED)
        self._log(f"Server failed: {exc}", Severity.ERROR)

    # -------- Network thread --------

    def _serve(self) -> None:
        with self._lock:
            sock, wake_r = self._sock, self._wake_r
        if sock is None or wake_r is None:
            return
        selector = selectors.DefaultSelector()
        try:
            selector.register(sock, selectors.EVENT_READ)
            selector.register(wake_r, selectors.EVENT_READ)
            while self._state is ListenerState.READY:
                try:
                    events = selector.select()
                except (OSError, ValueError) as exc:
                    self._fail(exc)
                    return
                for key, _ in events:
                    if key.fileobj is wake_r or self._state is not ListenerState.READY:
                        return
                    self._exchange(sock)
        except Exception as exc:
            self._fail(exc)
        finally:
            selector.close()

    def _exchange(self, sock: socket.socket) -> None:
        try:
            data = self._receive(sock)
        except ReceiveError as exc:
            if exc.errno in _FATAL_ERRNOS:
                self._fail(exc)
            else:
                self._log(str(exc), Severity.ERROR)
            return
        payload = decode_payload(data)
        if payload is None:
            deep_log(f"[DEEP][LISTENER] dropped {len(data)} byte datagram (not UTF-8)")
            return
        self.handle_payload(payload)

    def _receive(self, sock: socket.socket) -> bytes:
        try:
            data, addr = sock.recvfrom(self.buffer_bytes)
        except OSError as exc:
            raise ReceiveError(exc.strerror or str(exc), exc.errno) from exc
        deep_log(f"[DEEP][LISTENER] {len(data)} bytes from {addr[0]}:{addr[1]}")
        return data

    def handle_payload(self, payload: str) -> Command:
        """Log, classify and dispatch one decoded, trimmed command."""
        self._log(f"Received command: {payload}", Severity.INFO)
        match = classify(self.machine_identifier, payload)
        delay = f"{self.action_delay_secs:g}"
        if match.command is Command.REBOOT:
            self._log(f"Reboot command matched! Rebooting in {delay} seconds...", Severity.WARNING)
            self.executor.schedule(Command.REBOOT, self.action_delay_secs)
        elif match.command is Command.SHUTDOWN:
            self._log(f"Shutdown command matched! Shutting down in {delay} seconds...", Severity.WARNING)
            self.executor.schedule(Command.SHUTDOWN, self.action_delay_secs)
        else:
            reboot, shutdown = command_strings(self.machine_identifier)
            self._log(f"Unknown command: {match.raw}", Severity.ERROR)
            self._log(f"Expected: {reboot} or {shutdown}", Severity.INFO)
        return match.command

    # -------- Reporting --------

    def _log(self, message: str, severity: Severity) -> None:
        self._on_log(message, severity)

    def _notify_state(self, state: ListenerState) -> None:
        if self._on_state is not None:
            self._on_state(state)
