"""Server façade: the only object a UI or API talks to.

Owns the configuration, the running flag and the log store. Listener events
arrive through callbacks; readers get copies and can subscribe to the "log"
and "state" topics of ``events`` instead of polling.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
import threading
from typing import Any

from power_controller.errors import ConfigurationLockedError
from power_controller.executor import DEFAULT_DELAY_SECS, ActionExecutor, ScheduledAction
from power_controller.executors.base import BaseExecutor
from power_controller.executors.router import build_host_executor
from power_controller.listener import DEFAULT_BUFFER_BYTES, ListenerState, UDPListener
from power_controller.log_store import DEFAULT_CAPACITY, LogEntry, LogStore, Severity
from power_controller.logger import CommandLogger
from power_controller.matcher import command_strings
from utils.event_bus import EventBus
from utils.settings_store import get_settings

DEFAULT_PORT = 9999
DEFAULT_MACHINE_ID = "mac01"

TOPIC_LOG = "log"
TOPIC_STATE = "state"
TOPIC_CONFIG = "config"


@dataclass(frozen=True)
class ServerConfig:
    port: int = DEFAULT_PORT
    machine_identifier: str = DEFAULT_MACHINE_ID

    def validate(self) -> None:
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError(f"port must be an integer, got {self.port!r}")
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port must be within 0-65535, got {self.port}")
        if not isinstance(self.machine_identifier, str) or not self.machine_identifier.strip():
            raise ValueError("machine identifier must not be empty")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RemoteShutdownServer:
    def __init__(
        self,
        config: ServerConfig | None = None,
        *,
        host_executor: BaseExecutor | None = None,
        action_executor: ActionExecutor | None = None,
        bind_host: str = "0.0.0.0",
        action_delay_secs: float = DEFAULT_DELAY_SECS,
        log_capacity: int = DEFAULT_CAPACITY,
        buffer_bytes: int = DEFAULT_BUFFER_BYTES,
        cancel_pending_on_stop: bool = False,
        logger: CommandLogger | None = None,
        events: EventBus | None = None,
    ) -> None:
        config = config or ServerConfig()
        config.validate()
        if action_delay_secs < 0:
            raise ValueError("action_delay_secs must not be negative")
        self._config = config
        self.bind_host = bind_host
        self.action_delay_secs = action_delay_secs
        self.buffer_bytes = buffer_bytes
        self.cancel_pending_on_stop = cancel_pending_on_stop
        self.logger = logger or CommandLogger()
        self.events = events or EventBus()
        self._logs = LogStore(log_capacity)
        # Held across append and publish so subscribers see store order.
        self._log_order_lock = threading.RLock()
        self.executor = action_executor or ActionExecutor(
            host_executor or build_host_executor(),
            on_outcome=self._record,
        )
        # Serializes start/stop/configure. The network thread never takes it.
        self._lifecycle_lock = threading.RLock()
        self._state_lock = threading.Lock()
        self._running = False
        self._listener: UDPListener | None = None

    @classmethod
    def from_settings(cls, settings: dict[str, Any] | None = None) -> "RemoteShutdownServer":
        settings = get_settings() if settings is None else settings
        config = ServerConfig(
            port=int(settings.get("port", DEFAULT_PORT)),
            machine_identifier=str(settings.get("machine_identifier", DEFAULT_MACHINE_ID)),
        )
        host_executor = build_host_executor(
            dry_run=bool(settings.get("dry_run", False)),
            host_os=settings.get("host_os"),
        )
        return cls(
            config,
            host_executor=host_executor,
            bind_host=str(settings.get("bind_host", "0.0.0.0")),
            action_delay_secs=float(settings.get("action_delay_secs", DEFAULT_DELAY_SECS)),
            log_capacity=int(settings.get("log_capacity", DEFAULT_CAPACITY)),
            buffer_bytes=int(settings.get("recv_buffer_bytes", DEFAULT_BUFFER_BYTES)),
            cancel_pending_on_stop=bool(settings.get("cancel_pending_on_stop", False)),
            logger=CommandLogger(enabled=bool(settings.get("log_console", True))),
        )

    # -------- Commands --------

    def configure(self, port: int, machine_identifier: str) -> ServerConfig:
        """Replace port and machine identifier; only allowed while stopped."""
        config = ServerConfig(port=port, machine_identifier=machine_identifier)
        config.validate()
        with self._lifecycle_lock:
            if self.is_running():
                raise ConfigurationLockedError()
            self._config = config
        self.events.publish(TOPIC_CONFIG, {"config": config})
        return config

    def start(self) -> bool:
        """Start listening. Returns False (and does nothing) if already running.

        Raises BindError when the port cannot be bound; the server stays stopped.
        """
        with self._lifecycle_lock:
            if self._listener is not None and self._listener.state is not ListenerState.STOPPED:
                return False
            config = self._config
            self._listener = UDPListener(
                port=config.port,
                machine_identifier=config.machine_identifier,
                executor=self.executor,
                on_log=self._record,
                on_state=self._on_listener_state,
                bind_host=self.bind_host,
                action_delay_secs=self.action_delay_secs,
                buffer_bytes=self.buffer_bytes,
            )
            return self._listener.start()

    def stop(self) -> bool:
        """Stop listening. Returns False when nothing was running."""
        with self._lifecycle_lock:
            listener = self._listener
            if listener is None:
                return False
            stopped = listener.stop()
        if stopped and self.cancel_pending_on_stop:
            self.executor.cancel_all()
        return stopped

    def clear_logs(self) -> LogEntry:
        with self._log_order_lock:
            entry = self._logs.clear()
            self._emit(entry)
        return entry

    def cancel_pending_actions(self) -> int:
        return self.executor.cancel_all()

    def subscribe(self, topic: str, handler) -> None:
        self.events.subscribe(topic, handler)

    def unsubscribe(self, topic: str, handler) -> None:
        self.events.unsubscribe(topic, handler)

    # -------- Read accessors --------

    def logs(self, limit: int | None = None) -> list[LogEntry]:
        entries = self._logs.snapshot()
        return entries if limit is None else entries[: max(limit, 0)]

    def is_running(self) -> bool:
        with self._state_lock:
            return self._running

    def current_config(self) -> ServerConfig:
        return self._config

    def state(self) -> ListenerState:
        listener = self._listener
        return listener.state if listener is not None else ListenerState.STOPPED

    def bound_port(self) -> int | None:
        listener = self._listener
        if listener is None or not listener.is_ready():
            return None
        return listener.bound_port

    def command_strings(self) -> tuple[str, str]:
        return command_strings(self._config.machine_identifier)

    def pending_actions(self) -> list[ScheduledAction]:
        return self.executor.pending()

    def status(self) -> dict[str, Any]:
        reboot, shutdown = self.command_strings()
        config = self._config
        return {
            "running": self.is_running(),
            "state": self.state().value,
            "port": config.port,
            "machine_identifier": config.machine_identifier,
            "bound_port": self.bound_port(),
            "log_count": len(self._logs),
            "commands": {"reboot": reboot, "shutdown": shutdown},
            "pending_actions": [h.to_dict() for h in self.pending_actions()],
        }

    # -------- Listener callbacks --------

    def _record(self, message: str, severity: Severity) -> LogEntry:
        with self._log_order_lock:
            entry = self._logs.append(message, severity)
            self._emit(entry)
        return entry

    def _emit(self, entry: LogEntry) -> None:
        self.logger.emit(entry)
        self.events.publish(TOPIC_LOG, {"entry": entry})

    def _on_listener_state(self, state: ListenerState) -> None:
        running = state is ListenerState.READY
        with self._state_lock:
            changed = running != self._running
            self._running = running
        if changed:
            self.events.publish(TOPIC_STATE, {"running": running, "state": state.value})
