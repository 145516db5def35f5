"""Runs host power actions after a delay."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from power_controller.errors import ActionInvocationError
from power_controller.executors.base import BaseExecutor, ExecutionResult
from power_controller.log_store import Severity
from power_controller.matcher import Command
from utils.settings_store import deep_log

DEFAULT_DELAY_SECS = 3.0

OutcomeHandler = Callable[[str, Severity], None]


class ScheduledAction:
    """Handle for one pending power action.

    The action fires once on a timer thread unless ``cancel()`` wins the race.
    """

    def __init__(self, action: Command, delay: float, runner: Callable[["ScheduledAction"], ExecutionResult | None]) -> None:
        self.action = action
        self.delay = delay
        self.due_at = time.time() + delay
        self.result: ExecutionResult | None = None
        self._runner = runner
        self._lock = threading.Lock()
        self._fired = False
        self._cancelled = False
        self._done = threading.Event()
        self._timer = threading.Timer(delay, self._fire)
        self._timer.daemon = True
        self._timer.name = f"PowerAction-{action.value}"

    def start(self) -> None:
        self._timer.start()

    def cancel(self) -> bool:
        """Stop the action from firing. Returns False if it already fired or was cancelled."""
        with self._lock:
            if self._fired or self._cancelled:
                return False
            self._cancelled = True
        self._timer.cancel()
        self._done.set()
        return True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._done.wait(timeout)

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            "delay_secs": self.delay,
            "due_at": self.due_at,
            "cancelled": self.cancelled,
            "done": self.done,
        }

    def _fire(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._fired = True
        try:
            self.result = self._runner(self)
        finally:
            self._done.set()


class ActionExecutor:
    """Schedules reboot/shutdown on the host and reports each outcome once."""

    def __init__(self, host_executor: BaseExecutor, on_outcome: OutcomeHandler | None = None) -> None:
        self.host_executor = host_executor
        self.on_outcome = on_outcome
        self._lock = threading.Lock()
        self._pending: list[ScheduledAction] = []

    def schedule(self, action: Command, delay: float = DEFAULT_DELAY_SECS) -> ScheduledAction:
        """Arm a timer for ``action`` and return without waiting for it."""
        if not action.is_power_action:
            raise ValueError(f"Cannot schedule non-power command '{action.value}'")
        if delay < 0:
            raise ValueError("delay must not be negative")
        handle = ScheduledAction(action, delay, self._fire)
        with self._lock:
            self._pending.append(handle)
        deep_log(f"[DEEP][ACTIONS] scheduled {action.value} in {delay:g}s")
        handle.start()
        return handle

    def run_now(self, action: Command) -> ExecutionResult:
        """Invoke the host command synchronously; raise ActionInvocationError on failure."""
        try:
            result = self.host_executor.execute(action)
        except Exception as exc:
            raise ActionInvocationError(action.value, str(exc)) from exc
        if not result.ok:
            raise ActionInvocationError(action.value, result.reason, result)
        return result

    def pending(self) -> list[ScheduledAction]:
        with self._lock:
            self._pending = [h for h in self._pending if not h.done]
            return list(self._pending)

    def cancel_all(self) -> int:
        cancelled = sum(1 for handle in self.pending() if handle.cancel())
        if cancelled:
            self._report(f"Cancelled {cancelled} pending power action(s)", Severity.WARNING)
        return cancelled

    def _fire(self, handle: ScheduledAction) -> ExecutionResult | None:
        with self._lock:
            if handle in self._pending:
                self._pending.remove(handle)
        action = handle.action
        try:
            result = self.run_now(action)
        except ActionInvocationError as exc:
            self._report(f"Failed to execute {action.value}: {exc.reason}", Severity.ERROR)
            return exc.result if isinstance(exc.result, ExecutionResult) else None
        self._report(f"{action.value.capitalize()} command executed", Severity.SUCCESS)
        return result

    def _report(self, message: str, severity: Severity) -> None:
        if self.on_outcome is not None:
            self.on_outcome(message, severity)
