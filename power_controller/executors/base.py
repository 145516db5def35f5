"""Host executor interfaces and result payloads."""

from __future__ import annotations

from dataclasses import dataclass
import subprocess
import time
from typing import Any

from power_controller.matcher import Command
from utils.settings_store import deep_log

COMMAND_TIMEOUT_SECS = 30


@dataclass
class ExecutionResult:
    action: str
    status: str
    target: str = "host"
    details: dict[str, Any] | None = None
    elapsed_ms: int | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def reason(self) -> str:
        if self.details and "reason" in self.details:
            return str(self.details["reason"])
        return self.status

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "action": self.action,
            "status": self.status,
            "target": self.target,
        }
        if self.details is not None:
            payload["details"] = self.details
        if self.elapsed_ms is not None:
            payload["elapsed_ms"] = self.elapsed_ms
        return payload


class BaseExecutor:
    """Runs the host's reboot/shutdown command for one platform."""

    name = "base"

    def commands(self) -> dict[Command, list[str]]:
        raise NotImplementedError

    def execute(self, action: Command) -> ExecutionResult:
        start = time.monotonic()
        argv = self.commands().get(action)
        if argv is None:
            return self._unsupported(action, f"{self.name} cannot {action.value}", start)
        deep_log(f"[DEEP][{self.name.upper()}_EXEC] {action.value} argv={argv}")
        try:
            subprocess.run(
                argv,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                check=True,
                timeout=COMMAND_TIMEOUT_SECS,
            )
        except FileNotFoundError:
            return self._failed(action, f"command not found: {argv[0]}", start)
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            reason = f"exit status {exc.returncode}"
            if stderr:
                reason = f"{reason}: {stderr}"
            return self._failed(action, reason, start)
        except Exception as exc:
            return self._failed(action, str(exc), start)
        return self._ok(action, start)

    def _ok(self, action: Command, start: float) -> ExecutionResult:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        return ExecutionResult(action=action.value, status="ok", elapsed_ms=elapsed_ms)

    def _failed(self, action: Command, reason: str, start: float) -> ExecutionResult:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        return ExecutionResult(
            action=action.value,
            status="failed",
            details={"reason": reason},
            elapsed_ms=elapsed_ms,
        )

    def _unsupported(self, action: Command, reason: str, start: float) -> ExecutionResult:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        return ExecutionResult(
            action=action.value,
            status="unsupported",
            details={"reason": reason},
            elapsed_ms=elapsed_ms,
        )
