"""Route power actions to the executor for the host OS."""

from __future__ import annotations

from power_controller.executors.base import BaseExecutor, ExecutionResult
from power_controller.executors.dry_run import DryRunExecutor
from power_controller.executors.linux_executor import LinuxExecutor
from power_controller.executors.macos_executor import MacOSExecutor
from power_controller.executors.windows_executor import WindowsExecutor
from power_controller.matcher import Command
from utils.system_utils import current_os, normalize_os_name


class OSRouter(BaseExecutor):
    name = "router"

    def __init__(self, *, host_os: str | None = None, fallback: BaseExecutor | None = None) -> None:
        self._host_os = normalize_os_name(host_os)
        self._executors: dict[str, BaseExecutor] = {
            "Darwin": MacOSExecutor(),
            "Windows": WindowsExecutor(),
            "Linux": LinuxExecutor(),
        }
        self._fallback = fallback

    @property
    def host_os(self) -> str:
        return self._host_os or current_os()

    def select(self) -> BaseExecutor | None:
        return self._executors.get(self.host_os, self._fallback)

    def execute(self, action: Command) -> ExecutionResult:
        primary = self.select()
        if primary is not None:
            return primary.execute(action)
        return ExecutionResult(
            action=action.value,
            status="unsupported",
            details={"reason": f"Unsupported OS {self.host_os}"},
            elapsed_ms=0,
        )


def build_host_executor(*, dry_run: bool = False, host_os: str | None = None) -> BaseExecutor:
    """Pick the executor the running process should use."""
    if dry_run:
        return DryRunExecutor()
    return OSRouter(host_os=host_os)
