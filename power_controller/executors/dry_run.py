"""Executor that records the request instead of powering anything off."""

from __future__ import annotations

import time

from power_controller.executors.base import BaseExecutor, ExecutionResult
from power_controller.matcher import Command
from utils.log_utils import tprint


class DryRunExecutor(BaseExecutor):
    name = "dry_run"

    def __init__(self) -> None:
        self.calls: list[Command] = []

    def execute(self, action: Command) -> ExecutionResult:
        start = time.monotonic()
        if not action.is_power_action:
            return self._unsupported(action, "not a power action", start)
        self.calls.append(action)
        tprint(f"[DRY_RUN] would {action.value} the host now")
        result = self._ok(action, start)
        result.details = {"dry_run": True}
        return result
