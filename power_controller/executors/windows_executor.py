"""Windows executor built on shutdown.exe."""

from __future__ import annotations

from power_controller.executors.base import BaseExecutor
from power_controller.matcher import Command


class WindowsExecutor(BaseExecutor):
    name = "win"

    def commands(self) -> dict[Command, list[str]]:
        return {
            Command.REBOOT: ["shutdown", "/r", "/t", "0"],
            Command.SHUTDOWN: ["shutdown", "/s", "/t", "0"],
        }
