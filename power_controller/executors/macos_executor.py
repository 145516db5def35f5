"""macOS executor that asks System Events to restart or shut down."""

from __future__ import annotations

from power_controller.executors.base import BaseExecutor
from power_controller.matcher import Command

OSASCRIPT = "/usr/bin/osascript"


class MacOSExecutor(BaseExecutor):
    name = "mac"

    def commands(self) -> dict[Command, list[str]]:
        return {
            Command.REBOOT: [OSASCRIPT, "-e", 'tell application "System Events" to restart'],
            Command.SHUTDOWN: [OSASCRIPT, "-e", 'tell application "System Events" to shut down'],
        }
