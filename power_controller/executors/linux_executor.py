"""Linux executor using systemd's power targets."""

from __future__ import annotations

from power_controller.executors.base import BaseExecutor
from power_controller.matcher import Command


class LinuxExecutor(BaseExecutor):
    name = "linux"

    def commands(self) -> dict[Command, list[str]]:
        # Needs root or a polkit rule allowing the service user to power off.
        return {
            Command.REBOOT: ["systemctl", "reboot"],
            Command.SHUTDOWN: ["systemctl", "poweroff"],
        }
