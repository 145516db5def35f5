"""Classify a datagram payload as a reboot, shutdown or unknown command."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Command(str, Enum):
    REBOOT = "reboot"
    SHUTDOWN = "shutdown"
    UNRECOGNIZED = "unrecognized"

    @property
    def is_power_action(self) -> bool:
        return self is not Command.UNRECOGNIZED


@dataclass(frozen=True)
class CommandMatch:
    command: Command
    raw: str


def command_strings(machine_identifier: str) -> tuple[str, str]:
    """Return the (reboot, shutdown) command strings for a machine identifier."""
    return f"/{machine_identifier}/reboot", f"/{machine_identifier}/shutdown"


def classify(machine_identifier: str, payload: str) -> CommandMatch:
    """Match a trimmed payload against the two command strings.

    Comparison is exact: no case folding, no prefix matching, and no trimming
    beyond what the caller already did.
    """
    reboot, shutdown = command_strings(machine_identifier)
    if payload == reboot:
        return CommandMatch(Command.REBOOT, payload)
    if payload == shutdown:
        return CommandMatch(Command.SHUTDOWN, payload)
    return CommandMatch(Command.UNRECOGNIZED, payload)
