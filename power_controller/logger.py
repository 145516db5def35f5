"""Mirror listener log entries onto the console."""

from power_controller.log_store import LogEntry, Severity
from utils.log_utils import log


class CommandLogger:
    def __init__(self, system: str = "SERVER", enabled: bool = True) -> None:
        self.system = system
        self.enabled = enabled

    def emit(self, entry: LogEntry) -> None:
        if self.enabled:
            log(self.system, entry.message, entry.severity.level)

    def info(self, message: str) -> None:
        if self.enabled:
            log(self.system, message, Severity.INFO.level)

    def error(self, message: str) -> None:
        if self.enabled:
            log(self.system, message, Severity.ERROR.level)
