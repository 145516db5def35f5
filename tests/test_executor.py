"""Tests for ActionExecutor scheduling, outcome reporting and cancellation."""

import time
from unittest.mock import Mock

import pytest

from power_controller.errors import ActionInvocationError
from power_controller.executor import ActionExecutor
from power_controller.executors.base import BaseExecutor, ExecutionResult
from power_controller.executors.dry_run import DryRunExecutor
from power_controller.log_store import Severity
from power_controller.matcher import Command


class TestActionExecutor:
    """Test suite for ActionExecutor."""

    def _host(self, result: ExecutionResult | None = None, error: Exception | None = None) -> Mock:
        host = Mock(spec=BaseExecutor)
        if error is not None:
            host.execute.side_effect = error
        else:
            host.execute.return_value = result or ExecutionResult(action="reboot", status="ok")
        return host

    def test_schedule_returns_before_firing(self):
        """Test that schedule returns before the action runs."""
        host = self._host()
        executor = ActionExecutor(host)
        handle = executor.schedule(Command.REBOOT, 5.0)
        try:
            assert not handle.done
            assert executor.pending() == [handle]
            host.execute.assert_not_called()
        finally:
            handle.cancel()

    def test_fires_after_delay_and_reports_success(self):
        """Test that the action runs after the delay and logs success."""
        outcomes = Mock()
        host = DryRunExecutor()
        executor = ActionExecutor(host, on_outcome=outcomes)

        handle = executor.schedule(Command.REBOOT, 0.05)
        assert handle.wait(timeout=5)

        assert host.calls == [Command.REBOOT]
        assert handle.result is not None and handle.result.ok
        outcomes.assert_called_once_with("Reboot command executed", Severity.SUCCESS)
        assert executor.pending() == []

    def test_shutdown_success_message(self):
        """Test the success message for a shutdown."""
        outcomes = Mock()
        executor = ActionExecutor(DryRunExecutor(), on_outcome=outcomes)
        assert executor.schedule(Command.SHUTDOWN, 0.01).wait(timeout=5)
        outcomes.assert_called_once_with("Shutdown command executed", Severity.SUCCESS)

    def test_failed_command_reported_once_as_error(self):
        """Test that a failed command is logged once as an error."""
        outcomes = Mock()
        failed = ExecutionResult(action="shutdown", status="failed", details={"reason": "exit status 1"})
        host = self._host(result=failed)
        executor = ActionExecutor(host, on_outcome=outcomes)

        handle = executor.schedule(Command.SHUTDOWN, 0.01)
        assert handle.wait(timeout=5)

        host.execute.assert_called_once_with(Command.SHUTDOWN)
        outcomes.assert_called_once_with("Failed to execute shutdown: exit status 1", Severity.ERROR)
        assert handle.result is failed

    def test_raising_host_executor_is_contained(self):
        """Test that an exception from the host executor is logged, not raised."""
        outcomes = Mock()
        executor = ActionExecutor(self._host(error=OSError("no such binary")), on_outcome=outcomes)

        handle = executor.schedule(Command.REBOOT, 0.01)
        assert handle.wait(timeout=5)

        outcomes.assert_called_once_with("Failed to execute reboot: no such binary", Severity.ERROR)
        assert handle.result is None

    def test_cancel_prevents_action(self):
        """Test that a cancelled action never runs."""
        outcomes = Mock()
        host = self._host()
        executor = ActionExecutor(host, on_outcome=outcomes)

        handle = executor.schedule(Command.REBOOT, 0.2)
        assert handle.cancel() is True
        assert handle.cancelled
        assert handle.wait(timeout=1)
        time.sleep(0.4)

        host.execute.assert_not_called()
        outcomes.assert_not_called()
        assert executor.pending() == []

    def test_cancel_twice_returns_false(self):
        """Test that a second cancel returns False."""
        handle = ActionExecutor(self._host()).schedule(Command.REBOOT, 5.0)
        assert handle.cancel() is True
        assert handle.cancel() is False

    def test_cancel_after_fire_returns_false(self):
        """Test that cancelling a fired action returns False."""
        handle = ActionExecutor(DryRunExecutor()).schedule(Command.REBOOT, 0.0)
        assert handle.wait(timeout=5)
        assert handle.cancel() is False
        assert not handle.cancelled

    def test_cancel_all(self):
        """Test that cancel_all cancels every pending action."""
        outcomes = Mock()
        executor = ActionExecutor(self._host(), on_outcome=outcomes)
        first = executor.schedule(Command.REBOOT, 5.0)
        second = executor.schedule(Command.SHUTDOWN, 5.0)

        assert executor.cancel_all() == 2
        assert first.cancelled and second.cancelled
        assert executor.pending() == []
        outcomes.assert_called_once_with("Cancelled 2 pending power action(s)", Severity.WARNING)

    def test_cancel_all_with_nothing_pending(self):
        """Test that cancel_all with nothing pending logs nothing."""
        outcomes = Mock()
        executor = ActionExecutor(self._host(), on_outcome=outcomes)
        assert executor.cancel_all() == 0
        outcomes.assert_not_called()

    def test_unrecognized_cannot_be_scheduled(self):
        """Test that an unrecognized command cannot be scheduled."""
        with pytest.raises(ValueError):
            ActionExecutor(self._host()).schedule(Command.UNRECOGNIZED, 1.0)

    def test_negative_delay_rejected(self):
        """Test that a negative delay raises ValueError."""
        with pytest.raises(ValueError):
            ActionExecutor(self._host()).schedule(Command.REBOOT, -1)

    def test_run_now_raises_on_failure(self):
        """Test that run_now raises ActionInvocationError on failure."""
        failed = ExecutionResult(action="reboot", status="unsupported", details={"reason": "Unsupported OS Plan9"})
        executor = ActionExecutor(self._host(result=failed))
        with pytest.raises(ActionInvocationError) as info:
            executor.run_now(Command.REBOOT)
        assert info.value.reason == "Unsupported OS Plan9"
        assert info.value.action == "reboot"
        assert info.value.result is failed

    def test_run_now_returns_result(self):
        """Test that run_now returns the host result."""
        executor = ActionExecutor(DryRunExecutor())
        result = executor.run_now(Command.SHUTDOWN)
        assert result.ok
        assert result.details == {"dry_run": True}

    def test_handle_to_dict(self):
        """Test the serialized form of a scheduled action."""
        handle = ActionExecutor(self._host()).schedule(Command.SHUTDOWN, 5.0)
        try:
            data = handle.to_dict()
            assert data["action"] == "shutdown"
            assert data["delay_secs"] == 5.0
            assert data["cancelled"] is False
            assert data["done"] is False
        finally:
            handle.cancel()
