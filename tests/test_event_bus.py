"""Tests for EventBus and the console log helpers."""

from unittest.mock import Mock

from power_controller.log_store import LogEntry, Severity
from power_controller.logger import CommandLogger
from utils.event_bus import EventBus
from utils.log_utils import _format_message


class TestEventBus:
    """Test suite for EventBus."""

    def test_publish_reaches_subscribers(self):
        """Test that published payloads reach every subscriber."""
        bus = EventBus()
        handler = Mock()
        bus.subscribe("state", handler)
        bus.publish("state", {"running": True})
        handler.assert_called_once_with({"running": True})

    def test_topics_are_isolated(self):
        """Test that handlers only see their own topic."""
        bus = EventBus()
        handler = Mock()
        bus.subscribe("log", handler)
        bus.publish("state")
        handler.assert_not_called()

    def test_failing_handler_does_not_block_others(self, capsys):
        """Test that a raising handler does not stop later handlers."""
        bus = EventBus()
        good = Mock()
        bus.subscribe("log", Mock(side_effect=RuntimeError("boom")))
        bus.subscribe("log", good)
        bus.publish("log", {"entry": None})
        good.assert_called_once()
        assert "boom" in capsys.readouterr().out

    def test_unsubscribe_unknown_handler(self):
        """Test that unsubscribing an unknown handler is harmless."""
        EventBus().unsubscribe("log", Mock())


class TestConsoleLogging:
    """Test suite for the console log helpers."""

    def test_level_tag_first_is_normalized(self):
        """Test that a leading level tag is moved after the system tag."""
        assert _format_message("[WARN][SERVER] Server stopped") == "[SERVER][WARN] Server stopped"

    def test_success_level(self):
        """Test that SUCCESS is a recognised level."""
        assert _format_message("[success][SERVER] up") == "[SERVER][SUCCESS] up"

    def test_command_logger_emits(self, capsys):
        """Test that CommandLogger prints entries with their level."""
        CommandLogger().emit(LogEntry(message="Server started on UDP port 9999", severity=Severity.SUCCESS))
        out = capsys.readouterr().out
        assert "[SERVER][SUCCESS] Server started on UDP port 9999" in out

    def test_errors_go_to_stderr(self, capsys):
        """Test that error entries are written to stderr."""
        CommandLogger().error("Unknown command: /x/y")
        captured = capsys.readouterr()
        assert "[SERVER][ERROR] Unknown command: /x/y" in captured.err

    def test_disabled_logger_is_silent(self, capsys):
        """Test that a disabled logger prints nothing."""
        CommandLogger(enabled=False).info("quiet")
        assert capsys.readouterr().out == ""
