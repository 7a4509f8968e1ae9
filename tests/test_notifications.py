"""Tests for notification sinks."""

import io
import subprocess
from unittest.mock import patch

import pytest
from rich.console import Console

from music_hotkeys.utils.notifications import ConsoleNotifier, MacOSNotifier, Notifier


class TestMacOSNotifier:
    """Tests for Notification Center delivery."""

    def test_message_escaped(self):
        """Test that quotes in messages are escaped for AppleScript."""
        with patch("music_hotkeys.utils.notifications.subprocess.run") as run:
            MacOSNotifier().show('Skipped to album: "Heroes"', 5)

        script = run.call_args[0][0][2]
        assert script == 'display notification "Skipped to album: \\"Heroes\\"" with title "Music Hotkeys"'

    def test_failure_does_not_raise(self):
        """Test that a failed notification is logged, not raised."""
        with patch(
            "music_hotkeys.utils.notifications.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="osascript", timeout=5),
        ):
            MacOSNotifier().show("Music app is not running")


class TestConsoleNotifier:
    """Tests for terminal output."""

    def test_brackets_printed_literally(self):
        """Test that track text is not parsed as rich markup."""
        output = io.StringIO()
        notifier = ConsoleNotifier(Console(file=output, width=120))

        notifier.show("Song - Band [LP]")

        assert "Song - Band [LP]" in output.getvalue()


class TestNotifierInterface:
    """Tests for the notifier base class."""

    def test_show_is_abstract(self):
        """Test that a notifier must implement show."""
        with pytest.raises(TypeError):
            Notifier()
