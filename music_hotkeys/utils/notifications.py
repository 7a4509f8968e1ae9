"""User-visible notifications for command outcomes."""

import subprocess
from abc import ABC, abstractmethod

from rich.console import Console
from rich.markup import escape

from music_hotkeys.utils.logging import get_logger

logger = get_logger(__name__)


class Notifier(ABC):
    """Receives human-readable status messages."""

    @abstractmethod
    def show(self, message: str, duration: float | None = None) -> None: ...


class MacOSNotifier(Notifier):
    """Posts messages to Notification Center using osascript.

    Notification Center decides how long a banner stays up, so
    ``duration`` is only recorded in the log.
    """

    def __init__(self, title: str = "Music Hotkeys") -> None:
        self.title = title

    def show(self, message: str, duration: float | None = None) -> None:
        safe_message = _escape(message)
        safe_title = _escape(self.title)
        script = f'display notification "{safe_message}" with title "{safe_title}"'

        try:
            subprocess.run(
                ["osascript", "-e", script],
                capture_output=True,
                timeout=5,
            )
            logger.debug("notification_shown", message=message, duration=duration)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("notification_failed", error=str(e), message=message)


class ConsoleNotifier(Notifier):
    """Prints messages to the terminal for interactive CLI use."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show(self, message: str, duration: float | None = None) -> None:
        self.console.print(f"[bold cyan]♫[/bold cyan] {escape(message)}")


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')
