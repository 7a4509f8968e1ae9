"""User-facing Music commands."""

import re
from collections.abc import Callable

from music_hotkeys.navigation import AlbumNavigator, ScanResult
from music_hotkeys.player.applescript import AppleScriptPlayer
from music_hotkeys.player.base import CallResult, PlayerController
from music_hotkeys.scheduler import Scheduler
from music_hotkeys.utils.config import Settings
from music_hotkeys.utils.logging import get_logger
from music_hotkeys.utils.notifications import Notifier

logger = get_logger(__name__)

UNKNOWN = "Unknown"
PLACEHOLDER_PATTERN = re.compile(r"\{(name|artist|album)\}")


def format_track_info(
    template: str,
    name: str | None,
    artist: str | None = None,
    album: str | None = None,
) -> str | None:
    """Render track info with ``{name}``, ``{artist}`` and ``{album}`` placeholders.

    Substitution is done in a single pass so a track title containing
    ``{artist}`` is not expanded a second time.

    Returns:
        The formatted text, or None when there is no track name
    """
    if name is None:
        return None

    values = {
        "name": name,
        "artist": artist if artist is not None else UNKNOWN,
        "album": album if album is not None else UNKNOWN,
    }
    return PLACEHOLDER_PATTERN.sub(lambda m: values[m.group(1)], template)


def clamp_volume(level: int) -> int:
    return max(0, min(100, int(level)))


class MusicControls:
    """Commands bound to hotkeys and exposed on the command line.

    Every command first checks that the player is running. When it is not,
    the command shows a single notification and returns a failure value
    without touching playback.
    """

    def __init__(
        self,
        player: PlayerController,
        scheduler: Scheduler,
        notifier: Notifier,
        settings: Settings,
    ) -> None:
        self.player = player
        self.notifier = notifier
        self.settings = settings
        self.navigator = AlbumNavigator(player, scheduler, notifier, settings.albums)

    @property
    def app_name(self) -> str:
        return self.settings.player.app_name

    def _ensure_running(self) -> bool:
        running = self.player.is_running()
        if running.has_value and running.value:
            return True

        if running.succeeded:
            self.notifier.show(f"{self.app_name} app is not running")
        else:
            self.notifier.show(f"Could not reach {self.app_name}: {running.error}")
        logger.info("player_unavailable", app=self.app_name, error=running.error)
        return False

    def _send(self, call: Callable, label: str) -> bool:
        if not self._ensure_running():
            return False
        result = call()
        if not result.succeeded:
            self.notifier.show(f"Could not {label}: {result.error}")
            return False
        return True

    def toggle_play_pause(self) -> bool:
        return self._send(self.player.play_pause, "toggle playback")

    def next_track(self) -> bool:
        return self._send(self.player.next_track, "skip to the next track")

    def previous_track(self) -> bool:
        return self._send(self.player.previous_track, "skip to the previous track")

    def _unreachable(self, call: CallResult) -> None:
        logger.warning("track_unreadable", app=self.app_name, error=call.error)
        self.notifier.show(f"Could not reach {self.app_name}: {call.error}")

    def _read_track(self) -> CallResult[tuple[str, str | None, str | None]]:
        """Read name, artist and album of the current track.

        A failed read of any field fails the whole result.
        """
        name = self.player.current_track_name()
        if not name.has_value:
            return name

        artist = self.player.current_artist()
        if not artist.succeeded:
            return artist
        album = self.player.current_album()
        if not album.succeeded:
            return album

        return CallResult.ok((name.value, artist.value, album.value))

    def get_current_track(self) -> str | None:
        """Return the formatted now-playing text, or None if nothing is playing."""
        if not self._ensure_running():
            return None

        track = self._read_track()
        if not track.succeeded:
            self._unreachable(track)
        if not track.has_value:
            return None
        return format_track_info(self.settings.display.track_format, *track.value)

    def get_current_artist(self) -> str | None:
        if not self._ensure_running():
            return None

        artist = self.player.current_artist()
        if not artist.succeeded:
            self._unreachable(artist)
        return artist.value

    def show_current_track(self) -> bool:
        """Show the now-playing text for the configured alert duration."""
        if not self._ensure_running():
            return False

        track = self._read_track()
        if not track.succeeded:
            self._unreachable(track)
            return False

        duration = self.settings.display.alert_duration
        if not track.has_value:
            self.notifier.show("No track currently playing", duration)
            return False

        self.notifier.show(format_track_info(self.settings.display.track_format, *track.value), duration)
        return True

    def set_volume(self, level: int) -> int | None:
        """Set the player volume, clamped to 0-100.

        Returns:
            The level that was sent, or None on failure
        """
        if not self._ensure_running():
            return None

        level = clamp_volume(level)
        result = self.player.set_volume(level)
        if not result.succeeded:
            self.notifier.show(f"Could not set {self.app_name} volume")
            return None

        self.notifier.show(f"{self.app_name} volume set to {level}%")
        return level

    def get_volume(self) -> int | None:
        if not self._ensure_running():
            return None

        volume = self.player.get_volume()
        if not volume.has_value:
            self.notifier.show(f"Could not read {self.app_name} volume")
            return None

        self.notifier.show(f"{self.app_name} volume: {volume.value}%")
        return volume.value

    def adjust_volume(self, delta: int) -> int | None:
        """Change the volume by ``delta`` percentage points."""
        if not self._ensure_running():
            return None

        volume = self.player.get_volume()
        if not volume.has_value:
            self.notifier.show(f"Could not read {self.app_name} volume")
            return None

        return self.set_volume(volume.value + delta)

    def next_album(self, on_complete: Callable[[ScanResult], None] | None = None) -> bool:
        """Start skipping forward to the next album.

        Returns:
            True if the scan was started
        """
        if not self._ensure_running():
            return False
        return self.navigator.next_album(on_complete)

    def previous_album(self, on_complete: Callable[[ScanResult], None] | None = None) -> bool:
        """Start skipping back to the first track of the previous album."""
        if not self._ensure_running():
            return False
        return self.navigator.previous_album(on_complete)

    def cancel_album_navigation(self) -> bool:
        return self.navigator.cancel()

    def actions(self) -> dict[str, Callable[[], object]]:
        """Hotkey action names mapped to the commands they trigger."""
        return {
            "toggle-play-pause": self.toggle_play_pause,
            "next-track": self.next_track,
            "previous-track": self.previous_track,
            "show-track": self.show_current_track,
            "next-album": self.next_album,
            "previous-album": self.previous_album,
        }


def build_controls(settings: Settings, scheduler: Scheduler, notifier: Notifier) -> MusicControls:
    """Wire the AppleScript backend into a MusicControls instance."""
    player = AppleScriptPlayer(
        app_name=settings.player.app_name,
        timeout=settings.player.script_timeout,
    )
    return MusicControls(player, scheduler, notifier, settings)
