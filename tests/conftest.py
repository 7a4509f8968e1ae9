"""Shared fakes for player, scheduler and notification tests."""

from dataclasses import dataclass, field

import pytest

from music_hotkeys.player.base import CallResult, PlayerController
from music_hotkeys.scheduler import Scheduler
from music_hotkeys.utils.config import AlbumNavigationConfig, Settings
from music_hotkeys.utils.notifications import Notifier


@dataclass
class FakeTrack:
    name: str
    artist: str | None
    album: str | None


def tracks_for(*albums: str | None) -> list[FakeTrack]:
    """Build a track list with one track per album entry."""
    return [FakeTrack(f"Track {i + 1}", "Artist", album) for i, album in enumerate(albums)]


class FakePlayer(PlayerController):
    """In-memory player that walks a fixed track list.

    Skips past either end of the list stay on the first or last track.
    Method names listed in ``failing`` return ``CallResult.failed``.
    """

    def __init__(self, tracks: list[FakeTrack], position: int = 0, running: bool = True) -> None:
        self.tracks = tracks
        self.position = position
        self.running = running
        self.playing = False
        self.volume: int | None = 50
        self.failing: set[str] = set()
        self.forward_skips = 0
        self.backward_skips = 0
        self.album_reads = 0
        self.volume_sent: list[int] = []

    @property
    def skips(self) -> int:
        return self.forward_skips + self.backward_skips

    @property
    def track(self) -> FakeTrack | None:
        if not self.tracks:
            return None
        return self.tracks[self.position]

    def _check(self, name: str) -> CallResult | None:
        if name in self.failing:
            return CallResult.failed(f"{name} failed")
        return None

    def is_running(self) -> CallResult[bool]:
        return self._check("is_running") or CallResult.ok(self.running)

    def play_pause(self) -> CallResult[None]:
        failure = self._check("play_pause")
        if failure:
            return failure
        self.playing = not self.playing
        return CallResult.ok()

    def next_track(self) -> CallResult[None]:
        failure = self._check("next_track")
        if failure:
            return failure
        self.forward_skips += 1
        self.position = min(self.position + 1, len(self.tracks) - 1)
        return CallResult.ok()

    def previous_track(self) -> CallResult[None]:
        failure = self._check("previous_track")
        if failure:
            return failure
        self.backward_skips += 1
        self.position = max(self.position - 1, 0)
        return CallResult.ok()

    def _field(self, name: str, attr: str) -> CallResult[str]:
        failure = self._check(name)
        if failure:
            return failure
        if self.track is None:
            return CallResult.empty()
        return CallResult.ok(getattr(self.track, attr))

    def current_track_name(self) -> CallResult[str]:
        return self._field("current_track_name", "name")

    def current_artist(self) -> CallResult[str]:
        return self._field("current_artist", "artist")

    def current_album(self) -> CallResult[str]:
        self.album_reads += 1
        return self._field("current_album", "album")

    def get_volume(self) -> CallResult[int]:
        failure = self._check("get_volume")
        if failure:
            return failure
        if self.volume is None:
            return CallResult.empty()
        return CallResult.ok(self.volume)

    def set_volume(self, level: int) -> CallResult[None]:
        failure = self._check("set_volume")
        if failure:
            return failure
        self.volume_sent.append(level)
        self.volume = level
        return CallResult.ok()


class ManualScheduler(Scheduler):
    """Collects deferred callbacks and runs them only when asked."""

    def __init__(self) -> None:
        self.pending: list = []
        self.delays: list[float] = []

    def after(self, delay, callback) -> None:
        self.delays.append(delay)
        self.pending.append(callback)

    def run_next(self) -> bool:
        if not self.pending:
            return False
        self.pending.pop(0)()
        return True

    def run_all(self, limit: int = 1000) -> int:
        ran = 0
        while self.run_next():
            ran += 1
            assert ran <= limit, "scheduler did not drain"
        return ran


@dataclass
class RecordingNotifier(Notifier):
    messages: list[tuple[str, float | None]] = field(default_factory=list)

    def show(self, message: str, duration: float | None = None) -> None:
        self.messages.append((message, duration))

    @property
    def texts(self) -> list[str]:
        return [m for m, _ in self.messages]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def settings() -> Settings:
    return Settings(albums=AlbumNavigationConfig(max_skip_attempts=5, skip_delay=0.3))
