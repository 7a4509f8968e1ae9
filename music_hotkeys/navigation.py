"""Album navigation by skip-and-poll.

The Music app has no "next album" command, so album navigation issues
track skips and reads the current album after each one until it changes.
Every wait between a skip and its poll is a scheduler callback, never a
sleep, so the event loop stays responsive while a scan is in flight.

Two session types share the same retry discipline:

- ``AlbumScan`` skips in one direction until the album differs from the
  one playing when the scan started.
- ``FirstTrackSeek`` skips backward until it leaves a target album, then
  skips forward once to land on that album's first track.

``AlbumNavigator`` composes them into the next/previous album commands and
allows one session in flight at a time.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from music_hotkeys.player.base import CallResult, PlayerController
from music_hotkeys.utils.logging import get_logger

if TYPE_CHECKING:
    from music_hotkeys.scheduler import Scheduler
    from music_hotkeys.utils.config import AlbumNavigationConfig
    from music_hotkeys.utils.notifications import Notifier

logger = get_logger(__name__)

UNKNOWN_ALBUM = "Unknown"


class Direction(str, Enum):
    """Skip direction for a scan."""

    FORWARD = "forward"
    BACKWARD = "backward"

    @property
    def label(self) -> str:
        return "next album" if self is Direction.FORWARD else "previous album"


class ScanStatus(str, Enum):
    """Lifecycle state of a session."""

    PENDING = "pending"
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ScanResult:
    """Terminal outcome of a session."""

    status: ScanStatus
    album: str | None = None
    attempts: int = 0
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.status is ScanStatus.FOUND


class CancelToken:
    """Cooperative cancellation flag checked before every poll."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class _SkipPollSession(ABC):
    """Shared state and bookkeeping for skip-and-poll sessions."""

    def __init__(
        self,
        player: PlayerController,
        scheduler: "Scheduler",
        max_attempts: int,
        delay: float,
        on_done: Callable[[ScanResult], None],
        cancel_token: CancelToken | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if delay < 0:
            raise ValueError("delay must not be negative")

        self.player = player
        self.scheduler = scheduler
        self.max_attempts = max_attempts
        self.delay = delay
        self.on_done = on_done
        self.cancel_token = cancel_token or CancelToken()
        self.attempts = 0
        self.status = ScanStatus.PENDING
        self.result: ScanResult | None = None

    @property
    def done(self) -> bool:
        return self.status is not ScanStatus.PENDING

    def _schedule(self) -> None:
        self.scheduler.after(self.delay, self._advance_or_fail)

    def _advance_or_fail(self) -> None:
        """Run one scheduled step, ending the session as failed if it raises."""
        try:
            self.advance()
        except Exception as e:
            if self.done:
                raise
            logger.exception("album_session_error", attempts=self.attempts)
            self._finish(ScanStatus.FAILED, error=str(e))

    def _finish(self, status: ScanStatus, album: str | None = None, error: str | None = None) -> None:
        self.status = status
        self.result = ScanResult(status=status, album=album, attempts=self.attempts, error=error)
        self.on_done(self.result)

    def _fail(self, call: CallResult) -> None:
        logger.warning("album_session_failed", attempts=self.attempts, error=call.error)
        self._finish(ScanStatus.FAILED, error=call.error)

    def _check_cancelled(self) -> bool:
        if self.cancel_token.cancelled:
            logger.info("album_session_cancelled", attempts=self.attempts)
            self._finish(ScanStatus.CANCELLED)
            return True
        return False

    @abstractmethod
    def advance(self) -> None: ...


class AlbumScan(_SkipPollSession):
    """Skip in one direction until the current album changes.

    A missing album (nothing playing) is compared like any other value, so
    going from no album to an album, or back, counts as a change.
    """

    def __init__(
        self,
        player: PlayerController,
        scheduler: "Scheduler",
        direction: Direction,
        max_attempts: int,
        delay: float,
        on_done: Callable[[ScanResult], None],
        cancel_token: CancelToken | None = None,
    ) -> None:
        super().__init__(player, scheduler, max_attempts, delay, on_done, cancel_token)
        self.direction = direction
        self.start_album: str | None = None

    def _skip(self) -> CallResult[None]:
        if self.direction is Direction.FORWARD:
            return self.player.next_track()
        return self.player.previous_track()

    def start(self) -> None:
        """Capture the starting album, issue the first skip and schedule a poll."""
        current = self.player.current_album()
        if not current.succeeded:
            self._fail(current)
            return

        self.start_album = current.value
        logger.info(
            "album_scan_started",
            direction=self.direction.value,
            start_album=self.start_album,
            max_attempts=self.max_attempts,
        )

        skipped = self._skip()
        if not skipped.succeeded:
            self._fail(skipped)
            return
        self._schedule()

    def advance(self) -> None:
        """Poll once after a skip and decide whether to stop or skip again."""
        if self.done or self._check_cancelled():
            return

        self.attempts += 1
        current = self.player.current_album()
        if not current.succeeded:
            self._fail(current)
            return

        if current.value != self.start_album:
            logger.info(
                "album_found",
                direction=self.direction.value,
                album=current.value,
                attempts=self.attempts,
            )
            self._finish(ScanStatus.FOUND, album=current.value)
            return

        if self.attempts >= self.max_attempts:
            logger.info("album_not_found", direction=self.direction.value, attempts=self.attempts)
            self._finish(ScanStatus.NOT_FOUND, album=self.start_album)
            return

        skipped = self._skip()
        if not skipped.succeeded:
            self._fail(skipped)
            return
        self._schedule()


class FirstTrackSeek(_SkipPollSession):
    """Walk backward to the first track of ``target_album``.

    Each cycle skips backward and reads the album right away. Leaving the
    target album means the previous position was its first track, so one
    forward skip lands there. Running out of attempts inside the album
    leaves playback wherever the last skip put it.
    """

    def __init__(
        self,
        player: PlayerController,
        scheduler: "Scheduler",
        target_album: str | None,
        max_attempts: int,
        delay: float,
        on_done: Callable[[ScanResult], None],
        cancel_token: CancelToken | None = None,
    ) -> None:
        super().__init__(player, scheduler, max_attempts, delay, on_done, cancel_token)
        self.target_album = target_album

    def start(self) -> None:
        logger.debug("first_track_seek_started", target_album=self.target_album)
        self._schedule()

    def advance(self) -> None:
        if self.done or self._check_cancelled():
            return

        self.attempts += 1
        skipped = self.player.previous_track()
        if not skipped.succeeded:
            self._fail(skipped)
            return

        current = self.player.current_album()
        if not current.succeeded:
            self._fail(current)
            return

        if current.value != self.target_album:
            corrected = self.player.next_track()
            if not corrected.succeeded:
                self._fail(corrected)
                return

            landed = self.player.current_album()
            album = landed.value if landed.has_value else self.target_album
            logger.info("first_track_reached", album=album, attempts=self.attempts)
            self._finish(ScanStatus.FOUND, album=album)
            return

        if self.attempts >= self.max_attempts:
            logger.warning(
                "first_track_seek_exhausted",
                target_album=self.target_album,
                attempts=self.attempts,
            )
            self._finish(ScanStatus.NOT_FOUND, album=self.target_album)
            return

        self._schedule()


class AlbumNavigator:
    """Next/previous album commands with a single in-flight session."""

    def __init__(
        self,
        player: PlayerController,
        scheduler: "Scheduler",
        notifier: "Notifier",
        config: "AlbumNavigationConfig",
    ) -> None:
        self.player = player
        self.scheduler = scheduler
        self.notifier = notifier
        self.config = config
        self._active: _SkipPollSession | None = None
        self._token: CancelToken | None = None

    @property
    def busy(self) -> bool:
        return self._token is not None

    @property
    def session(self) -> _SkipPollSession | None:
        """The session currently in flight."""
        return self._active

    def cancel(self) -> bool:
        """Cancel the in-flight navigation, if any.

        The session stops at its next poll without issuing further skips.
        """
        if self._token is None:
            return False
        self._token.cancel()
        return True

    def next_album(self, on_complete: Callable[[ScanResult], None] | None = None) -> bool:
        """Skip forward to the first track of the next album."""
        return self._navigate(Direction.FORWARD, on_complete)

    def previous_album(self, on_complete: Callable[[ScanResult], None] | None = None) -> bool:
        """Skip back to the first track of the previous album."""
        return self._navigate(Direction.BACKWARD, on_complete)

    def _navigate(
        self,
        direction: Direction,
        on_complete: Callable[[ScanResult], None] | None,
    ) -> bool:
        if self.busy:
            logger.info("album_navigation_rejected", direction=direction.value)
            self.notifier.show("Album navigation already in progress")
            return False

        self._token = CancelToken()

        def scan_done(result: ScanResult) -> None:
            if direction is Direction.BACKWARD and result.found:
                self._seek_first_track(result.album, on_complete)
                return

            if result.found:
                self.notifier.show(f"Skipped to album: {result.album or UNKNOWN_ALBUM}")
            elif result.status is ScanStatus.NOT_FOUND:
                self.notifier.show(f"Skipped {result.attempts} tracks, no {direction.label} found")
            else:
                self._report_interrupted(result)
            self._complete(result, on_complete)

        scan = AlbumScan(
            self.player,
            self.scheduler,
            direction,
            max_attempts=self.config.max_skip_attempts,
            delay=self.config.skip_delay,
            on_done=scan_done,
            cancel_token=self._token,
        )
        self._active = scan
        scan.start()
        return scan.status is not ScanStatus.FAILED

    def _seek_first_track(
        self,
        album: str | None,
        on_complete: Callable[[ScanResult], None] | None,
    ) -> None:
        def seek_done(result: ScanResult) -> None:
            if result.found:
                self.notifier.show(f"Skipped to album: {result.album or UNKNOWN_ALBUM}")
            elif result.status is ScanStatus.NOT_FOUND:
                self.notifier.show("Reached attempt limit while seeking within album")
            else:
                self._report_interrupted(result)
            self._complete(result, on_complete)

        seek = FirstTrackSeek(
            self.player,
            self.scheduler,
            album,
            max_attempts=self.config.max_skip_attempts,
            delay=self.config.skip_delay,
            on_done=seek_done,
            cancel_token=self._token,
        )
        self._active = seek
        seek.start()

    def _report_interrupted(self, result: ScanResult) -> None:
        if result.status is ScanStatus.CANCELLED:
            self.notifier.show("Album navigation cancelled")
        else:
            self.notifier.show(f"Could not reach the player: {result.error}")

    def _complete(
        self,
        result: ScanResult,
        on_complete: Callable[[ScanResult], None] | None,
    ) -> None:
        self._active = None
        self._token = None
        if on_complete is not None:
            on_complete(result)
