"""AppleScript interface to the Music app on macOS."""

import subprocess
from collections.abc import Callable
from typing import Any

from music_hotkeys.player.base import CallResult, PlayerController
from music_hotkeys.utils.logging import get_logger

logger = get_logger(__name__)

# Returned by track scripts when nothing is loaded in the player
NO_TRACK = "NO_TRACK"


class AppleScriptError(Exception):
    """Error executing AppleScript."""
    pass


class AppleScriptPlayer(PlayerController):
    """Control the Music app via osascript."""

    def __init__(self, app_name: str = "Music", timeout: float = 10.0) -> None:
        self.app_name = app_name.replace("\\", "\\\\").replace('"', '\\"')
        self.timeout = timeout

    def _run_applescript(self, script: str) -> str:
        """Execute an AppleScript and return the result.

        Args:
            script: AppleScript code to execute

        Returns:
            Output from the script, without the trailing newline

        Raises:
            AppleScriptError: If script execution fails
        """
        try:
            result = subprocess.run(
                ["osascript", "-e", script],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise AppleScriptError(f"AppleScript timed out after {self.timeout}s")
        except OSError as e:
            raise AppleScriptError(f"Failed to run AppleScript: {e}")

        if result.returncode != 0:
            error_msg = result.stderr.strip()
            logger.error("applescript_error", error=error_msg, script=script[:100])
            raise AppleScriptError(f"AppleScript failed: {error_msg}")

        return result.stdout.rstrip("\n")

    def _call(self, script: str, parse: Callable[[str], Any] | None = None) -> CallResult[Any]:
        """Run a script and wrap its outcome in a CallResult."""
        try:
            output = self._run_applescript(script)
        except AppleScriptError as e:
            logger.warning("player_call_failed", app=self.app_name, error=str(e))
            return CallResult.failed(str(e))

        if parse is None:
            return CallResult.ok()

        try:
            return parse(output)
        except ValueError as e:
            logger.warning("player_output_unparseable", output=output, error=str(e))
            return CallResult.failed(f"Unexpected output from {self.app_name}: {output!r}")

    def _tell(self, command: str) -> CallResult[None]:
        return self._call(f'tell application "{self.app_name}" to {command}')

    def _track_property(self, prop: str) -> CallResult[str]:
        script = f'''
        tell application "{self.app_name}"
            if player state is stopped then return "{NO_TRACK}"
            try
                return {prop} of current track
            on error
                return "{NO_TRACK}"
            end try
        end tell
        '''
        return self._call(script, _parse_track_field)

    def is_running(self) -> CallResult[bool]:
        # Checking via "application ... is running" does not launch the app
        script = f'return application "{self.app_name}" is running'
        return self._call(script, _parse_bool)

    def play_pause(self) -> CallResult[None]:
        return self._tell("playpause")

    def next_track(self) -> CallResult[None]:
        return self._tell("next track")

    def previous_track(self) -> CallResult[None]:
        return self._tell("previous track")

    def current_track_name(self) -> CallResult[str]:
        return self._track_property("name")

    def current_artist(self) -> CallResult[str]:
        return self._track_property("artist")

    def current_album(self) -> CallResult[str]:
        return self._track_property("album")

    def get_volume(self) -> CallResult[int]:
        return self._call(
            f'tell application "{self.app_name}" to get sound volume',
            lambda output: CallResult.ok(int(output.strip())),
        )

    def set_volume(self, level: int) -> CallResult[None]:
        level = max(0, min(100, int(level)))
        return self._tell(f"set sound volume to {level}")


def _parse_track_field(output: str) -> CallResult[str]:
    if output == NO_TRACK:
        return CallResult.empty()
    return CallResult.ok(output)


def _parse_bool(output: str) -> CallResult[bool]:
    value = output.strip().lower()
    if value not in ("true", "false"):
        raise ValueError(f"not a boolean: {output!r}")
    return CallResult.ok(value == "true")
