"""Tests for CLI album commands."""

import pytest
from typer.testing import CliRunner

from music_hotkeys import main
from music_hotkeys.controls import MusicControls
from music_hotkeys.navigation import Direction, ScanStatus
from music_hotkeys.utils.config import AlbumNavigationConfig, Settings

from conftest import FakePlayer, RecordingNotifier, tracks_for

runner = CliRunner()


@pytest.fixture
def fake_player(monkeypatch):
    player = FakePlayer(tracks_for("X", "A", "A", "B", "B"), position=4)
    notifier = RecordingNotifier()

    def build(settings, scheduler, _notifier):
        return MusicControls(player, scheduler, notifier, settings)

    monkeypatch.setattr(main, "build_controls", build)
    player.notifier = notifier
    return player


class TestRunAlbumCommand:
    """Tests for running album navigation on a real event loop."""

    @pytest.mark.asyncio
    async def test_previous_album(self, fake_player):
        """Test the previous-album flow end to end with APScheduler."""
        settings = Settings(albums=AlbumNavigationConfig(max_skip_attempts=5, skip_delay=0))

        result = await main.run_album_command(settings, Direction.BACKWARD)

        assert result.status is ScanStatus.FOUND
        assert result.album == "A"
        assert fake_player.position == 1
        assert fake_player.notifier.texts == ["Skipped to album: A"]

    @pytest.mark.asyncio
    async def test_not_running(self, fake_player):
        """Test that nothing starts when Music is not running."""
        fake_player.running = False

        result = await main.run_album_command(Settings(), Direction.FORWARD)

        assert result is None
        assert fake_player.skips == 0


class TestCli:
    """Tests for synchronous CLI commands."""

    def test_volume_command(self, fake_player, tmp_path):
        """Test setting the volume from the command line."""
        result = runner.invoke(main.app, ["volume", "150", "--config", str(tmp_path / "none.yaml")])

        assert result.exit_code == 0
        assert fake_player.volume_sent == [100]

    def test_not_running_exits_nonzero(self, fake_player, tmp_path):
        """Test the exit code when Music is not running."""
        fake_player.running = False

        result = runner.invoke(main.app, ["next-track", "--config", str(tmp_path / "none.yaml")])

        assert result.exit_code == 1
        assert fake_player.notifier.texts == ["Music app is not running"]

    def test_invalid_config_exits_nonzero(self, tmp_path):
        """Test that a bad config file is reported."""
        path = tmp_path / "config.yaml"
        path.write_text("albums:\n  max_skip_attempts: 0\n")

        result = runner.invoke(main.app, ["status", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_adjust_volume_negative_delta(self, fake_player, tmp_path):
        """Test that a negative delta lowers the volume."""
        result = runner.invoke(main.app, ["adjust-volume", "-10", "--config", str(tmp_path / "none.yaml")])

        assert result.exit_code == 0
        assert fake_player.volume_sent == [40]

    def test_volume_negative_level_clamped(self, fake_player, tmp_path):
        """Test that a negative level is accepted and clamped to zero."""
        result = runner.invoke(main.app, ["volume", "-5", "--config", str(tmp_path / "none.yaml")])

        assert result.exit_code == 0
        assert fake_player.volume_sent == [0]
