"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from music_hotkeys.utils.config import (
    AlbumNavigationConfig,
    HotkeyBinding,
    Settings,
    load_config,
    save_config,
)


class TestDefaults:
    """Tests for default settings values."""

    def test_default_settings(self):
        """Test defaults carried over from the Hammerspoon spoon."""
        settings = Settings()

        assert settings.display.alert_duration == 5
        assert settings.display.track_format == "Track: {name}\nArtist: {artist}\nAlbum: {album}"
        assert settings.albums.max_skip_attempts == 20
        assert settings.albums.skip_delay == 0.3
        assert settings.player.app_name == "Music"
        assert settings.hotkeys == {}

    def test_environment_override(self, monkeypatch):
        """Test nested overrides through environment variables."""
        monkeypatch.setenv("MUSIC_HOTKEYS_ALBUMS__MAX_SKIP_ATTEMPTS", "7")

        settings = Settings()

        assert settings.albums.max_skip_attempts == 7


class TestValidation:
    """Tests for configuration validation."""

    def test_attempts_must_be_positive(self):
        """Test that at least one skip attempt is required."""
        with pytest.raises(ValidationError):
            AlbumNavigationConfig(max_skip_attempts=0)

    def test_delay_must_not_be_negative(self):
        """Test that a negative skip delay is rejected."""
        with pytest.raises(ValidationError):
            AlbumNavigationConfig(skip_delay=-0.1)

        assert AlbumNavigationConfig(skip_delay=0).skip_delay == 0

    def test_unknown_hotkey_action(self):
        """Test that hotkeys can only bind known actions."""
        with pytest.raises(ValidationError):
            Settings(hotkeys={"shuffle": {"mods": ["cmd"], "key": "s"}})

    def test_unknown_modifier(self):
        """Test that modifiers are validated."""
        with pytest.raises(ValidationError):
            HotkeyBinding(mods=["hyper"], key="n")

    def test_binding_normalized(self):
        """Test that modifiers and keys are lower-cased."""
        binding = HotkeyBinding(mods=["CMD", "Alt"], key=" N ")

        assert binding.mods == ["cmd", "alt"]
        assert binding.key == "n"

    def test_empty_key_rejected(self):
        """Test that a binding needs a key."""
        with pytest.raises(ValidationError):
            HotkeyBinding(mods=["cmd"], key="  ")

    def test_log_level_validated(self):
        """Test that log levels are checked."""
        with pytest.raises(ValidationError):
            Settings(logging={"level": "chatty"})


class TestLoadConfig:
    """Tests for YAML loading."""

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test loading when no config file exists."""
        settings = load_config(tmp_path / "missing.yaml")

        assert settings.albums.max_skip_attempts == 20

    def test_load_yaml(self, tmp_path, monkeypatch):
        """Test loading hotkeys and values with env var expansion."""
        monkeypatch.setenv("PLAYER_APP", "iTunes")
        path = tmp_path / "config.yaml"
        path.write_text(
            "player:\n"
            "  app_name: ${PLAYER_APP}\n"
            "albums:\n"
            "  max_skip_attempts: 12\n"
            "  skip_delay: 0.5\n"
            "display:\n"
            "  track_format: '{name} - {artist} [{album}]'\n"
            "hotkeys:\n"
            "  next-album:\n"
            "    mods: [cmd, alt]\n"
            "    key: right\n"
        )

        settings = load_config(path)

        assert settings.player.app_name == "iTunes"
        assert settings.albums.max_skip_attempts == 12
        assert settings.albums.skip_delay == 0.5
        assert settings.display.track_format == "{name} - {artist} [{album}]"
        assert settings.hotkeys["next-album"].mods == ["cmd", "alt"]
        assert settings.hotkeys["next-album"].key == "right"

    def test_save_and_reload(self, tmp_path):
        """Test that saved settings load back unchanged."""
        path = tmp_path / "config.yaml"
        settings = Settings(hotkeys={"show-track": {"mods": ["ctrl"], "key": "t"}})

        save_config(settings, path)
        reloaded = load_config(path)

        assert reloaded.hotkeys["show-track"].key == "t"
        assert reloaded.display.track_format == settings.display.track_format
