"""Configuration management using Pydantic Settings with YAML support."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Actions a hotkey can be bound to
HOTKEY_ACTIONS = (
    "toggle-play-pause",
    "next-track",
    "previous-track",
    "show-track",
    "next-album",
    "previous-album",
)

MODIFIER_NAMES = {"cmd", "command", "alt", "option", "ctrl", "control", "shift"}


class HotkeyBinding(BaseModel):
    """A (modifier-set, key) pair bound to an action."""

    mods: list[str] = Field(default_factory=list)
    key: str

    @field_validator("mods")
    @classmethod
    def validate_mods(cls, v: list[str]) -> list[str]:
        mods = [m.lower() for m in v]
        unknown = [m for m in mods if m not in MODIFIER_NAMES]
        if unknown:
            raise ValueError(f"Unknown modifier(s): {', '.join(unknown)}")
        return mods

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Hotkey key must not be empty")
        return v.strip().lower()


class PlayerConfig(BaseModel):
    """Music app connection settings."""

    app_name: str = "Music"
    script_timeout: float = Field(default=10.0, gt=0)


class AlbumNavigationConfig(BaseModel):
    """Skip-and-poll settings for album navigation."""

    max_skip_attempts: int = Field(default=20, ge=1)
    skip_delay: float = Field(default=0.3, ge=0)


class DisplayConfig(BaseModel):
    """Now-playing display settings."""

    alert_duration: float = Field(default=5.0, ge=0)
    # Placeholders: {name}, {artist}, {album}
    track_format: str = "Track: {name}\nArtist: {artist}\nAlbum: {album}"
    use_notification_center: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = "~/Library/Logs/MusicHotkeys/music-hotkeys.log"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def file_resolved(self) -> Path:
        return Path(self.file).expanduser()


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="MUSIC_HOTKEYS_",
        env_nested_delimiter="__",
    )

    player: PlayerConfig = Field(default_factory=PlayerConfig)
    albums: AlbumNavigationConfig = Field(default_factory=AlbumNavigationConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    hotkeys: dict[str, HotkeyBinding] = Field(default_factory=dict)

    @field_validator("hotkeys")
    @classmethod
    def validate_hotkey_actions(cls, v: dict[str, HotkeyBinding]) -> dict[str, HotkeyBinding]:
        unknown = sorted(set(v) - set(HOTKEY_ACTIONS))
        if unknown:
            raise ValueError(f"Unknown hotkey action(s): {', '.join(unknown)}")
        return v


def load_config(config_path: Path | str = "config.yaml") -> Settings:
    """Load configuration from YAML file with environment variable overrides."""
    path = Path(config_path)

    if path.exists():
        with open(path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    yaml_config = _expand_env_vars(yaml_config)

    return Settings(**yaml_config)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand ${VAR} patterns in config values."""
    import os
    import re

    if isinstance(obj, str):
        pattern = re.compile(r"\$\{([^}]+)\}")
        for var in pattern.findall(obj):
            obj = obj.replace(f"${{{var}}}", os.environ.get(var, ""))
        return obj
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


def save_config(settings: Settings, config_path: Path | str = "config.yaml") -> None:
    """Save configuration to YAML file."""
    path = Path(config_path)

    config_dict = settings.model_dump(mode="json")

    with open(path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
