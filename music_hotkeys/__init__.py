"""Music Hotkeys - keyboard control for the macOS Music app."""

__version__ = "0.3.0"
