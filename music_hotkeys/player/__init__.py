"""Music player backends."""

from .applescript import AppleScriptError, AppleScriptPlayer
from .base import CallResult, CallStatus, PlayerController

__all__ = [
    "AppleScriptError",
    "AppleScriptPlayer",
    "CallResult",
    "CallStatus",
    "PlayerController",
]
