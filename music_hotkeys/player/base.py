"""Player control interface shared by all backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class CallStatus(str, Enum):
    """Outcome of a single call into the player."""

    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """Result of a player call.

    Distinguishes a call that returned a value, one that succeeded with
    nothing to return (no current track, for example) and one where the
    player could not be reached at all.
    """

    status: CallStatus
    value: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, value: Any = None) -> "CallResult[Any]":
        return cls(CallStatus.OK, value=value)

    @classmethod
    def empty(cls) -> "CallResult[Any]":
        return cls(CallStatus.EMPTY)

    @classmethod
    def failed(cls, error: str) -> "CallResult[Any]":
        return cls(CallStatus.FAILED, error=error)

    @property
    def succeeded(self) -> bool:
        return self.status is not CallStatus.FAILED

    @property
    def has_value(self) -> bool:
        return self.status is CallStatus.OK


class PlayerController(ABC):
    """Primitive operations against a music player.

    Implementations never raise for an unresponsive player; failures come
    back as ``CallResult.failed``.
    """

    @abstractmethod
    def is_running(self) -> CallResult[bool]: ...

    @abstractmethod
    def play_pause(self) -> CallResult[None]: ...

    @abstractmethod
    def next_track(self) -> CallResult[None]: ...

    @abstractmethod
    def previous_track(self) -> CallResult[None]: ...

    @abstractmethod
    def current_track_name(self) -> CallResult[str]: ...

    @abstractmethod
    def current_artist(self) -> CallResult[str]: ...

    @abstractmethod
    def current_album(self) -> CallResult[str]: ...

    @abstractmethod
    def get_volume(self) -> CallResult[int]: ...

    @abstractmethod
    def set_volume(self, level: int) -> CallResult[None]: ...
