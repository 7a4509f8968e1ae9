"""Global hotkey registration using pynput."""

import asyncio
from collections.abc import Callable

from music_hotkeys.utils.config import HotkeyBinding
from music_hotkeys.utils.logging import get_logger

logger = get_logger(__name__)

MODIFIER_TOKENS = {
    "cmd": "<cmd>",
    "command": "<cmd>",
    "alt": "<alt>",
    "option": "<alt>",
    "ctrl": "<ctrl>",
    "control": "<ctrl>",
    "shift": "<shift>",
}

# Config spellings that differ from pynput's Key names
KEY_ALIASES = {
    "return": "enter",
    "escape": "esc",
    "pageup": "page_up",
    "pagedown": "page_down",
}


def to_pynput_hotkey(binding: HotkeyBinding) -> str:
    """Convert a binding to pynput's hotkey syntax, e.g. ``<cmd>+<alt>+n``."""
    parts = []
    for mod in binding.mods:
        token = MODIFIER_TOKENS[mod]
        if token not in parts:
            parts.append(token)

    key = KEY_ALIASES.get(binding.key, binding.key)
    parts.append(key if len(key) == 1 else f"<{key}>")
    return "+".join(parts)


class HotkeyRegistrar:
    """Binds hotkeys to actions that run on the asyncio event loop.

    pynput calls handlers on its own listener thread. Each handler only
    hands the action to the loop, so actions never run concurrently with
    scheduled album-navigation callbacks.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.loop = loop
        self.hotkeys: dict[str, Callable[[], None]] = {}
        self._listener = None

    def bind(self, name: str, binding: HotkeyBinding, action: Callable[[], object]) -> str:
        hotkey = to_pynput_hotkey(binding)
        if hotkey in self.hotkeys:
            raise ValueError(f"Hotkey {hotkey} is bound more than once")

        def dispatch() -> None:
            self.loop.call_soon_threadsafe(self._run, name, action)

        self.hotkeys[hotkey] = dispatch
        logger.info("hotkey_bound", action=name, hotkey=hotkey)
        return hotkey

    def bind_all(
        self,
        bindings: dict[str, HotkeyBinding],
        actions: dict[str, Callable[[], object]],
    ) -> None:
        """Bind every configured action that has a command."""
        for name, binding in bindings.items():
            action = actions.get(name)
            if action is None:
                logger.warning("hotkey_action_unknown", action=name)
                continue
            self.bind(name, binding, action)

    def _run(self, name: str, action: Callable[[], object]) -> None:
        logger.debug("hotkey_pressed", action=name)
        action()

    def start(self) -> None:
        # Imported here: pynput picks a platform backend at import time
        from pynput import keyboard

        self._listener = keyboard.GlobalHotKeys(self.hotkeys)
        self._listener.start()
        logger.info("hotkey_listener_started", count=len(self.hotkeys))

    def stop(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
            logger.info("hotkey_listener_stopped")
