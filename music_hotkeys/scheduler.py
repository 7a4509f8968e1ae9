"""Deferred callbacks on the event loop and the hotkey daemon."""

import asyncio
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from music_hotkeys.utils.config import Settings, load_config
from music_hotkeys.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

LAUNCHD_LABEL = "com.musichotkeys.daemon"


class Scheduler(ABC):
    """Runs a callback once after a delay without blocking the caller."""

    @abstractmethod
    def after(self, delay: float, callback: Callable[[], None]) -> None: ...


class APSchedulerAdapter(Scheduler):
    """Scheduler backed by APScheduler's asyncio scheduler.

    Callbacks are wrapped in a coroutine so the asyncio executor runs them
    on the event loop thread instead of a worker thread. That keeps every
    scheduled callback on one thread, one at a time.
    """

    def __init__(self, scheduler: AsyncIOScheduler | None = None) -> None:
        self.scheduler = scheduler or AsyncIOScheduler()

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.debug("scheduler_started")

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.debug("scheduler_stopped")

    def after(self, delay: float, callback: Callable[[], None]) -> None:
        async def run_callback() -> None:
            callback()

        run_date = datetime.now(timezone.utc) + timedelta(seconds=delay)
        self.scheduler.add_job(
            run_callback,
            DateTrigger(run_date=run_date),
            # Late callbacks must still run or a scan would stall
            misfire_grace_time=None,
        )


class HotkeyDaemon:
    """Long-running hotkey service for the current user session."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.scheduler = APSchedulerAdapter()
        self.registrar = None

    def start(self) -> None:
        """Start the scheduler and bind the configured hotkeys."""
        from music_hotkeys.controls import build_controls
        from music_hotkeys.hotkeys import HotkeyRegistrar
        from music_hotkeys.utils.notifications import ConsoleNotifier, MacOSNotifier

        self.scheduler.start()

        notifier = MacOSNotifier() if self.settings.display.use_notification_center else ConsoleNotifier()
        controls = build_controls(self.settings, self.scheduler, notifier)

        self.registrar = HotkeyRegistrar(asyncio.get_running_loop())
        self.registrar.bind_all(self.settings.hotkeys, controls.actions())
        self.registrar.start()

        logger.info(
            "daemon_started",
            hotkeys=sorted(self.settings.hotkeys),
            player=self.settings.player.app_name,
        )

    def stop(self) -> None:
        if self.registrar is not None:
            self.registrar.stop()
        self.scheduler.stop()
        logger.info("daemon_stopped")

    async def run_forever(self) -> None:
        """Run the daemon until cancelled."""
        self.start()

        if not self.settings.hotkeys:
            logger.warning("no_hotkeys_configured")

        try:
            while True:
                await asyncio.sleep(3600)
        except asyncio.CancelledError:
            self.stop()
            raise


async def run_daemon(config_path: Path | str = "config.yaml") -> None:
    """Run the hotkey daemon.

    Args:
        config_path: Path to configuration file
    """
    path = Path(config_path)
    settings = load_config(path)

    setup_logging(
        log_level=settings.logging.level,
        log_file=settings.logging.file_resolved,
        json_format=True,
    )

    logger.info("daemon_starting", config_path=str(path))

    daemon = HotkeyDaemon(settings)
    await daemon.run_forever()


def generate_launchd_plist(
    config_path: Path | str = "config.yaml",
    python_path: Path | str | None = None,
) -> str:
    """Generate a launchd plist file for macOS.

    Args:
        config_path: Path to configuration file
        python_path: Path to Python interpreter (defaults to current)

    Returns:
        Plist XML content
    """
    if python_path is None:
        python_path = Path(sys.executable)

    config_path = Path(config_path).absolute()
    python_path = Path(python_path).absolute()
    log_dir = Path.home() / "Library" / "Logs" / "MusicHotkeys"

    plist = f"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
    <key>Label</key>
    <string>{LAUNCHD_LABEL}</string>

    <key>ProgramArguments</key>
    <array>
        <string>{python_path}</string>
        <string>-m</string>
        <string>music_hotkeys.main</string>
        <string>serve</string>
        <string>--config</string>
        <string>{config_path}</string>
    </array>

    <key>RunAtLoad</key>
    <true/>

    <key>KeepAlive</key>
    <dict>
        <key>SuccessfulExit</key>
        <false/>
    </dict>

    <key>ProcessType</key>
    <string>Interactive</string>

    <key>StandardOutPath</key>
    <string>{log_dir}/stdout.log</string>

    <key>StandardErrorPath</key>
    <string>{log_dir}/stderr.log</string>
</dict>
</plist>
"""
    return plist
