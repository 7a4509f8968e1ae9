"""CLI entry point for Music Hotkeys."""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from music_hotkeys.controls import MusicControls, build_controls
from music_hotkeys.hotkeys import to_pynput_hotkey
from music_hotkeys.navigation import Direction, ScanResult
from music_hotkeys.scheduler import LAUNCHD_LABEL, APSchedulerAdapter
from music_hotkeys.utils.config import HOTKEY_ACTIONS, Settings, load_config
from music_hotkeys.utils.logging import setup_logging
from music_hotkeys.utils.notifications import ConsoleNotifier

app = typer.Typer(
    name="music-hotkeys",
    help="Music Hotkeys - keyboard control for the macOS Music app",
    no_args_is_help=True,
)
console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to configuration file"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose output"),
]

# Negative numbers are arguments here, not options
SIGNED_ARGUMENT = {"ignore_unknown_options": True}


def get_config_path(config: Optional[Path]) -> Path:
    """Get the configuration file path."""
    return config or Path("config.yaml")


def load_settings(config: Optional[Path], verbose: bool = False) -> Settings:
    """Load settings and configure console logging, exiting on invalid config."""
    setup_logging(
        log_level="DEBUG" if verbose else "WARNING",
        json_format=False,
    )

    try:
        return load_config(get_config_path(config))
    except ValidationError as e:
        rprint(f"[red]Invalid configuration:[/red]\n{escape(str(e))}")
        raise typer.Exit(1)


def get_controls(settings: Settings, scheduler: APSchedulerAdapter | None = None) -> MusicControls:
    return build_controls(settings, scheduler or APSchedulerAdapter(), ConsoleNotifier(console))


def exit_on_failure(ok: bool) -> None:
    if not ok:
        raise typer.Exit(1)


@app.command("play-pause")
def play_pause(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
    """Play or pause the current track."""
    settings = load_settings(config, verbose)
    exit_on_failure(get_controls(settings).toggle_play_pause())


@app.command("next-track")
def next_track(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
    """Skip to the next track."""
    settings = load_settings(config, verbose)
    exit_on_failure(get_controls(settings).next_track())


@app.command("previous-track")
def previous_track(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
    """Go back to the previous track."""
    settings = load_settings(config, verbose)
    exit_on_failure(get_controls(settings).previous_track())


@app.command("show-track")
def show_track(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
    """Show what is currently playing."""
    settings = load_settings(config, verbose)
    exit_on_failure(get_controls(settings).show_current_track())


@app.command(context_settings=SIGNED_ARGUMENT)
def volume(
    level: Annotated[
        Optional[int],
        typer.Argument(help="New volume (0-100). Omit to show the current volume."),
    ] = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show or set the Music volume."""
    settings = load_settings(config, verbose)
    controls = get_controls(settings)

    result = controls.get_volume() if level is None else controls.set_volume(level)
    exit_on_failure(result is not None)


@app.command("adjust-volume", context_settings=SIGNED_ARGUMENT)
def adjust_volume(
    delta: Annotated[int, typer.Argument(help="Percentage points to add (negative to lower)")],
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Raise or lower the Music volume."""
    settings = load_settings(config, verbose)
    exit_on_failure(get_controls(settings).adjust_volume(delta) is not None)


async def run_album_command(settings: Settings, direction: Direction) -> ScanResult | None:
    """Run one album navigation to completion on a fresh event loop.

    Returns:
        The session outcome, or None if navigation could not start
    """
    scheduler = APSchedulerAdapter()
    scheduler.start()
    done: asyncio.Future[ScanResult] = asyncio.get_running_loop().create_future()

    try:
        controls = get_controls(settings, scheduler)
        command = controls.next_album if direction is Direction.FORWARD else controls.previous_album
        if not command(on_complete=done.set_result):
            return None
        return await done
    finally:
        scheduler.stop()


@app.command("next-album")
def next_album(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
    """Skip forward to the next album."""
    settings = load_settings(config, verbose)
    result = asyncio.run(run_album_command(settings, Direction.FORWARD))
    exit_on_failure(result is not None and result.found)


@app.command("previous-album")
def previous_album(config: ConfigOption = None, verbose: VerboseOption = False) -> None:
    """Skip back to the first track of the previous album."""
    settings = load_settings(config, verbose)
    result = asyncio.run(run_album_command(settings, Direction.BACKWARD))
    exit_on_failure(result is not None and result.found)


@app.command()
def status(config: ConfigOption = None) -> None:
    """Show configuration and hotkey bindings."""
    settings = load_settings(config)

    rprint("\n[bold blue]Music Hotkeys Status[/bold blue]\n")

    rprint(f"[bold]Player:[/bold] {settings.player.app_name}")
    rprint(f"[bold]Alert duration:[/bold] {settings.display.alert_duration}s")
    rprint(f"[bold]Album skip attempts:[/bold] {settings.albums.max_skip_attempts}")
    rprint(f"[bold]Album skip delay:[/bold] {settings.albums.skip_delay}s")
    rprint()

    table = Table(title="Hotkeys")
    table.add_column("Action", style="cyan")
    table.add_column("Binding")
    for action in HOTKEY_ACTIONS:
        binding = settings.hotkeys.get(action)
        table.add_row(action, to_pynput_hotkey(binding) if binding else "[dim]unbound[/dim]")
    console.print(table)

    rprint()
    rprint("[bold]Player state:[/bold]")
    running = get_controls(settings).player.is_running()
    if not running.succeeded:
        rprint(f"  [red]✗[/red] Could not query {settings.player.app_name}: {escape(running.error or '')}")
    elif running.value:
        rprint(f"  [green]✓[/green] {settings.player.app_name} is running")
    else:
        rprint(f"  [yellow]![/yellow] {settings.player.app_name} is not running")


@app.command()
def serve(config: ConfigOption = None) -> None:
    """Run the hotkey daemon (for launchd or manual background run)."""
    config_path = get_config_path(config)

    rprint("\n[bold blue]Starting Music Hotkeys Daemon[/bold blue]\n")
    rprint(f"Config: {config_path}")
    rprint("Press Ctrl+C to stop\n")

    from music_hotkeys.scheduler import run_daemon

    try:
        asyncio.run(run_daemon(config_path))
    except KeyboardInterrupt:
        rprint("\n[yellow]Daemon stopped[/yellow]")


def launchd_plist_path() -> Path:
    return Path.home() / "Library" / "LaunchAgents" / f"{LAUNCHD_LABEL}.plist"


@app.command("install-service")
def install_service(config: ConfigOption = None) -> None:
    """Generate and optionally install the launchd plist for macOS."""
    import subprocess

    from music_hotkeys.scheduler import generate_launchd_plist

    config_path = get_config_path(config).absolute()
    plist_content = generate_launchd_plist(config_path)
    plist_path = launchd_plist_path()

    rprint("\n[bold blue]launchd Service Installation[/bold blue]\n")
    rprint(f"Plist path: [cyan]{plist_path}[/cyan]\n")
    rprint("[dim]" + "-" * 60 + "[/dim]")
    console.print(plist_content, markup=False, highlight=False)
    rprint("[dim]" + "-" * 60 + "[/dim]\n")

    if typer.confirm("Install this plist and load the service?"):
        log_dir = Path.home() / "Library" / "Logs" / "MusicHotkeys"
        log_dir.mkdir(parents=True, exist_ok=True)

        plist_path.parent.mkdir(parents=True, exist_ok=True)
        plist_path.write_text(plist_content)
        rprint(f"[green]✓[/green] Plist written to {plist_path}")

        result = subprocess.run(
            ["launchctl", "load", str(plist_path)],
            capture_output=True,
            text=True,
        )

        if result.returncode == 0:
            rprint("[green]✓[/green] Service loaded successfully")
            rprint()
            rprint("Grant Accessibility access to your Python interpreter so hotkeys can be captured.")
            rprint(f"To stop: [cyan]launchctl unload {plist_path}[/cyan]")
        else:
            rprint(f"[red]Error loading service:[/red] {result.stderr}")
    else:
        rprint("\nTo install manually:")
        rprint(f"  1. Save the plist to: {plist_path}")
        rprint(f"  2. Run: launchctl load {plist_path}")


@app.command("uninstall-service")
def uninstall_service() -> None:
    """Unload and remove the launchd service."""
    import subprocess

    plist_path = launchd_plist_path()

    if not plist_path.exists():
        rprint("[yellow]Service not installed[/yellow]")
        return

    if typer.confirm("Unload and remove the launchd service?"):
        result = subprocess.run(
            ["launchctl", "unload", str(plist_path)],
            capture_output=True,
            text=True,
        )

        if result.returncode == 0:
            rprint("[green]✓[/green] Service unloaded")
        else:
            rprint(f"[yellow]Warning:[/yellow] {result.stderr}")

        plist_path.unlink()
        rprint(f"[green]✓[/green] Plist removed from {plist_path}")


if __name__ == "__main__":
    app()
