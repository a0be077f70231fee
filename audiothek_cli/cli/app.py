"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import json
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TransferSpeedColumn,
)

from audiothek_cli import __version__
from audiothek_cli.api.client import AudiothekAPIClient
from audiothek_cli.exceptions import (
    AudiothekCliError,
    ConfigurationError,
    UnknownPodcastError,
)
from audiothek_cli.models.config import AppConfig, Podcast
from audiothek_cli.models.episode import Episode
from audiothek_cli.player.engine import check_output_device
from audiothek_cli.player.transport import play_stream
from audiothek_cli.storage.catalog import load_podcasts
from audiothek_cli.storage.config_manager import ConfigManager
from audiothek_cli.utils.config_validator import export_schema, validate_podcasts_schema
from audiothek_cli.utils.formatting import format_size

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_episode_panel,
    print_podcast_table,
    print_validation_table,
    prompt_podcast_selection,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("audiothek_cli")

app = typer.Typer(
    name="audiothek",
    help=(
        "Play the latest episode of an ARD Audiothek show in the terminal. Use"
        " 'audiothek <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "audiothek-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"

PODCASTS_OPTION = typer.Option(
    None,
    "--podcasts",
    "-p",
    help="Path to the podcast catalog (default: podcasts.json in the config dir).",
)


def _load_settings(
    podcasts: Path | None = None, cli_options: dict | None = None
) -> tuple[AppConfig, Path]:
    """Loads the validated config and resolves the catalog path."""
    config_manager = ConfigManager(CONFIG_FILE)
    config = config_manager.load_config(cli_options)
    return config, podcasts or config_manager.podcasts_path(config)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """Audiothek Quickplay CLI"""
    if version:
        console.print(f"[bold]audiothek-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("audiothek_cli").setLevel(log_level)

    if show_config:
        try:
            config, podcasts_path = _load_settings()
        except AudiothekCliError as e:
            console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
            raise typer.Exit(code=1) from e
        config_data = config.model_dump(exclude={"config_path"})
        config_data["podcasts_file"] = str(podcasts_path)
        print_config(CONFIG_FILE, config_data)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def _select_podcast(key: str | None, podcasts_path: Path) -> Podcast | None:
    catalog = load_podcasts(podcasts_path)
    if key is None:
        if not len(catalog):
            raise ConfigurationError(f"No podcasts configured in '{podcasts_path}'.")
        return prompt_podcast_selection(catalog, console)

    podcast = catalog.find(key)
    if podcast is None:
        raise UnknownPodcastError(f"Unknown podcast key: '{key}'")
    return podcast


async def _fetch_episode(
    config: AppConfig, podcast: Podcast
) -> tuple[Episode, bytes]:
    """Looks up the latest episode and downloads its audio into memory."""
    async with AudiothekAPIClient(config.api_url, config.request_timeout) as client:
        console.print(f"Fetching latest episode for '[cyan]{podcast.key}[/cyan]'...")
        episode = await client.fetch_latest_episode(podcast.id)
        print_episode_panel(podcast, episode, console)

        with Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=30),
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task_id = progress.add_task("Loading. Please wait...", total=None)

            def on_progress(completed: int, total: int | None) -> None:
                progress.update(task_id, completed=completed, total=total)

            audio = await client.download_audio(episode.audio_url, on_progress)

    log.info(f"Loaded {format_size(len(audio))} of audio.")
    return episode, audio


@app.command()
def play(
    key: str | None = typer.Argument(
        None, help="Key of the show to play. Omit to choose from a menu."
    ),
    podcasts: Path | None = PODCASTS_OPTION,
    api_url: str | None = typer.Option(
        None, "--api-url", help="Override the Audiothek GraphQL endpoint."
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Request timeout in seconds."
    ),
):
    """Play the latest episode of a configured show."""
    console.print(f"[bold]Audiothek Quickplay[/bold] v{__version__}")
    console.print("-" * 34)

    cli_options = {
        name: value
        for name, value in {"api_url": api_url, "request_timeout": timeout}.items()
        if value is not None
    }

    try:
        config, podcasts_path = _load_settings(podcasts, cli_options)
        podcast = _select_podcast(key, podcasts_path)
        if podcast is None:
            console.print("No podcast selected.")
            return

        episode, audio = asyncio.run(_fetch_episode(config, podcast))
        play_stream(
            audio,
            console,
            duration_hint=episode.duration,
            format_hint=episode.format_hint,
        )
    except AudiothekCliError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


@app.command(name="list")
def list_podcasts(podcasts: Path | None = PODCASTS_OPTION):
    """List the configured shows."""
    try:
        _, podcasts_path = _load_settings(podcasts)
        catalog = load_podcasts(podcasts_path)
    except AudiothekCliError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    print_podcast_table(catalog, console)


@app.command()
def validate(
    podcasts: Path | None = PODCASTS_OPTION,
    export: Path | None = typer.Option(
        None, "--export-schema", help="Write the catalog JSON schema to this path."
    ),
):
    """Validate the configuration and the podcast catalog."""
    if export:
        export_schema(export)
        console.print(f"[green]✓ Schema written to '{export}'.[/green]")
        raise typer.Exit()

    try:
        config, podcasts_path = _load_settings(podcasts)
        with open(podcasts_path, encoding="utf-8") as f:
            raw = json.load(f)
    except AudiothekCliError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]✗ Cannot read podcast catalog: {e}[/red]")
        raise typer.Exit(code=1) from e

    is_valid, errors = validate_podcasts_schema(raw)
    if not is_valid:
        console.print("[red]✗ Podcast catalog is invalid:[/red]")
        for message in errors:
            console.print(f"  [red]•[/red] {message}")
        raise typer.Exit(code=1)

    print_validation_table(config, podcasts_path, len(raw))


@app.command()
def diagnose(podcasts: Path | None = PODCASTS_OPTION):
    """Diagnose common configuration, connectivity and audio issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False
    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print(f"[dim]○ No config file at {CONFIG_FILE}, using defaults.[/dim]")

    try:
        config, podcasts_path = _load_settings(podcasts)
    except AudiothekCliError as e:
        console.print(f"[red]✗ Configuration validation failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    try:
        catalog = load_podcasts(podcasts_path)
        console.print(f"[green]✓[/] Podcast catalog lists {len(catalog)} shows.")
    except AudiothekCliError as e:
        console.print(f"[red]✗ {e}[/red]")
        issues_found = True

    error = check_output_device()
    if error is None:
        console.print("[green]✓[/] Audio output device is available.")
    else:
        console.print(f"[red]✗ Audio output unavailable: {error}[/red]")
        issues_found = True

    console.print("\n[dim]Testing connectivity to the Audiothek API...[/dim]")

    async def test_connection():
        import aiohttp

        try:
            timeout = aiohttp.ClientTimeout(total=config.request_timeout)
            async with (
                aiohttp.ClientSession(timeout=timeout) as session,
                session.get(config.api_url, params={"query": "{__typename}"}) as resp,
            ):
                if resp.status == 200:
                    console.print("[green]✓[/] Successfully connected to the API.")
                    return True
                console.print(
                    f"[red]✗ Could not reach the API (Status: {resp.status}).[/red]"
                )
                return False
        except Exception as e:
            console.print(f"[red]✗ Connection test failed: {e}[/red]")
            return False

    if not asyncio.run(test_connection()):
        issues_found = True
    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
