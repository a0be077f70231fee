"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from audiothek_cli.models.config import AppConfig, Podcast, PodcastCatalog
from audiothek_cli.models.episode import Episode
from audiothek_cli.utils.formatting import format_duration


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Create a podcasts.json in the config directory or pass --podcasts.",
            "• Run `audiothek validate` to check the catalog format.",
        ],
        "UnknownPodcastError": [
            "• Run `audiothek list` to see the configured show keys.",
            "• Keys are case-sensitive.",
        ],
        "EpisodeNotFoundError": [
            "• The show may not have a published episode right now.",
            "• Check the show ID in your podcasts.json.",
        ],
        "ApiError": [
            "• The Audiothek API might be temporarily unavailable.",
            "• Run `audiothek diagnose` to test connectivity.",
        ],
        "EngineInitError": [
            "• Check that an audio output device is connected and not in use.",
            "• The episode may use a format the decoder does not support.",
        ],
        "TerminalModeError": [
            "• Run the player from an interactive terminal.",
            "• Input cannot be piped or redirected during playback.",
        ],
        "TimeoutError": [
            "• A request timed out, which may indicate network throttling.",
            "• Try a larger --timeout.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        content += f"{key} = {value or '[dim](default)[/dim]'}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def build_podcast_table(catalog: PodcastCatalog) -> Table:
    table = Table(title="Configured Podcasts")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Key", style="cyan")
    table.add_column("Show ID", style="dim")
    for i, podcast in enumerate(catalog, 1):
        table.add_row(str(i), podcast.key, podcast.id)
    return table


def print_podcast_table(catalog: PodcastCatalog, console: Console | None = None):
    """Displays the configured shows."""
    console = console or Console()
    if not len(catalog):
        console.print("[yellow]No podcasts configured.[/yellow]")
        return
    console.print(build_podcast_table(catalog))


def prompt_podcast_selection(
    catalog: PodcastCatalog, console: Console
) -> Podcast | None:
    """
    Shows a numbered menu of the catalog and asks for a choice.

    Returns None when the user enters 'q' or input ends.
    """
    console.print(build_podcast_table(catalog))
    choices = [str(i) for i in range(1, len(catalog) + 1)] + ["q"]
    try:
        answer = Prompt.ask(
            "Choose a podcast to play ([cyan]q[/cyan] to cancel)",
            console=console,
            choices=choices,
            show_choices=False,
            default="1",
        )
    except EOFError:
        return None
    if answer == "q":
        return None
    return catalog[int(answer) - 1]


def print_episode_panel(podcast: Podcast, episode: Episode, console: Console):
    """Shows what is about to be played."""
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold cyan", justify="right")
    grid.add_column()
    grid.add_row("Show:", podcast.key)
    grid.add_row("Episode:", episode.title)
    if episode.duration:
        grid.add_row("Length:", format_duration(episode.duration))
    console.print(Panel(grid, title="🎧 [bold]Found Episode[/bold]", expand=False))


def print_validation_table(config: AppConfig, podcasts_path: Path, count: int):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("API URL:", config.api_url)
    table.add_row("Request Timeout:", f"{config.request_timeout:g}s")
    table.add_row("Podcast Catalog:", f"[dim]{podcasts_path}[/dim]")
    table.add_row("Podcasts:", f"[green]{count}[/green]")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )
