"""
The single live status line shown during playback.
"""

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.text import Text

from audiothek_cli.utils.formatting import format_clock

from .position import PlaybackState

CONTROLS_HELP = (
    "[Space] Pause/Play, [<-] Rewind 10s, [->] Forward 10s, [q] Quit"
)

STATE_STYLES = {
    PlaybackState.PLAYING: "bold green",
    PlaybackState.PAUSED: "bold yellow",
}


def format_status(state: PlaybackState, position: float, total_duration: float) -> str:
    """Builds the plain status line text."""
    return (
        f"Status: {state.value} | "
        f"Position: {format_clock(position)} / {format_clock(total_duration)} | "
        f"Controls: {CONTROLS_HELP}"
    )


class StatusRenderer:
    """Overwrites one terminal line in place on every tick."""

    def __init__(self, console: Console):
        self.console = console
        self._line_open = False

    def render(
        self, state: PlaybackState, position: float, total_duration: float
    ) -> None:
        text = Text(format_status(state, position, total_duration), no_wrap=True)
        text.stylize(STATE_STYLES[state], 8, 8 + len(state.value))
        self.console.control(
            Control.move_to_column(0), Control((ControlType.ERASE_IN_LINE, 2))
        )
        self.console.print(text, end="", soft_wrap=True, highlight=False)
        self._line_open = True

    def break_line(self) -> None:
        """Ends the live line so that following output starts on a fresh line."""
        if self._line_open:
            self.console.print()
            self._line_open = False

    def finish(self, message: str) -> None:
        self.break_line()
        self.console.print(message, highlight=False)
