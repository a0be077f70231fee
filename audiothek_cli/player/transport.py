"""
The playback control loop.

Each tick renders the current position, waits up to one poll timeout for a
key, applies the resulting command and checks whether the engine has run
dry. The poll is the only place the loop waits; the engine keeps playing on
its own thread in the meantime.
"""

import logging
import time
from collections.abc import Callable
from enum import Enum
from typing import BinaryIO

from rich.console import Console

from audiothek_cli.exceptions import SeekError

from .commands import Command, InputPoller, Quit, SeekRelative, TogglePause
from .engine import AudioEngine, PygameEngine
from .position import PositionTracker, clamp_position
from .renderer import StatusRenderer
from .terminal import raw_input_mode

log = logging.getLogger(__name__)


class Termination(Enum):
    QUIT = "quit"
    FINISHED = "finished"


TERMINATION_MESSAGES = {
    Termination.QUIT: "Playback stopped.",
    Termination.FINISHED: "Playback finished.",
}


class TransportController:
    """Ties engine, position tracker, input poller and renderer together."""

    def __init__(
        self,
        engine: AudioEngine,
        total_duration: float,
        poller: InputPoller,
        renderer: StatusRenderer,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.engine = engine
        self.total_duration = total_duration
        self.poller = poller
        self.renderer = renderer
        self.clock = clock
        self.tracker: PositionTracker | None = None

    def start(self) -> None:
        """Enters the initial state: playing from offset 0, anchored now."""
        self.tracker = PositionTracker(self.total_duration, self.clock)
        self.engine.play()

    def tick(self) -> Termination | None:
        """Runs one loop iteration; returns the termination reason, if any."""
        self.renderer.render(
            self.tracker.state, self.tracker.position(), self.total_duration
        )
        command = self.poller.poll()
        if command is not None:
            return self.apply(command)
        if self.engine.is_finished():
            return Termination.FINISHED
        return None

    def run(self) -> Termination:
        self.start()
        while True:
            reason = self.tick()
            if reason is not None:
                log.debug(f"Transport terminated: {reason.value}")
                return reason

    def apply(self, command: Command) -> Termination | None:
        now = self.clock()
        if isinstance(command, Quit):
            return Termination.QUIT
        if isinstance(command, TogglePause):
            if self.tracker.is_paused:
                self.tracker.resume(now)
                self.engine.play()
            else:
                self.tracker.pause(now)
                self.engine.pause()
        elif isinstance(command, SeekRelative):
            self.seek_relative(command.delta, now)
        return None

    def seek_relative(self, delta: float, now: float) -> bool:
        """
        Seeks `delta` seconds from the current position.

        Returns True when the engine accepted the new position. Seeking is
        refused while the stream length is unknown.
        """
        if self.total_duration <= 0:
            self._report("Seek unavailable: stream length is unknown.")
            return False

        target = clamp_position(self.tracker.position(now) + delta, self.total_duration)
        try:
            self.engine.seek(target)
        except SeekError as e:
            self._report(f"Seek failed: {e}")
            return False
        self.tracker.seek_to(target, now)
        return True

    def _report(self, message: str) -> None:
        self.renderer.break_line()
        log.warning(f"[yellow]{message}[/yellow]")


def play_stream(
    stream: BinaryIO | bytes,
    console: Console,
    duration_hint: float | None = None,
    format_hint: str | None = None,
) -> Termination:
    """
    Plays one fully fetched audio asset interactively until quit or exhaustion.

    Raises:
        EngineInitError: Before any terminal state is touched.
        TerminalModeError: If keyboard input cannot be set up or restored.
    """
    engine, total_duration = PygameEngine.load(
        stream, duration_hint=duration_hint, format_hint=format_hint
    )
    renderer = StatusRenderer(console)
    with engine:
        try:
            with raw_input_mode() as reader:
                controller = TransportController(
                    engine, total_duration, InputPoller(reader), renderer
                )
                reason = controller.run()
        finally:
            renderer.break_line()

    renderer.finish(TERMINATION_MESSAGES[reason])
    return reason
