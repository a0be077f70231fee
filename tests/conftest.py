from __future__ import annotations

import pytest

from audiothek_cli.exceptions import SeekError
from audiothek_cli.player.position import PlaybackState


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEngine:
    """Records transport calls; finishes once `length` seconds were played."""

    def __init__(self, clock: FakeClock, length: float | None = None, seek_fails=False):
        self.clock = clock
        self.length = length
        self.seek_fails = seek_fails
        self.paused = False
        self.played = 0.0
        self.calls: list[tuple] = []
        self._resumed_at: float | None = None
        self.closed = False

    def _elapsed(self) -> float:
        if self._resumed_at is None:
            return self.played
        return self.played + (self.clock() - self._resumed_at)

    def play(self) -> None:
        self.calls.append(("play",))
        if self._resumed_at is None:
            self._resumed_at = self.clock()
        self.paused = False

    def pause(self) -> None:
        self.calls.append(("pause",))
        self.played = self._elapsed()
        self._resumed_at = None
        self.paused = True

    def is_paused(self) -> bool:
        return self.paused

    def seek(self, to: float) -> None:
        self.calls.append(("seek", to))
        if self.seek_fails:
            raise SeekError("unsupported codec")
        self.played = to
        if self._resumed_at is not None:
            self._resumed_at = self.clock()

    def is_finished(self) -> bool:
        if self.length is None or self.paused:
            return False
        return self._elapsed() >= self.length

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True


class ScriptedPoller:
    """Plays back a list of commands, advancing the clock by one tick per poll."""

    def __init__(self, clock: FakeClock, script=(), tick: float = 0.2):
        self.clock = clock
        self.script = list(script)
        self.tick = tick
        self.polls = 0

    def poll(self):
        self.polls += 1
        self.clock.advance(self.tick)
        if self.script:
            return self.script.pop(0)
        return None


class RecordingRenderer:
    def __init__(self):
        self.frames: list[tuple[PlaybackState, float, float]] = []
        self.breaks = 0
        self.messages: list[str] = []

    def render(self, state, position, total_duration) -> None:
        self.frames.append((state, position, total_duration))

    def break_line(self) -> None:
        self.breaks += 1

    def finish(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
