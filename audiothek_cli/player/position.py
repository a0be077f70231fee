"""
Elapsed-time bookkeeping for the transport.

The audio engine is not asked where it is. Instead the position is derived
from an anchor: the offset that was current at `anchor_time`, plus the
monotonic time that has passed since, while playing.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class PlaybackState(Enum):
    PLAYING = "Playing"
    PAUSED = "Paused"


@dataclass
class PositionAnchor:
    frozen_offset: float
    anchor_time: float


def clamp_position(target: float, total_duration: float) -> float:
    """
    Clamps a seek target to [0, total_duration].

    With an unknown length (``total_duration == 0``) only the lower bound applies.
    """
    target = max(target, 0.0)
    if total_duration > 0:
        target = min(target, total_duration)
    return target


def current_position(
    state: PlaybackState,
    anchor: PositionAnchor,
    total_duration: float,
    now: float,
) -> float:
    """Computes the displayable position in seconds at monotonic time `now`."""
    if state is PlaybackState.PAUSED:
        return anchor.frozen_offset
    position = anchor.frozen_offset + (now - anchor.anchor_time)
    if total_duration > 0:
        position = min(position, total_duration)
    return position


class PositionTracker:
    """Holds the playback state and anchor and applies the transport transitions."""

    def __init__(
        self,
        total_duration: float,
        clock: Callable[[], float],
        state: PlaybackState = PlaybackState.PLAYING,
    ):
        self.total_duration = total_duration
        self._clock = clock
        self.state = state
        self.anchor = PositionAnchor(frozen_offset=0.0, anchor_time=clock())

    @property
    def is_paused(self) -> bool:
        return self.state is PlaybackState.PAUSED

    def position(self, now: float | None = None) -> float:
        if now is None:
            now = self._clock()
        return current_position(self.state, self.anchor, self.total_duration, now)

    def pause(self, now: float | None = None) -> None:
        if self.is_paused:
            return
        self.anchor.frozen_offset = self.position(now)
        self.state = PlaybackState.PAUSED

    def resume(self, now: float | None = None) -> None:
        if not self.is_paused:
            return
        self.anchor.anchor_time = self._clock() if now is None else now
        self.state = PlaybackState.PLAYING

    def seek_to(self, target: float, now: float | None = None) -> None:
        """Re-anchors at an already clamped target that the engine accepted."""
        self.anchor.frozen_offset = target
        self.anchor.anchor_time = self._clock() if now is None else now
