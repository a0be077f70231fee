"""
Playback Layer.

This package contains the interactive transport: the audio engine adapter,
position tracking, keyboard input, the status line, and the control loop
that drives them.
"""

from .engine import PygameEngine
from .transport import Termination, TransportController, play_stream

__all__ = ["PygameEngine", "Termination", "TransportController", "play_stream"]
