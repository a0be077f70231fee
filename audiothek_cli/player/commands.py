"""
Transport commands and the fixed key bindings that produce them.

Raw key detection (see terminal.py) yields a `Key`; the poller maps keys to
commands here, so the transport can be driven without a real terminal.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Union

SEEK_STEP_SECONDS = 10.0
POLL_TIMEOUT_SECONDS = 0.2


class Key(Enum):
    SPACE = "space"
    LEFT = "left"
    RIGHT = "right"
    Q = "q"
    ESCAPE = "escape"
    OTHER = "other"


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class TogglePause:
    pass


@dataclass(frozen=True)
class SeekRelative:
    delta: float


Command = Union[Quit, TogglePause, SeekRelative]

KEY_BINDINGS: dict[Key, Command] = {
    Key.SPACE: TogglePause(),
    Key.LEFT: SeekRelative(-SEEK_STEP_SECONDS),
    Key.RIGHT: SeekRelative(SEEK_STEP_SECONDS),
    Key.Q: Quit(),
    Key.ESCAPE: Quit(),
}

# POSIX terminal byte sequences. Arrows arrive as CSI (ESC [) in normal cursor
# mode and SS3 (ESC O) in application cursor mode.
KEY_SEQUENCES: dict[bytes, Key] = {
    b" ": Key.SPACE,
    b"q": Key.Q,
    b"\x1b": Key.ESCAPE,
    b"\x1b[D": Key.LEFT,
    b"\x1b[C": Key.RIGHT,
    b"\x1bOD": Key.LEFT,
    b"\x1bOC": Key.RIGHT,
}


def decode_key(data: bytes) -> Key | None:
    """Maps one chunk of raw terminal input to a Key; None for no input."""
    if not data:
        return None
    return KEY_SEQUENCES.get(data, Key.OTHER)


class KeyReader(Protocol):
    def read_key(self, timeout: float) -> Key | None:
        """Waits at most `timeout` seconds for one key press."""
        ...


class InputPoller:
    """Samples one key per tick and translates it into a transport command."""

    def __init__(self, reader: KeyReader, timeout: float = POLL_TIMEOUT_SECONDS):
        self.reader = reader
        self.timeout = timeout

    def poll(self) -> Command | None:
        key = self.reader.read_key(self.timeout)
        if key is None:
            return None
        return KEY_BINDINGS.get(key)
