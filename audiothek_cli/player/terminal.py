"""
Keyboard access for the transport: a scoped unbuffered input mode and
platform key readers built on it.

POSIX terminals are switched to cbreak mode (no line buffering, no echo;
Ctrl-C still raises KeyboardInterrupt) for the duration of a ``with`` block.
The Windows console needs no mode switch; ``msvcrt`` already reads single
key presses.
"""

import logging
import os
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager

from audiothek_cli.exceptions import TerminalModeError

from .commands import Key, KeyReader, decode_key

log = logging.getLogger(__name__)

# Time allowed for the rest of an escape sequence to arrive after ESC.
ESCAPE_SEQUENCE_WAIT = 0.03

# msvcrt scan codes following a '\x00' or '\xe0' prefix
WINDOWS_SCAN_CODES = {"K": Key.LEFT, "M": Key.RIGHT}


def key_length(buffer: bytes) -> int:
    """
    Returns the byte length of the first key in `buffer`.

    CSI sequences (ESC [ params final) and SS3 sequences (ESC O X) count as one
    key. Returns 0 while `buffer` holds only the start of such a sequence.
    """
    if buffer[:1] != b"\x1b":
        return 1
    if len(buffer) == 1:
        return 0
    intro = buffer[1:2]
    if intro == b"O":
        return 3 if len(buffer) >= 3 else 0
    if intro == b"[":
        for i in range(2, len(buffer)):
            if 0x40 <= buffer[i] <= 0x7E:
                return i + 1
        return 0
    return 1


class PosixKeyReader:
    """
    Reads key presses from a terminal file descriptor in cbreak mode.

    Bytes that arrive together (auto-repeat, fast typing) are kept in a buffer
    and handed out one key per call.
    """

    READ_SIZE = 64

    def __init__(self, fd: int):
        self.fd = fd
        self._buffer = b""

    def _wait(self, timeout: float) -> bool:
        import select

        ready, _, _ = select.select([self.fd], [], [], timeout)
        return bool(ready)

    def _fill(self, timeout: float) -> bool:
        if not self._wait(timeout):
            return False
        chunk = os.read(self.fd, self.READ_SIZE)
        self._buffer += chunk
        return bool(chunk)

    def read_key(self, timeout: float) -> Key | None:
        if not self._buffer and not self._fill(timeout):
            return None

        length = key_length(self._buffer)
        while length == 0 and self._fill(ESCAPE_SEQUENCE_WAIT):
            length = key_length(self._buffer)
        if length == 0:
            # Lone ESC, or a sequence that never completed.
            length = 1

        data, self._buffer = self._buffer[:length], self._buffer[length:]
        return decode_key(data)


class WindowsKeyReader:
    """Polls the Windows console with msvcrt until a key arrives or time runs out."""

    POLL_INTERVAL = 0.01

    def read_key(self, timeout: float) -> Key | None:
        import msvcrt

        deadline = time.monotonic() + timeout
        while not msvcrt.kbhit():
            if time.monotonic() >= deadline:
                return None
            time.sleep(self.POLL_INTERVAL)

        ch = msvcrt.getwch()
        if ch in ("\x00", "\xe0"):
            return WINDOWS_SCAN_CODES.get(msvcrt.getwch(), Key.OTHER)
        return decode_key(ch.encode("utf-8", errors="replace"))


@contextmanager
def posix_raw_input(fd: int) -> Iterator[PosixKeyReader]:
    """
    Puts the terminal behind `fd` into cbreak mode and restores it on exit.

    Raises:
        TerminalModeError: The mode cannot be read, changed or restored.
    """
    import termios
    import tty

    try:
        saved = termios.tcgetattr(fd)
        tty.setcbreak(fd)
    except termios.error as e:
        raise TerminalModeError(f"Cannot enable raw input mode: {e}") from e
    log.debug("Terminal switched to raw input mode.")

    try:
        yield PosixKeyReader(fd)
    finally:
        try:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
        except termios.error as e:
            raise TerminalModeError(f"Cannot restore terminal mode: {e}") from e
        log.debug("Terminal mode restored.")


@contextmanager
def raw_input_mode() -> Iterator[KeyReader]:
    """Acquires unbuffered keyboard input for the current platform."""
    if os.name == "nt":
        yield WindowsKeyReader()
        return

    if not sys.stdin.isatty():
        raise TerminalModeError("Standard input is not a terminal.")
    with posix_raw_input(sys.stdin.fileno()) as reader:
        yield reader
