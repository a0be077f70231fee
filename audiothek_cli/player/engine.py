"""
Audio engine adapter.

Decoding and device output are delegated to ``pygame.mixer.music``, which
plays from its own SDL thread. The adapter exposes only the handful of
synchronous operations the transport needs and turns pygame failures into
EngineInitError / SeekError.
"""

import io
import logging
import os
from typing import BinaryIO, Protocol

import mutagen

from audiothek_cli.exceptions import EngineInitError, SeekError

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402

log = logging.getLogger(__name__)


class AudioEngine(Protocol):
    """Operations the transport issues to the output engine."""

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def is_paused(self) -> bool: ...

    def seek(self, to: float) -> None: ...

    def is_finished(self) -> bool: ...

    def close(self) -> None: ...


def probe_duration(stream: BinaryIO) -> float:
    """
    Reads the stream length in seconds from the container metadata.

    Returns 0.0 when mutagen does not recognise the format or reports no
    length. The stream position is restored afterwards.
    """
    start = stream.tell()
    try:
        audio = mutagen.File(stream)
    except mutagen.MutagenError as e:
        log.debug(f"Could not read stream metadata: {e}")
        return 0.0
    finally:
        stream.seek(start)

    if audio is None or audio.info is None:
        return 0.0
    length = getattr(audio.info, "length", 0.0) or 0.0
    return max(float(length), 0.0)


class PygameEngine:
    """Plays a single in-memory audio buffer through ``pygame.mixer.music``."""

    def __init__(self, mixer=None):
        self._mixer = mixer if mixer is not None else pygame.mixer
        self._paused = False
        self._started = False
        self._closed = False

    @classmethod
    def load(
        cls,
        stream: BinaryIO | bytes,
        duration_hint: float | None = None,
        format_hint: str | None = None,
        mixer=None,
    ) -> tuple["PygameEngine", float]:
        """
        Opens the output device and decodes the stream header.

        Args:
            stream: The encoded audio, fully fetched.
            duration_hint: Length in seconds supplied by the caller, if known.
            format_hint: File extension such as 'mp3', passed to the decoder.
            mixer: The mixer module to drive; defaults to ``pygame.mixer``.

        Returns:
            The ready engine (not yet playing) and the total duration in
            seconds, 0.0 if unknown.

        Raises:
            EngineInitError: No output device, or the stream cannot be decoded.
        """
        if isinstance(stream, (bytes, bytearray)):
            stream = io.BytesIO(stream)

        if duration_hint and duration_hint > 0:
            total_duration = float(duration_hint)
        else:
            total_duration = probe_duration(stream)

        engine = cls(mixer)
        try:
            engine._mixer.init()
        except pygame.error as e:
            raise EngineInitError(f"No audio output device: {e}") from e

        try:
            if format_hint:
                engine._mixer.music.load(stream, format_hint)
            else:
                engine._mixer.music.load(stream)
        except pygame.error as e:
            engine.close()
            raise EngineInitError(f"Failed to decode audio stream: {e}") from e

        log.debug(f"Engine ready, total duration {total_duration:.1f}s")
        return engine, total_duration

    def __enter__(self) -> "PygameEngine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def play(self) -> None:
        if not self._started:
            self._mixer.music.play()
            self._started = True
        elif self._paused:
            self._mixer.music.unpause()
        self._paused = False

    def pause(self) -> None:
        if self._started and not self._paused:
            self._mixer.music.pause()
        self._paused = True

    def is_paused(self) -> bool:
        return self._paused

    def seek(self, to: float) -> None:
        """
        Repositions to an absolute offset in seconds.

        SDL_mixer treats an MP3 `set_pos` as relative to the current position,
        so the stream is rewound first. Other codecs already seek absolutely.

        Raises:
            SeekError: The codec or backend does not support repositioning.
        """
        try:
            self._mixer.music.rewind()
            self._mixer.music.set_pos(to)
        except pygame.error as e:
            raise SeekError(f"Seek to {to:.1f}s failed: {e}") from e
        log.debug(f"Engine seeked to {to:.1f}s")

    def is_finished(self) -> bool:
        """True once playback was started and the mixer has nothing left to play."""
        if not self._started or self._paused:
            return False
        return not self._mixer.music.get_busy()

    def close(self) -> None:
        """Stops playback and releases the output device."""
        if self._closed:
            return
        self._closed = True
        if self._mixer.get_init():
            self._mixer.music.stop()
            self._mixer.music.unload()
            self._mixer.quit()


def check_output_device(mixer=None) -> str | None:
    """Opens and closes the output device once; returns the error text, if any."""
    mixer = mixer if mixer is not None else pygame.mixer
    try:
        mixer.init()
    except pygame.error as e:
        return str(e)
    mixer.quit()
    return None
