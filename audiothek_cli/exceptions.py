"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class AudiothekCliError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(AudiothekCliError):
    """Raised for issues related to configuration or podcast catalog loading."""


class UnknownPodcastError(AudiothekCliError):
    """Raised when a show key is not present in the podcast catalog."""


class ApiError(AudiothekCliError):
    """Raised when the Audiothek API rejects a request or returns malformed data."""


class EpisodeNotFoundError(AudiothekCliError):
    """Raised when a show has no published episode or the episode has no audio."""


class EngineInitError(AudiothekCliError):
    """
    Raised when no audio output device is available or the stream cannot be decoded.
    """


class SeekError(AudiothekCliError):
    """Raised when the audio engine cannot reposition the current stream."""


class TerminalModeError(AudiothekCliError):
    """Raised when the terminal input mode cannot be switched or restored."""
