"""
Audiothek API Layer.

This package handles all communication with the ARD Audiothek GraphQL API and
the download of episode audio.
"""

from .client import AudiothekAPIClient

__all__ = ["AudiothekAPIClient"]
