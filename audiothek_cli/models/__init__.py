"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application, such as configuration and episode metadata.
"""

from .config import AppConfig, Podcast, PodcastCatalog
from .episode import Episode

__all__ = ["AppConfig", "Episode", "Podcast", "PodcastCatalog"]
