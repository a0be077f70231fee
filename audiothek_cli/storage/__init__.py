"""
Storage Layer.

This package handles reading the application's configuration file and the
podcast catalog.
"""

from .catalog import load_podcasts
from .config_manager import ConfigManager

__all__ = ["ConfigManager", "load_podcasts"]
