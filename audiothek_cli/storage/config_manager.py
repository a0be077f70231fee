"""
Manages loading, validation, and saving of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from audiothek_cli.exceptions import ConfigurationError
from audiothek_cli.models.config import DEFAULT_API_URL, AppConfig

log = logging.getLogger(__name__)

DEFAULT_PODCASTS_FILENAME = "podcasts.json"


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser()

    def load_config(self, cli_options: dict[str, Any] | None = None) -> AppConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        A missing config file is not an error: every setting has a default.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated AppConfig object.

        Raises:
            ConfigurationError: If the config file is unreadable or validation fails.
        """
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(
                    f"Error parsing configuration file: {e}"
                ) from e
        else:
            log.debug(f"No config file at '{self.config_file_path}', using defaults.")

        try:
            config_from_file = self._get_config_as_dict()
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e

        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return AppConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def podcasts_path(self, config: AppConfig) -> Path:
        """Resolves the podcast catalog location for a loaded configuration."""
        if config.podcasts_file:
            return Path(config.podcasts_file).expanduser()
        return Path(config.config_path) / DEFAULT_PODCASTS_FILENAME

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        return {
            "api_url": section.get("api_url", DEFAULT_API_URL),
            "request_timeout": section.getfloat("request_timeout", 30.0),
            "podcasts_file": section.get("podcasts_file", ""),
        }
