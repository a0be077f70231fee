"""
Loads the podcast catalog (podcasts.json).
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from audiothek_cli.exceptions import ConfigurationError
from audiothek_cli.models.config import PodcastCatalog

log = logging.getLogger(__name__)


def load_podcasts(path: Path) -> PodcastCatalog:
    """
    Reads and validates the list of configured shows.

    Raises:
        ConfigurationError: If the file is missing, is not JSON, or does not
        describe a list of unique ``{"key", "id"}`` entries.
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Podcast catalog not found at '{path}'.") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to read podcast catalog '{path}': {e}") from e

    try:
        catalog = PodcastCatalog.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Podcast catalog '{path}' is invalid:\n{e}"
        ) from e

    log.debug(f"Loaded {len(catalog)} podcasts from '{path}'.")
    return catalog
