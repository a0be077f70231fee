"""
JSON Schema validation for the podcast catalog.
Allows external tools to validate catalogs and provides better error messages.
"""

import json
from pathlib import Path
from typing import Any

from jsonschema import Draft7Validator

PODCASTS_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Audiothek Quickplay Podcast Catalog",
    "description": "Shows selectable in audiothek-cli",
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "key": {
                "type": "string",
                "minLength": 1,
                "description": "Name used to select the show",
            },
            "id": {
                "type": "string",
                "minLength": 1,
                "description": "ARD Audiothek programme set ID",
            },
        },
        "required": ["key", "id"],
        "additionalProperties": False,
    },
}


def validate_podcasts_schema(catalog: Any) -> tuple[bool, list[str]]:
    """
    Validate a decoded podcast catalog against the JSON schema.

    Duplicate keys are reported as well, since JSON Schema cannot express
    uniqueness of a single property.

    Returns:
        Tuple of (is_valid, error_messages)
    """
    validator = Draft7Validator(PODCASTS_SCHEMA)
    errors = sorted(validator.iter_errors(catalog), key=lambda e: list(e.path))

    error_messages = []
    for error in errors:
        path = ".".join(str(p) for p in error.path) if error.path else "root"
        error_messages.append(f"{path}: {error.message}")

    if isinstance(catalog, list):
        seen: set[str] = set()
        for i, entry in enumerate(catalog):
            key = entry.get("key") if isinstance(entry, dict) else None
            if not isinstance(key, str):
                continue
            if key in seen:
                error_messages.append(f"{i}.key: duplicate key '{key}'")
            seen.add(key)

    return not error_messages, error_messages


def export_schema(output_path: Path) -> None:
    """
    Export JSON schema to file for external validation tools.

    Args:
        output_path: Path to save schema file
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(PODCASTS_SCHEMA, f, indent=2)
