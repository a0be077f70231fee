"""
Pydantic models for application configuration and the podcast catalog.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, RootModel, field_validator, model_validator

DEFAULT_API_URL = "https://api.ardaudiothek.de/graphql"


class AppConfig(BaseModel):
    """A validated configuration model for the application."""

    api_url: str = DEFAULT_API_URL
    request_timeout: float = 30.0
    podcasts_file: str = ""

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Ensures the API endpoint is an HTTP(S) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("API URL must start with http:// or https://.")
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensures a reasonable request timeout."""
        if v < 1 or v > 300:
            raise ValueError("Request timeout must be between 1 and 300 seconds.")
        return v


class Podcast(BaseModel):
    """A show entry: the user-facing key and the Audiothek programme-set ID."""

    key: str = Field(min_length=1)
    id: str = Field(min_length=1)

    class Config:
        str_strip_whitespace = True


class PodcastCatalog(RootModel[list[Podcast]]):
    """The ordered list of configured shows, as stored in podcasts.json."""

    @model_validator(mode="after")
    def validate_unique_keys(self) -> "PodcastCatalog":
        """Rejects catalogs where two shows share the same key."""
        seen: set[str] = set()
        for podcast in self.root:
            if podcast.key in seen:
                raise ValueError(f"Duplicate podcast key: '{podcast.key}'")
            seen.add(podcast.key)
        return self

    def __iter__(self):
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> Podcast:
        return self.root[index]

    @property
    def keys(self) -> list[str]:
        return [p.key for p in self.root]

    def find(self, key: str) -> Podcast | None:
        """Returns the show with the given key, or None."""
        return next((p for p in self.root if p.key == key), None)
