"""
Pydantic models mirroring the Audiothek GraphQL response for the latest episode
of a programme set, plus the flattened Episode used by the rest of the app.
"""

from pydantic import BaseModel, Field


class AudioSource(BaseModel):
    url: str


class EpisodeNode(BaseModel):
    title: str
    duration: float | None = None
    audios: list[AudioSource] = Field(default_factory=list)


class EpisodeItems(BaseModel):
    nodes: list[EpisodeNode] = Field(default_factory=list)


class ProgramSetResult(BaseModel):
    items: EpisodeItems


class ResponseData(BaseModel):
    result: ProgramSetResult | None = None


class GraphQLResponse(BaseModel):
    """Top-level envelope; `errors` is populated when the query was rejected."""

    data: ResponseData | None = None
    errors: list[dict] = Field(default_factory=list)


class Episode(BaseModel):
    """A playable episode: its title, audio URL and optional length in seconds."""

    title: str
    audio_url: str
    duration: float | None = None

    @property
    def format_hint(self) -> str | None:
        """The file extension of the audio URL, used as a decoder hint."""
        path = self.audio_url.split("?", 1)[0].rsplit("/", 1)[-1]
        if "." not in path:
            return None
        return path.rsplit(".", 1)[-1].lower() or None
