"""
Async client for the ARD Audiothek GraphQL API and the episode audio download.
"""

import asyncio
import json
import logging
import time
from collections.abc import Callable
from typing import Any

import aiohttp
from pydantic import ValidationError

from audiothek_cli.exceptions import ApiError, EpisodeNotFoundError
from audiothek_cli.models.config import DEFAULT_API_URL
from audiothek_cli.models.episode import Episode, GraphQLResponse

log = logging.getLogger(__name__)

LATEST_EPISODE_QUERY = """
query ProgramSetEpisodesQuery($id: ID!, $offset: Int!, $count: Int!) {
  result: programSet(id: $id) {
    items(offset: $offset, first: $count, filter: { isPublished: { equalTo: true } }) {
      nodes { title, duration, audios { url } }
    }
  }
}
"""

DOWNLOAD_CHUNK_SIZE = 131072  # 128 KB


class AudiothekAPIClient:
    """
    Async client for the Audiothek GraphQL endpoint.

    A single aiohttp session is created lazily and reused for the metadata
    request and the audio download. Failures are raised once; there is no
    retry policy.
    """

    def __init__(self, api_url: str = DEFAULT_API_URL, timeout: float = 30.0):
        """
        Initializes the API client.

        Args:
            api_url: The GraphQL endpoint.
            timeout: Total timeout in seconds for the metadata request.
        """
        self.api_url = api_url
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "AudiothekAPIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "User-Agent": "audiothek-cli",
                    "Accept-Encoding": "gzip, deflate, br",
                },
                timeout=aiohttp.ClientTimeout(
                    total=None, sock_connect=15, sock_read=self.timeout
                ),
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    @staticmethod
    def build_query_params(show_id: str) -> dict[str, str]:
        """Builds the GET parameters for the latest-episode query."""
        variables = {"id": show_id, "offset": 0, "count": 1}
        return {
            "query": LATEST_EPISODE_QUERY.strip(),
            "variables": json.dumps(variables, separators=(",", ":")),
        }

    async def graphql_call(self, params: dict[str, str]) -> dict[str, Any]:
        """Performs a GraphQL GET request and returns the decoded JSON body."""
        session = await self._initialize_session()
        start_time = time.monotonic()
        try:
            async with session.get(
                self.api_url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as r:
                duration_ms = (time.monotonic() - start_time) * 1000
                log.debug(f"GraphQL request answered {r.status} in {duration_ms:.0f}ms")
                if r.status >= 400:
                    raise ApiError(f"API request failed with status: {r.status}")
                try:
                    return await r.json(content_type=None)
                except (json.JSONDecodeError, aiohttp.ContentTypeError) as e:
                    raise ApiError(f"Failed to parse JSON: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ApiError(f"API request failed: {e}") from e

    @staticmethod
    def parse_latest_episode(payload: dict[str, Any]) -> Episode:
        """
        Extracts the first episode and its first audio source from a response.

        Raises:
            ApiError: If the payload does not match the expected shape or
            carries GraphQL errors.
            EpisodeNotFoundError: If there is no episode or no audio source.
        """
        try:
            response = GraphQLResponse.model_validate(payload)
        except ValidationError as e:
            raise ApiError(f"Unexpected API response: {e}") from e

        if response.errors:
            messages = "; ".join(str(err.get("message", err)) for err in response.errors)
            raise ApiError(f"API returned errors: {messages}")

        result = response.data.result if response.data else None
        if result is None or not result.items.nodes:
            raise EpisodeNotFoundError("No episode found in API response")

        node = result.items.nodes[0]
        if not node.audios:
            raise EpisodeNotFoundError("Episode has no audio sources")

        duration = node.duration if node.duration and node.duration > 0 else None
        return Episode(title=node.title, audio_url=node.audios[0].url, duration=duration)

    async def fetch_latest_episode(self, show_id: str) -> Episode:
        """Fetches the latest published episode of a programme set."""
        payload = await self.graphql_call(self.build_query_params(show_id))
        episode = self.parse_latest_episode(payload)
        log.debug(f"Latest episode for '{show_id}': {episode.audio_url}")
        return episode

    async def download_audio(
        self,
        url: str,
        on_progress: Callable[[int, int | None], None] | None = None,
    ) -> bytes:
        """
        Downloads the full audio asset into memory.

        Args:
            url: The audio URL.
            on_progress: Called after every chunk with (bytes_so_far, total_bytes);
                total is None when the server sends no Content-Length.
        """
        session = await self._initialize_session()
        buffer = bytearray()
        try:
            async with session.get(url, allow_redirects=True) as response:
                if response.status >= 400:
                    raise ApiError(f"Audio download failed with status: {response.status}")
                total = response.content_length
                async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                    buffer.extend(chunk)
                    if on_progress:
                        on_progress(len(buffer), total)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ApiError(f"Audio download failed: {e}") from e

        log.debug(f"Downloaded {len(buffer)} bytes from '{url}'")
        return bytes(buffer)
