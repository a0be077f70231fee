import asyncio
import json

import pytest

from audiothek_cli.api.client import LATEST_EPISODE_QUERY, AudiothekAPIClient
from audiothek_cli.exceptions import ApiError, EpisodeNotFoundError
from audiothek_cli.models.episode import Episode


def payload(nodes):
    return {"data": {"result": {"items": {"nodes": nodes}}}}


def test_build_query_params():
    params = AudiothekAPIClient.build_query_params("10777871")
    assert params["query"] == LATEST_EPISODE_QUERY.strip()
    assert json.loads(params["variables"]) == {"id": "10777871", "offset": 0, "count": 1}


def test_parse_latest_episode():
    episode = AudiothekAPIClient.parse_latest_episode(
        payload(
            [
                {
                    "title": "Folge 12",
                    "duration": 1830,
                    "audios": [{"url": "https://cdn.example.org/a/folge-12.mp3"}],
                }
            ]
        )
    )
    assert episode == Episode(
        title="Folge 12",
        audio_url="https://cdn.example.org/a/folge-12.mp3",
        duration=1830.0,
    )
    assert episode.format_hint == "mp3"


def test_parse_without_duration():
    episode = AudiothekAPIClient.parse_latest_episode(
        payload([{"title": "x", "duration": 0, "audios": [{"url": "https://h/a"}]}])
    )
    assert episode.duration is None
    assert episode.format_hint is None


@pytest.mark.parametrize(
    "body",
    [
        {"data": None},
        {"data": {"result": None}},
        payload([]),
        payload([{"title": "no audio", "audios": []}]),
    ],
)
def test_parse_missing_episode(body):
    with pytest.raises(EpisodeNotFoundError):
        AudiothekAPIClient.parse_latest_episode(body)


@pytest.mark.parametrize(
    "body",
    [
        {"errors": [{"message": "Cannot query field"}]},
        {"data": {"result": {"items": "nope"}}},
    ],
)
def test_parse_rejects_bad_payload(body):
    with pytest.raises(ApiError):
        AudiothekAPIClient.parse_latest_episode(body)


def test_fetch_latest_episode_uses_show_id(monkeypatch):
    client = AudiothekAPIClient("https://api.example.org/graphql")
    seen = {}

    async def fake_call(params):
        seen.update(params)
        return payload([{"title": "t", "audios": [{"url": "https://h/e.m4a?x=1"}]}])

    monkeypatch.setattr(client, "graphql_call", fake_call)
    episode = asyncio.run(client.fetch_latest_episode("42"))
    assert json.loads(seen["variables"])["id"] == "42"
    assert episode.format_hint == "m4a"
