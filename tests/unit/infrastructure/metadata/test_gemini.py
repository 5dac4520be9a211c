"""Unit tests for GeminiMetadataProvider adapter."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from viralgrowth.domain.shared.error import MetadataFetchError
from viralgrowth.domain.upload.model.value import GroundingSource, VideoFormat
from viralgrowth.infrastructure.metadata.gemini import GeminiMetadataProvider


def _body(text: str, chunks: list | None = None) -> dict:
    candidate: dict = {"content": {"parts": [{"text": text}]}}
    if chunks is not None:
        candidate["groundingMetadata"] = {"groundingChunks": chunks}
    return {"candidates": [candidate]}


def _client_returning(body: dict) -> AsyncMock:
    response = MagicMock(spec=httpx.Response)
    response.json.return_value = body
    response.raise_for_status = MagicMock()
    client = AsyncMock(spec=httpx.AsyncClient)
    client.post.return_value = response
    return client


ANSWER = json.dumps(
    {
        "title": "Robots learned to cook",
        "description": "Kitchen robots went viral this week.",
        "trendTopic": "Kitchen robots",
    }
)


class TestGeminiMetadataProvider:
    @pytest.mark.asyncio
    async def test_parses_answer_and_grounding_sources(self):
        client = _client_returning(
            _body(
                ANSWER,
                chunks=[
                    {"web": {"uri": "https://news.example.com/a", "title": "News A"}},
                    {"web": {"uri": "https://news.example.com/b"}},
                    {"retrievedContext": {}},
                ],
            )
        )
        provider = GeminiMetadataProvider(client=client, api_key="secret")

        data = await provider.fetch_trend_and_metadata("Cooking", "calm", VideoFormat.SHORTS)

        assert data.title == "Robots learned to cook"
        assert data.trend_topic == "Kitchen robots"
        assert data.sources == [
            GroundingSource(title="News A", uri="https://news.example.com/a"),
            GroundingSource(title="https://news.example.com/b", uri="https://news.example.com/b"),
        ]

    @pytest.mark.asyncio
    async def test_posts_grounded_request(self):
        client = _client_returning(_body(ANSWER))
        provider = GeminiMetadataProvider(
            client=client, api_key="secret", model="m-1", base_url="https://api.example.com/v1/"
        )

        await provider.fetch_trend_and_metadata("Cooking", "calm", VideoFormat.LONG)

        client.post.assert_called_once()
        args, kwargs = client.post.call_args
        assert args[0] == "https://api.example.com/v1/models/m-1:generateContent"
        assert kwargs["headers"] == {"x-goog-api-key": "secret"}
        assert kwargs["json"]["tools"] == [{"google_search": {}}]
        prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
        assert "Cooking" in prompt
        assert "calm" in prompt
        assert "long-form" in prompt

    @pytest.mark.asyncio
    async def test_accepts_fenced_json(self):
        client = _client_returning(_body(f"```json\n{ANSWER}\n```"))
        provider = GeminiMetadataProvider(client=client, api_key="secret")

        data = await provider.fetch_trend_and_metadata("Cooking", "calm", VideoFormat.SHORTS)

        assert data.title == "Robots learned to cook"
        assert data.sources == []

    @pytest.mark.asyncio
    async def test_http_error_becomes_fetch_error(self):
        response = MagicMock(spec=httpx.Response)
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Too Many Requests",
            request=MagicMock(),
            response=MagicMock(status_code=429),
        )
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.return_value = response
        provider = GeminiMetadataProvider(client=client, api_key="secret")

        with pytest.raises(MetadataFetchError, match="request failed"):
            await provider.fetch_trend_and_metadata("Cooking", "calm", VideoFormat.SHORTS)

    @pytest.mark.asyncio
    async def test_transport_error_becomes_fetch_error(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.side_effect = httpx.ConnectError("connection refused")
        provider = GeminiMetadataProvider(client=client, api_key="secret")

        with pytest.raises(MetadataFetchError):
            await provider.fetch_trend_and_metadata("Cooking", "calm", VideoFormat.SHORTS)

    @pytest.mark.asyncio
    async def test_invalid_json_body(self):
        response = MagicMock(spec=httpx.Response)
        response.raise_for_status = MagicMock()
        response.json.side_effect = ValueError("Invalid JSON")
        client = AsyncMock(spec=httpx.AsyncClient)
        client.post.return_value = response
        provider = GeminiMetadataProvider(client=client, api_key="secret")

        with pytest.raises(MetadataFetchError, match="invalid JSON"):
            await provider.fetch_trend_and_metadata("Cooking", "calm", VideoFormat.SHORTS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"candidates": []},
            _body("not json at all"),
            _body(json.dumps({"title": "only a title"})),
        ],
    )
    async def test_unusable_answers_become_fetch_errors(self, body):
        provider = GeminiMetadataProvider(client=_client_returning(body), api_key="secret")

        with pytest.raises(MetadataFetchError):
            await provider.fetch_trend_and_metadata("Cooking", "calm", VideoFormat.SHORTS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("parts", [["oops"], [None], "text"])
    async def test_malformed_parts_become_fetch_errors(self, parts):
        body = {"candidates": [{"content": {"parts": parts}}]}
        provider = GeminiMetadataProvider(client=_client_returning(body), api_key="secret")

        with pytest.raises(MetadataFetchError, match="response shape"):
            await provider.fetch_trend_and_metadata("Cooking", "calm", VideoFormat.SHORTS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "grounding",
        [
            {"groundingChunks": ["oops", None, {"web": "x"}, {"web": {"uri": 7}}]},
            {"groundingChunks": "oops"},
            ["oops"],
        ],
    )
    async def test_malformed_grounding_is_skipped(self, grounding):
        body = _body(ANSWER)
        body["candidates"][0]["groundingMetadata"] = grounding
        provider = GeminiMetadataProvider(client=_client_returning(body), api_key="secret")

        data = await provider.fetch_trend_and_metadata("Cooking", "calm", VideoFormat.SHORTS)

        assert data.title == "Robots learned to cook"
        assert data.sources == []
