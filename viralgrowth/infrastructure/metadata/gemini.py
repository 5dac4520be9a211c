"""HTTP adapter for the MetadataProvider port backed by the Gemini REST API."""

import json
import logging
from typing import Any

import httpx
import pydantic

from viralgrowth.domain.shared.error import MetadataFetchError
from viralgrowth.domain.upload.model.value import GroundingSource, GrowthData, VideoFormat
from viralgrowth.domain.upload.port.metadata_provider import MetadataProvider

logger = logging.getLogger(__name__)

_PROMPT = """\
Find one currently trending topic in the niche "{niche}" using Google Search.
Write YouTube metadata for a {format_label} video about it in a {tone} tone.
Answer with a single JSON object and nothing else, using exactly these keys:
"title" (under 70 characters), "description" (2-3 sentences), "trendTopic".
"""

_FORMAT_LABELS = {
    VideoFormat.SHORTS: "vertical YouTube Shorts (under 60 seconds)",
    VideoFormat.LONG: "long-form (8-12 minutes)",
}


class _GeminiAnswer(pydantic.BaseModel):
    title: str
    description: str
    trend_topic: str = pydantic.Field(alias="trendTopic")


class GeminiMetadataProvider(MetadataProvider):
    """Asks Gemini, grounded on Google Search, for trend-driven video metadata."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")

    async def fetch_trend_and_metadata(
        self, niche: str, tone: str, format: VideoFormat
    ) -> GrowthData:
        prompt = _PROMPT.format(niche=niche, tone=tone, format_label=_FORMAT_LABELS[format])
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "tools": [{"google_search": {}}],
        }
        url = f"{self._base_url}/models/{self._model}:generateContent"

        try:
            response = await self._client.post(
                url, json=payload, headers={"x-goog-api-key": self._api_key}
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise MetadataFetchError(f"Gemini request failed: {e}") from e
        except ValueError as e:
            raise MetadataFetchError(f"Gemini returned invalid JSON: {e}") from e

        return _parse_response(body)


def _parse_response(body: dict[str, Any]) -> GrowthData:
    """Extract GrowthData from a generateContent response body."""
    try:
        candidate = body["candidates"][0]
        parts = candidate["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise MetadataFetchError(f"Unexpected Gemini response shape: {e}") from e

    try:
        answer = _GeminiAnswer.model_validate(json.loads(_strip_fences(text)))
    except (ValueError, pydantic.ValidationError) as e:
        raise MetadataFetchError(f"Could not read metadata from Gemini answer: {e}") from e

    sources = _grounding_sources(candidate)

    logger.debug(f"Gemini answer: {answer.title!r} ({len(sources)} sources)")
    return GrowthData(
        title=answer.title,
        description=answer.description,
        trend_topic=answer.trend_topic,
        sources=sources,
    )


def _grounding_sources(candidate: dict[str, Any]) -> list[GroundingSource]:
    """Collect web sources from grounding metadata, skipping malformed chunks."""
    metadata = candidate.get("groundingMetadata")
    chunks = metadata.get("groundingChunks") if isinstance(metadata, dict) else None
    if not isinstance(chunks, list):
        return []

    sources = []
    for chunk in chunks:
        web = chunk.get("web") if isinstance(chunk, dict) else None
        if not isinstance(web, dict):
            continue
        uri, title = web.get("uri"), web.get("title")
        if not isinstance(uri, str) or not uri:
            continue
        if not isinstance(title, str) or not title:
            title = uri
        sources.append(GroundingSource(title=title, uri=uri))
    return sources


def _strip_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence if the model added one."""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    return stripped.strip()
