"""Offline adapter for the MetadataProvider port."""

import asyncio
import random

from viralgrowth.domain.shared.error import MetadataFetchError
from viralgrowth.domain.upload.model.value import GroundingSource, GrowthData, VideoFormat
from viralgrowth.domain.upload.port.metadata_provider import MetadataProvider

_TREND_ANGLES = [
    "breakthrough everyone missed",
    "hidden cost nobody talks about",
    "tool that changed the game this week",
    "myth that finally got debunked",
    "prediction for the next 12 months",
]

_HOOKS = {
    "energetic": "You won't believe this",
    "calm": "A closer look at",
    "educational": "Explained in minutes:",
    "humorous": "Okay, this is ridiculous:",
}

_FORMAT_TAGS = {
    VideoFormat.SHORTS: "#shorts",
    VideoFormat.LONG: "Full breakdown inside.",
}


class SyntheticMetadataProvider(MetadataProvider):
    """Builds plausible growth metadata locally after a simulated latency.

    Args:
        latency: Seconds to wait before answering.
        failure_rate: Probability in [0, 1] that a call raises MetadataFetchError.
        rng: Random source, injectable for reproducible output.
    """

    def __init__(
        self,
        latency: float = 1.0,
        failure_rate: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be within [0, 1]")
        self._latency = latency
        self._failure_rate = failure_rate
        self._rng = rng or random.Random()

    async def fetch_trend_and_metadata(
        self, niche: str, tone: str, format: VideoFormat
    ) -> GrowthData:
        await asyncio.sleep(self._latency)
        if self._rng.random() < self._failure_rate:
            raise MetadataFetchError(f"Trend scan for {niche!r} returned no signal")

        angle = self._rng.choice(_TREND_ANGLES)
        hook = _HOOKS.get(tone.lower(), "Here's the latest on")
        trend_topic = f"{niche}: the {angle}"
        slug = niche.lower().replace(" ", "-")

        return GrowthData(
            title=f"{hook} {niche}'s {angle}",
            description=(
                f"A {tone} take on the {angle} in {niche}. {_FORMAT_TAGS[format]}"
            ),
            trend_topic=trend_topic,
            sources=[
                GroundingSource(
                    title=f"{niche} trend report",
                    uri=f"https://trends.example.com/{slug}",
                ),
            ],
        )
