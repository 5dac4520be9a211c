"""MetadataProvider port: external source of trend, title and description data."""

from typing import Protocol

from viralgrowth.domain.upload.model.value import GrowthData, VideoFormat


class MetadataProvider(Protocol):
    """Produces growth metadata for one pipeline run.

    Latency is provider-defined. Implementations raise MetadataFetchError on
    failure; the pipeline engine treats any exception as a failed fetch.
    """

    async def fetch_trend_and_metadata(
        self, niche: str, tone: str, format: VideoFormat
    ) -> GrowthData: ...
