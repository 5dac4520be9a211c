"""Global test fixtures."""

import asyncio
import os

import pytest

from viralgrowth.domain.channel.model.value import ChannelInfo
from viralgrowth.domain.shared.error import ChannelConnectionError, MetadataFetchError
from viralgrowth.domain.upload.model.value import GroundingSource, GrowthData, VideoFormat

# Keep developer config files out of unit tests
os.environ.pop("VG_CONFIG_FILE", None)


class GatedMetadataProvider:
    """Metadata provider whose answers are released by the test.

    Each call waits on `release`; when `auto_release` is set, calls answer
    immediately. Queue outcomes with `fail_next()`.
    """

    def __init__(self, auto_release: bool = False) -> None:
        self.release = asyncio.Event()
        if auto_release:
            self.release.set()
        self.calls: list[tuple[str, str, VideoFormat]] = []
        self._failures: list[str] = []

    def fail_next(self, reason: str = "provider unavailable") -> None:
        self._failures.append(reason)

    async def fetch_trend_and_metadata(
        self, niche: str, tone: str, format: VideoFormat
    ) -> GrowthData:
        self.calls.append((niche, tone, format))
        await self.release.wait()
        if self._failures:
            raise MetadataFetchError(self._failures.pop(0))
        return GrowthData(
            title=f"{niche} is exploding",
            description=f"A {tone} look at {niche}.",
            trend_topic=f"{niche} trend",
            sources=[GroundingSource(title="Trend report", uri="https://example.com/trend")],
        )


class InstantConnectionProvider:
    """Connection provider that answers immediately (or fails on demand)."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.credentials: list[str] = []

    async def connect(self, credential: str) -> ChannelInfo:
        self.credentials.append(credential)
        await asyncio.sleep(0)
        if self.fail:
            raise ChannelConnectionError("channel rejected credential")
        return ChannelInfo(
            name="Creator Studio",
            handle="@creator",
            subscribers="42K",
            avatar="https://example.com/avatar.svg",
        )


@pytest.fixture
def metadata_provider() -> GatedMetadataProvider:
    return GatedMetadataProvider()


@pytest.fixture
def connection_provider() -> InstantConnectionProvider:
    return InstantConnectionProvider()
