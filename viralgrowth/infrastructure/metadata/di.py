"""DI provider for metadata provider adapters."""

from typing import AsyncIterator, NewType

import httpx
from dishka import Provider, provide

from viralgrowth.config import Config
from viralgrowth.domain.shared.error import ConfigurationError
from viralgrowth.domain.upload.port.metadata_provider import MetadataProvider
from viralgrowth.infrastructure.metadata.gemini import GeminiMetadataProvider
from viralgrowth.infrastructure.metadata.synthetic import SyntheticMetadataProvider
from viralgrowth.util.di.scope import Scope

MetadataHttpClient = NewType("MetadataHttpClient", httpx.AsyncClient)


class MetadataProviderProvider(Provider):
    """Selects the metadata provider named by `metadata.provider`."""

    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Config) -> AsyncIterator[MetadataHttpClient]:
        """HTTP client for remote providers, closed with the container."""
        async with httpx.AsyncClient(timeout=config.metadata.timeout) as client:
            yield MetadataHttpClient(client)

    @provide(scope=Scope.APP)
    def get_metadata_provider(
        self, config: Config, client: MetadataHttpClient
    ) -> MetadataProvider:
        settings = config.metadata
        if settings.provider == "gemini":
            if not settings.api_key:
                raise ConfigurationError(
                    "metadata.api_key is required for the gemini provider "
                    "(set VG_METADATA__API_KEY)"
                )
            return GeminiMetadataProvider(
                client=client,
                api_key=settings.api_key,
                model=settings.model,
                base_url=settings.base_url,
            )
        return SyntheticMetadataProvider(latency=settings.latency)
