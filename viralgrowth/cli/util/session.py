"""Shared startup for CLI commands that drive an in-process autopilot."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from viralgrowth.application.autopilot import Autopilot
from viralgrowth.application.di import create_container
from viralgrowth.config import Config, configure_logging, configure_observability


def load_config() -> Config:
    """Load config from env/.env/YAML and set up logging and logfire."""
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)
    configure_observability()
    return config


@asynccontextmanager
async def open_autopilot(config: Config) -> AsyncIterator[Autopilot]:
    """Yield a wired Autopilot; stops it and closes the container on exit."""
    container = create_container(config)
    try:
        autopilot = await container.get(Autopilot)
        async with autopilot:
            yield autopilot
    finally:
        await container.close()
