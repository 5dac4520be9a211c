"""Run command - connect, enable auto-mode and show a live dashboard."""

import asyncio
import sys
from typing import Annotated

import cyclopts
from cyclopts import Parameter, validators
from rich.live import Live

from viralgrowth.application.autopilot import Autopilot
from viralgrowth.cli.console import get_console, render_dashboard
from viralgrowth.cli.util.session import load_config, open_autopilot
from viralgrowth.config import Config
from viralgrowth.domain.shared.error import ChannelConnectionError, ConfigurationError
from viralgrowth.domain.upload.model.value import VideoFormat

app = cyclopts.App(name="run", help="Run the upload autopilot with a live dashboard")


@app.default
def run(
    email: str,
    *,
    duration: float | None = None,
    niche: str | None = None,
    tone: str | None = None,
    format: VideoFormat | None = None,
    refresh: Annotated[float, Parameter(validator=validators.Number(gt=0))] = 0.5,
) -> None:
    """Connect the channel and publish on the configured period until stopped.

    Args:
        email: Account e-mail used to connect the channel.
        duration: Stop after this many seconds (default: run until Ctrl+C).
        niche: Content niche for new runs.
        tone: Content tone for new runs.
        format: Video format for new runs.
        refresh: Dashboard refresh interval in seconds.
    """
    console = get_console()
    config = load_config()

    try:
        asyncio.run(_run(config, email, duration, niche, tone, format, refresh))
    except KeyboardInterrupt:
        console.info("Interrupted, auto mode stopped")
    except ChannelConnectionError as e:
        console.error(str(e), hint="Pass an e-mail address such as creator@example.com")
        sys.exit(1)
    except ConfigurationError as e:
        console.error(str(e))
        sys.exit(1)


async def _run(
    config: Config,
    email: str,
    duration: float | None,
    niche: str | None,
    tone: str | None,
    format: VideoFormat | None,
    refresh: float,
) -> None:
    console = get_console()
    async with open_autopilot(config) as autopilot:
        autopilot.configure(niche=niche, tone=tone, format=format)

        console.info(f"Connecting as {email}...")
        channel = await autopilot.connect(email)
        console.success(f"Connected to {channel.name} ({channel.handle})")

        autopilot.set_auto_active(True)
        await _live_dashboard(autopilot, duration, refresh)

        if autopilot.scheduler.busy:
            console.info("Waiting for the in-flight run to finish...")


async def _live_dashboard(autopilot: Autopilot, duration: float | None, refresh: float) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + duration if duration is not None else None

    with Live(
        render_dashboard(autopilot.snapshot()),
        console=get_console().rich,
        refresh_per_second=max(1, int(1 / refresh)),
    ) as live:
        while deadline is None or loop.time() < deadline:
            await asyncio.sleep(refresh)
            live.update(render_dashboard(autopilot.snapshot()))
