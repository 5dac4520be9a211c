"""Once command - connect and perform a single manual run."""

import asyncio
import sys

import cyclopts

from viralgrowth.cli.console import get_console
from viralgrowth.cli.util.session import load_config, open_autopilot
from viralgrowth.config import Config
from viralgrowth.domain.shared.error import ChannelConnectionError, ConfigurationError
from viralgrowth.domain.upload.model.record import UploadRecord
from viralgrowth.domain.upload.model.value import UploadStatus, VideoFormat

app = cyclopts.App(name="once", help="Perform one manual upload run and print the result")


@app.default
def once(
    email: str,
    *,
    niche: str | None = None,
    tone: str | None = None,
    format: VideoFormat | None = None,
) -> None:
    """Connect the channel, trigger one run and wait for its terminal state.

    Args:
        email: Account e-mail used to connect the channel.
        niche: Content niche for the run.
        tone: Content tone for the run.
        format: Video format for the run.
    """
    console = get_console()
    config = load_config()

    try:
        record = asyncio.run(_once(config, email, niche, tone, format))
    except ChannelConnectionError as e:
        console.error(str(e), hint="Pass an e-mail address such as creator@example.com")
        sys.exit(1)
    except ConfigurationError as e:
        console.error(str(e))
        sys.exit(1)

    if record is None:
        console.error("Run could not be started")
        sys.exit(1)

    console.record_detail(record)
    if record.status == UploadStatus.FAILED:
        sys.exit(1)


async def _once(
    config: Config,
    email: str,
    niche: str | None,
    tone: str | None,
    format: VideoFormat | None,
) -> UploadRecord | None:
    console = get_console()
    async with open_autopilot(config) as autopilot:
        autopilot.configure(niche=niche, tone=tone, format=format)
        channel = await autopilot.connect(email)
        console.success(f"Connected to {channel.name} ({channel.handle})")

        started = autopilot.trigger_manually()
        if started is None:
            return None
        console.info(f"Run started for record {started.id}")
        await autopilot.wait_idle()

        for record in autopilot.snapshot().records:
            if record.id == started.id:
                return record
        return None
