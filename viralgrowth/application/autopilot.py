"""Autopilot - application facade over gate, scheduler, clock and store."""

import logging

from pydantic import BaseModel, ConfigDict
from typing_extensions import Self

from viralgrowth.domain.channel.gate import ConnectionGate
from viralgrowth.domain.channel.model.value import ChannelInfo, ConnectionState
from viralgrowth.domain.upload.model.record import UploadRecord
from viralgrowth.domain.upload.model.value import RunSettings, VideoFormat
from viralgrowth.domain.upload.port.record_store import RecordStore
from viralgrowth.infrastructure.schedule.countdown import CountdownClock
from viralgrowth.infrastructure.schedule.scheduler import UploadScheduler

logger = logging.getLogger(__name__)


class DashboardSnapshot(BaseModel):
    """Everything a presentation layer needs, captured at one instant."""

    model_config = ConfigDict(frozen=True)

    connection: ConnectionState
    channel: ChannelInfo | None
    auto_active: bool
    busy: bool
    countdown: int
    period: int
    settings: RunSettings
    records: tuple[UploadRecord, ...]


class Autopilot:
    """Single entry point for presentation layers.

    Reads go through snapshot(); every other method is a user intent
    forwarded to the owning component.

    Usage:
        async with Autopilot(gate, store, scheduler, clock) as autopilot:
            await autopilot.connect("creator@example.com")
            autopilot.set_auto_active(True)
            ...
        # timers stopped, in-flight run finished
    """

    def __init__(
        self,
        gate: ConnectionGate,
        store: RecordStore,
        scheduler: UploadScheduler,
        clock: CountdownClock,
    ) -> None:
        self._gate = gate
        self._store = store
        self._scheduler = scheduler
        self._clock = clock

    @property
    def gate(self) -> ConnectionGate:
        return self._gate

    @property
    def scheduler(self) -> UploadScheduler:
        return self._scheduler

    # -------------------------------------------------------------------------
    # Connection
    # -------------------------------------------------------------------------

    async def connect(self, credential: str) -> ChannelInfo:
        """Connect the channel; auto-mode enabled earlier starts on success."""
        return await self._gate.connect(credential)

    def abandon_connect(self) -> None:
        self._gate.abandon()

    def disconnect(self) -> None:
        """Disconnect; also turns auto-mode off. An in-flight run still completes."""
        self._gate.disconnect()

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def set_auto_active(self, active: bool) -> None:
        self._scheduler.set_auto_active(active)

    def toggle_auto(self) -> bool:
        """Flip auto-mode and return the new value."""
        self._scheduler.set_auto_active(not self._scheduler.auto_active)
        return self._scheduler.auto_active

    def trigger_manually(self) -> UploadRecord | None:
        return self._scheduler.trigger_manually()

    def configure(
        self,
        *,
        niche: str | None = None,
        tone: str | None = None,
        format: VideoFormat | None = None,
    ) -> RunSettings:
        return self._scheduler.configure(niche=niche, tone=tone, format=format)

    async def wait_idle(self) -> None:
        await self._scheduler.wait_idle()

    # -------------------------------------------------------------------------
    # Read surface
    # -------------------------------------------------------------------------

    def snapshot(self) -> DashboardSnapshot:
        return DashboardSnapshot(
            connection=self._gate.state,
            channel=self._gate.channel,
            auto_active=self._scheduler.auto_active,
            busy=self._scheduler.busy,
            countdown=self._clock.value,
            period=self._clock.period,
            settings=self._scheduler.settings,
            records=self._store.all(),
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def stop(self, timeout: float = 30.0) -> None:
        """Disarm timers and wait for the in-flight run to reach a terminal state."""
        self._gate.abandon()
        await self._scheduler.shutdown(timeout=timeout)
        logger.info("Autopilot stopped")

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.stop()
