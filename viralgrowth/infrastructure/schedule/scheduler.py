"""UploadScheduler - single-flight periodic and manual run triggering."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from viralgrowth.domain.channel.gate import ConnectionGate
from viralgrowth.domain.channel.model.value import ConnectionState
from viralgrowth.domain.shared.error import ConflictError
from viralgrowth.domain.upload.model.record import RecordId, UploadRecord
from viralgrowth.domain.upload.model.value import RunSettings, UploadStatus, VideoFormat
from viralgrowth.domain.upload.port.record_store import RecordStore
from viralgrowth.domain.upload.service.pipeline import PipelineEngine
from viralgrowth.infrastructure.schedule.countdown import CountdownClock

logger = logging.getLogger(__name__)


@dataclass
class SchedulerState:
    """Runtime counters for the scheduler (not persisted).

    Attributes:
        runs_started: Runs that passed the single-flight guard.
        runs_uploaded: Runs that ended as uploaded.
        runs_failed: Runs that ended as failed.
        triggers_dropped: Triggers ignored because a run was in flight.
        last_fire_at: When the periodic timer (or a manual trigger) last fired.
    """

    runs_started: int = 0
    runs_uploaded: int = 0
    runs_failed: int = 0
    triggers_dropped: int = 0
    last_fire_at: datetime | None = None


class UploadScheduler:
    """Funnels periodic and manual triggers into the pipeline, one run at a time.

    The `busy` guard is checked and set in one synchronous step on the event
    loop, so two fires can never both observe it as free. A trigger that
    arrives while a run is in flight is dropped, not queued.

    Turning auto-mode off or losing the connection disarms the timer and
    stops the countdown, but an in-flight run always completes and only then
    releases the guard.

    Arming the timer creates asyncio tasks, so `set_auto_active()` and the
    gate transitions that re-arm it must happen on a running event loop.

    Example:
        scheduler = UploadScheduler(gate, store, engine, clock)
        scheduler.set_auto_active(True)   # fires now if connected, then every period
        scheduler.trigger_manually()      # no-op while busy or disconnected
    """

    def __init__(
        self,
        gate: ConnectionGate,
        store: RecordStore,
        engine: PipelineEngine,
        clock: CountdownClock,
        settings: RunSettings | None = None,
    ) -> None:
        self._gate = gate
        self._store = store
        self._engine = engine
        self._clock = clock
        self._settings = settings or RunSettings()
        self._period = clock.period * clock.tick_interval

        self._auto_active = False
        self._busy = False
        self._timer: asyncio.Task | None = None
        self._run: asyncio.Task | None = None
        self._state = SchedulerState()

        gate.subscribe(self._on_gate_change)

    @property
    def auto_active(self) -> bool:
        return self._auto_active

    @property
    def busy(self) -> bool:
        """True while a run is in flight (the single-flight guard)."""
        return self._busy

    @property
    def armed(self) -> bool:
        """True while the periodic timer is scheduled."""
        return self._timer is not None

    @property
    def period(self) -> float:
        """Seconds between periodic fires."""
        return self._period

    @property
    def settings(self) -> RunSettings:
        return self._settings

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def current_run(self) -> asyncio.Task | None:
        """Task driving the in-flight run, if any."""
        return self._run

    def configure(
        self,
        *,
        niche: str | None = None,
        tone: str | None = None,
        format: VideoFormat | None = None,
    ) -> RunSettings:
        """Change the inputs used by future runs; the in-flight run keeps its own."""
        changes = {
            key: value
            for key, value in (("niche", niche), ("tone", tone), ("format", format))
            if value is not None
        }
        self._settings = RunSettings(**{**self._settings.model_dump(), **changes})
        logger.info(
            f"Run settings: niche={self._settings.niche!r}, tone={self._settings.tone!r}, "
            f"format={self._settings.format}"
        )
        return self._settings

    def set_auto_active(self, active: bool) -> None:
        """Enable or disable periodic runs.

        Enabling while connected fires once immediately and arms the timer.
        Enabling while disconnected is remembered and takes effect on connect.
        """
        self._auto_active = active
        logger.info(f"Auto mode {'enabled' if active else 'disabled'}")
        self._reevaluate()

    def trigger(self) -> UploadRecord | None:
        """Start a run unless one is already in flight.

        Returns:
            Snapshot of the new pending record, or None if the trigger was dropped.
        """
        if not self._gate.is_connected:
            logger.debug("Trigger ignored: channel not connected")
            return None
        if self._busy:
            self._state.triggers_dropped += 1
            logger.info("Run in flight, dropping trigger")
            return None

        self._busy = True
        settings = self._settings
        record = UploadRecord.create(settings.format)
        try:
            self._store.insert(record)
        except ConflictError as e:
            self._busy = False
            logger.error(f"Refusing to start run: {e}")
            return None

        self._state.runs_started += 1
        self._run = asyncio.create_task(
            self._execute(record.id, settings), name=f"upload-run-{record.id.hex[:8]}"
        )
        logger.info(f"Run started for record {record.id} ({settings.format})")
        return self._store.get(record.id)

    def trigger_manually(self) -> UploadRecord | None:
        """Manual override; no-op while busy or not connected.

        A manual run restarts the periodic timer and the countdown so the
        displayed countdown keeps matching the next periodic fire.
        """
        if self._busy or not self._gate.is_connected:
            logger.info("Manual trigger ignored (busy or not connected)")
            return None
        record = self.trigger()
        if record is not None:
            self._state.last_fire_at = datetime.now(UTC)
            if self.armed:
                self._disarm_timer()
                # Restart the tick task too so ticks line up with the new timer
                self._clock.stop()
                self._clock.start()
                self._timer = asyncio.create_task(
                    self._run_timer(), name="upload-scheduler-timer"
                )
        return record

    async def wait_idle(self) -> None:
        """Wait until the in-flight run (if any) has released the guard.

        The run is shielded: cancelling the waiter does not abort the run.
        """
        run = self._run
        if run is not None and not run.done():
            await asyncio.shield(run)

    async def shutdown(self, timeout: float = 30.0) -> None:
        """Disable auto-mode and let the in-flight run finish.

        Args:
            timeout: Seconds to wait for the in-flight run before cancelling it.
        """
        self._auto_active = False
        self._reevaluate()
        run = self._run
        if run is None or run.done():
            return
        done, _ = await asyncio.wait([run], timeout=timeout)
        if not done:
            logger.warning(f"In-flight run did not finish within {timeout}s, cancelling")
            run.cancel()
            try:
                await run
            except asyncio.CancelledError:
                pass

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _on_gate_change(self, previous: ConnectionState, current: ConnectionState) -> None:
        if previous == ConnectionState.CONNECTED and current == ConnectionState.DISCONNECTED:
            if self._auto_active:
                self._auto_active = False
                logger.info("Auto mode disabled by disconnect")
        self._reevaluate()

    def _reevaluate(self) -> None:
        should_run = self._auto_active and self._gate.is_connected
        if should_run and self._timer is None:
            self._clock.start()
            self._fire()
            self._timer = asyncio.create_task(self._run_timer(), name="upload-scheduler-timer")
            logger.debug(f"Scheduler armed (period={self._period}s)")
        elif not should_run:
            if self._timer is not None:
                self._disarm_timer()
                logger.debug("Scheduler disarmed")
            self._clock.stop()

    def _disarm_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        self._state.last_fire_at = datetime.now(UTC)
        self._clock.reset()
        self.trigger()

    async def _run_timer(self) -> None:
        """Fire every period; the first fire happens one period after arming."""
        try:
            while True:
                await asyncio.sleep(self._period)
                self._fire()
        except asyncio.CancelledError:
            logger.debug("Scheduler timer cancelled")
            raise

    async def _execute(self, record_id: RecordId, settings: RunSettings) -> None:
        try:
            status = await self._engine.run(record_id, settings.niche, settings.tone)
            if status == UploadStatus.UPLOADED:
                self._state.runs_uploaded += 1
            else:
                self._state.runs_failed += 1
            logger.info(f"Run for record {record_id} finished: {status}")
        except asyncio.CancelledError:
            self._state.runs_failed += 1
            logger.info(f"Run for record {record_id} cancelled")
            raise
        except Exception as e:
            self._state.runs_failed += 1
            logger.exception(f"Run for record {record_id} crashed: {e}")
        finally:
            self._busy = False
