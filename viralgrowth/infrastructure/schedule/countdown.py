"""CountdownClock - display countdown to the next periodic fire."""

import asyncio
import logging

logger = logging.getLogger(__name__)


class CountdownClock:
    """Value in [1, period] counting down once per tick interval.

    The scheduler calls reset() every time it fires. The clock also wraps back
    to `period` on its own when it would reach 0, so it stays aligned with the
    nominal timer even when a fire was dropped by the single-flight guard.
    While stopped the value stays at `period`.
    """

    def __init__(self, period: int, tick_interval: float = 1.0) -> None:
        if period < 1:
            raise ValueError("period must be >= 1")
        if tick_interval <= 0:
            raise ValueError("tick_interval must be > 0")
        self._period = period
        self._tick_interval = tick_interval
        self._value = period
        self._task: asyncio.Task | None = None

    @property
    def period(self) -> int:
        return self._period

    @property
    def tick_interval(self) -> float:
        return self._tick_interval

    @property
    def value(self) -> int:
        return self._value

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> None:
        """Advance one time-unit."""
        self._value = self._value - 1 if self._value > 1 else self._period

    def reset(self) -> None:
        self._value = self._period

    def start(self) -> None:
        """Reset and start ticking in a background task (idempotent)."""
        if self.running:
            return
        self.reset()
        self._task = asyncio.create_task(self._run(), name="countdown-clock")
        logger.debug("Countdown clock started")

    def stop(self) -> None:
        """Stop ticking and reset to `period` (idempotent)."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug("Countdown clock stopped")
        self._task = None
        self.reset()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            self.tick()
