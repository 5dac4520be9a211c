"""Unit tests for CountdownClock."""

import asyncio

import pytest

from viralgrowth.infrastructure.schedule.countdown import CountdownClock


class TestTick:
    def test_starts_at_period(self):
        assert CountdownClock(period=60).value == 60

    def test_counts_down_and_wraps_instead_of_reaching_zero(self):
        clock = CountdownClock(period=3)
        values = []
        for _ in range(7):
            clock.tick()
            values.append(clock.value)

        assert values == [2, 1, 3, 2, 1, 3, 2]

    def test_period_of_one_stays_at_one(self):
        clock = CountdownClock(period=1)
        clock.tick()
        assert clock.value == 1

    def test_reset_returns_to_period(self):
        clock = CountdownClock(period=5)
        clock.tick()
        clock.tick()
        clock.reset()
        assert clock.value == 5

    @pytest.mark.parametrize("period,tick_interval", [(0, 1.0), (-3, 1.0), (5, 0), (5, -0.5)])
    def test_rejects_invalid_arguments(self, period, tick_interval):
        with pytest.raises(ValueError):
            CountdownClock(period=period, tick_interval=tick_interval)


class TestRunning:
    @pytest.mark.asyncio
    async def test_ticks_in_background_within_bounds(self):
        clock = CountdownClock(period=4, tick_interval=0.01)
        clock.start()
        seen = set()
        try:
            for _ in range(20):
                await asyncio.sleep(0.005)
                seen.add(clock.value)
        finally:
            clock.stop()

        assert seen <= {1, 2, 3, 4}
        assert len(seen) > 1

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self):
        clock = CountdownClock(period=10, tick_interval=0.01)
        clock.start()
        await asyncio.sleep(0.035)
        before = clock.value
        clock.start()

        assert clock.value == before
        assert clock.running
        clock.stop()

    @pytest.mark.asyncio
    async def test_stop_halts_and_resets(self):
        clock = CountdownClock(period=10, tick_interval=0.01)
        clock.start()
        await asyncio.sleep(0.035)
        clock.stop()

        assert not clock.running
        assert clock.value == 10
        await asyncio.sleep(0.03)
        assert clock.value == 10

    def test_stop_when_not_started(self):
        clock = CountdownClock(period=10)
        clock.stop()
        assert clock.value == 10
        assert not clock.running
