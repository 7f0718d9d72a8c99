"""
Unit tests for RefreshScheduler and ShutdownCoordinator
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from kubetrail.exceptions import DiscoveryError
from kubetrail.scheduler import RefreshScheduler, SchedulerState, ShutdownCoordinator


class TestShutdownCoordinator:
    """Test cases for ShutdownCoordinator"""

    @pytest.mark.asyncio
    async def test_wait_times_out_when_not_triggered(self):
        shutdown = ShutdownCoordinator()
        assert await shutdown.wait(0.01) is False
        assert not shutdown.is_set

    @pytest.mark.asyncio
    async def test_trigger_wakes_all_waiters(self):
        shutdown = ShutdownCoordinator()
        waiters = [asyncio.ensure_future(shutdown.wait()) for _ in range(3)]
        await asyncio.sleep(0)

        shutdown.trigger()

        assert await asyncio.wait_for(asyncio.gather(*waiters), timeout=1) == [True, True, True]

    @pytest.mark.asyncio
    async def test_trigger_is_idempotent_and_sticky(self):
        shutdown = ShutdownCoordinator()
        shutdown.trigger()
        shutdown.trigger()
        assert shutdown.is_set
        assert await shutdown.wait(0) is True


class TestRefreshScheduler:
    """Test cases for RefreshScheduler"""

    @pytest.mark.asyncio
    async def test_zero_interval_is_disabled(self):
        cycle = AsyncMock()
        scheduler = RefreshScheduler(cycle, 0, ShutdownCoordinator())

        assert scheduler.start() is None
        await asyncio.wait_for(scheduler.run(), timeout=0.1)

        assert scheduler.state is SchedulerState.DISABLED
        assert scheduler.ticks == 0
        cycle.assert_not_called()

    @pytest.mark.asyncio
    async def test_shutdown_while_waiting_stops_promptly(self):
        cycle = AsyncMock()
        shutdown = ShutdownCoordinator()
        scheduler = RefreshScheduler(cycle, 60, shutdown)

        task = scheduler.start()
        await asyncio.sleep(0.01)
        shutdown.trigger()
        await asyncio.wait_for(task, timeout=0.5)

        assert scheduler.state is SchedulerState.STOPPED
        cycle.assert_not_called()

    @pytest.mark.asyncio
    async def test_runs_one_cycle_per_interval(self):
        shutdown = ShutdownCoordinator()
        calls = []

        async def cycle():
            calls.append(len(calls))
            if len(calls) == 3:
                shutdown.trigger()

        scheduler = RefreshScheduler(cycle, 0.01, shutdown)
        await asyncio.wait_for(scheduler.run(), timeout=2)

        assert calls == [0, 1, 2]
        assert scheduler.ticks == 3
        assert scheduler.state is SchedulerState.STOPPED

    @pytest.mark.asyncio
    async def test_failed_cycles_do_not_stop_the_loop(self, caplog):
        shutdown = ShutdownCoordinator()
        outcomes = [DiscoveryError("deployment/web", "not found"), RuntimeError("api hiccup"), None]

        async def cycle():
            outcome = outcomes.pop(0)
            if not outcomes:
                shutdown.trigger()
            if outcome is not None:
                raise outcome

        scheduler = RefreshScheduler(cycle, 0.01, shutdown)
        await asyncio.wait_for(scheduler.run(), timeout=2)

        assert scheduler.ticks == 3
        assert scheduler.state is SchedulerState.STOPPED
        assert any("deployment/web: not found" in r.getMessage() for r in caplog.records)
        assert any("api hiccup" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_shutdown_before_start_never_ticks(self):
        cycle = AsyncMock()
        shutdown = ShutdownCoordinator()
        shutdown.trigger()

        scheduler = RefreshScheduler(cycle, 0.01, shutdown)
        await asyncio.wait_for(scheduler.run(), timeout=0.5)

        cycle.assert_not_called()
        assert scheduler.state is SchedulerState.STOPPED
