"""
Periodic re-discovery and shutdown signalling.

Key Components:
- ShutdownCoordinator: One-shot, broadcast cancellation signal
- RefreshScheduler: Runs a discovery cycle every ``interval`` seconds until
  shutdown, or does nothing when the interval is zero

The scheduler's wait is a race between "interval elapsed" and "shutdown
observed". Shutdown is only consulted at that wait point: a cycle already in
progress is allowed to finish, and streaming tasks are not cancelled.

Example:
    ```python
    shutdown = ShutdownCoordinator()
    scheduler = RefreshScheduler(cycle, interval=30, shutdown=shutdown)
    task = scheduler.start()
    ...
    shutdown.trigger()
    if task is not None:
        await task
    ```
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from .exceptions import DiscoveryError
from .log import log, log_exception


class ShutdownCoordinator:
    """Cancellation signal that is set once and never reset."""

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def is_set(self) -> bool:
        return self._event.is_set()

    def trigger(self) -> None:
        if not self._event.is_set():
            log.info("[shutdown] shutdown requested")
            self._event.set()

    async def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for shutdown, at most ``timeout`` seconds when given.

        Returns:
            bool: True if shutdown was signalled, False if the timeout elapsed first
        """
        if self._event.is_set():
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True


class SchedulerState(Enum):
    DISABLED = "disabled"
    TICKING = "ticking"
    STOPPED = "stopped"


class RefreshScheduler:
    """
    Timer loop that repeats the discovery-and-start cycle.

    Attributes:
        interval: Seconds between cycles; 0 disables the scheduler
        state: Current SchedulerState
        ticks: Number of cycles run so far
    """

    def __init__(self, cycle: Callable[[], Awaitable[object]], interval: float, shutdown: ShutdownCoordinator):
        self.cycle = cycle
        self.interval = interval
        self.shutdown = shutdown
        self.state = SchedulerState.DISABLED if interval <= 0 else SchedulerState.TICKING
        self.ticks = 0

    def start(self) -> Optional[asyncio.Task]:
        """Spawn the refresh loop, or return None without spawning anything when disabled."""
        if self.state is SchedulerState.DISABLED:
            log.info("[refresh] periodic discovery disabled")
            return None
        log.info(f"[refresh] interval={self.interval}s")
        return asyncio.get_running_loop().create_task(self.run(), name="refresh-scheduler")

    async def run(self) -> None:
        if self.state is SchedulerState.DISABLED:
            return
        while self.state is SchedulerState.TICKING:
            if await self.shutdown.wait(self.interval):
                break
            self.ticks += 1
            try:
                await self.cycle()
            except DiscoveryError as e:
                log_exception(f"[refresh] discovery cycle {self.ticks} failed", e)
            except Exception as e:
                log_exception(f"[refresh] discovery cycle {self.ticks} crashed", e, level=logging.ERROR)
        self.state = SchedulerState.STOPPED
        log.info(f"[refresh] stopped after {self.ticks} cycles")
