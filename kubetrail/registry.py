"""
Active pod registry.

``ActivePodSet`` records every pod name a streaming task has been started for.
It is the only state shared between tasks, and it is guarded by an asyncio
reader/writer lock: any number of concurrent membership reads, while an
insertion excludes readers and other writers.

Membership means "a stream was started", not "a stream is running". Names are
never removed, so a pod whose stream has ended is not started again even if
a later discovery cycle still sees it.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, FrozenSet, Iterable, List, Set


class ReadWriteLock:
    """Asyncio reader/writer lock; writers exclude readers and each other."""

    def __init__(self):
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()


class ActivePodSet:
    """
    Set of pod names that already have a streaming task.

    Example:
        ```python
        active = ActivePodSet()
        new = await active.claim(["web-1", "web-2"])   # ["web-1", "web-2"]
        new = await active.claim(["web-2", "web-3"])   # ["web-3"]
        ```
    """

    def __init__(self, pods: Iterable[str] = ()):
        self._pods: Set[str] = set(pods)
        self._lock = ReadWriteLock()

    async def contains(self, pod_name: str) -> bool:
        async with self._lock.read():
            return pod_name in self._pods

    async def snapshot(self) -> FrozenSet[str]:
        async with self._lock.read():
            return frozenset(self._pods)

    async def claim(self, pod_names: Iterable[str]) -> List[str]:
        """
        Insert every name not yet present, under one write lock.

        Returns:
            List[str]: The names that were inserted, in first-seen order. A
            name repeated within ``pod_names`` is claimed once.
        """
        claimed: List[str] = []
        async with self._lock.write():
            for name in pod_names:
                if name not in self._pods:
                    self._pods.add(name)
                    claimed.append(name)
        return claimed
