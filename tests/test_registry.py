"""
Unit tests for the active pod registry
"""

import asyncio

import pytest

from kubetrail.registry import ActivePodSet, ReadWriteLock


class TestActivePodSet:
    """Test cases for ActivePodSet"""

    @pytest.mark.asyncio
    async def test_claim_returns_only_new_names(self):
        active = ActivePodSet(["a"])
        assert await active.claim(["a", "b"]) == ["b"]
        assert await active.snapshot() == frozenset({"a", "b"})

    @pytest.mark.asyncio
    async def test_claim_dedups_within_one_call(self):
        active = ActivePodSet()
        assert await active.claim(["web-1", "web-2", "web-1"]) == ["web-1", "web-2"]

    @pytest.mark.asyncio
    async def test_second_claim_of_same_names_is_empty(self):
        active = ActivePodSet()
        await active.claim(["web-1"])
        assert await active.claim(["web-1"]) == []

    @pytest.mark.asyncio
    async def test_contains(self):
        active = ActivePodSet(["web-1"])
        assert await active.contains("web-1")
        assert not await active.contains("web-2")

    @pytest.mark.asyncio
    async def test_concurrent_claims_never_hand_out_a_name_twice(self):
        active = ActivePodSet()
        results = await asyncio.gather(*(active.claim(["a", "b", "c"]) for _ in range(10)))
        claimed = [name for result in results for name in result]
        assert sorted(claimed) == ["a", "b", "c"]


class TestReadWriteLock:
    """Test cases for ReadWriteLock"""

    @pytest.mark.asyncio
    async def test_readers_share_the_lock(self):
        lock = ReadWriteLock()
        inside = 0
        peak = 0

        async def reader():
            nonlocal inside, peak
            async with lock.read():
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0.01)
                inside -= 1

        await asyncio.gather(reader(), reader(), reader())
        assert peak == 3

    @pytest.mark.asyncio
    async def test_writer_waits_for_readers(self):
        lock = ReadWriteLock()
        order = []
        reader_in = asyncio.Event()

        async def reader():
            async with lock.read():
                reader_in.set()
                await asyncio.sleep(0.02)
                order.append("read-done")

        async def writer():
            await reader_in.wait()
            async with lock.write():
                order.append("write")

        await asyncio.gather(reader(), writer())
        assert order == ["read-done", "write"]

    @pytest.mark.asyncio
    async def test_reader_waits_for_writer(self):
        lock = ReadWriteLock()
        order = []
        writer_in = asyncio.Event()

        async def writer():
            async with lock.write():
                writer_in.set()
                await asyncio.sleep(0.02)
                order.append("write-done")

        async def reader():
            await writer_in.wait()
            async with lock.read():
                order.append("read")

        await asyncio.gather(writer(), reader())
        assert order == ["write-done", "read"]
