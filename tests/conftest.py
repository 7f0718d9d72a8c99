"""Shared pytest fixtures for kubetrail tests."""

import asyncio
from typing import Dict, List, Union

import pytest

from kubetrail.exceptions import DiscoveryError
from kubetrail.models import ResourceKind, ResourceReference
from kubetrail.registry import ActivePodSet
from kubetrail.streaming import StreamSupervisor


class FakeCluster:
    """In-memory ClusterClient recording every call."""

    def __init__(self):
        self.pods: Dict[str, Union[List[str], Exception]] = {}
        self.logs: Dict[str, List[str]] = {}
        self.stream_errors: Dict[str, Exception] = {}
        self.hold_open: set = set()
        self.discovery_calls: List[ResourceReference] = []
        self.stream_calls: List[tuple] = []
        self.release = asyncio.Event()

    async def pods_for_resource(self, ref: ResourceReference) -> List[str]:
        self.discovery_calls.append(ref)
        result = self.pods.get(str(ref))
        if result is None:
            raise DiscoveryError(str(ref), "not found")
        if isinstance(result, Exception):
            raise result
        return list(result)

    def stream_pod_logs(self, pod_name: str, namespace: str, follow: bool, line_filter: str):
        self.stream_calls.append((pod_name, namespace, follow, line_filter))
        return self._lines(pod_name)

    async def _lines(self, pod_name: str):
        for line in self.logs.get(pod_name, []):
            await asyncio.sleep(0)
            yield line
        if pod_name in self.stream_errors:
            raise self.stream_errors[pod_name]
        if pod_name in self.hold_open:
            await self.release.wait()

    def started(self) -> List[str]:
        return [call[0] for call in self.stream_calls]


class RecordingPrinter:
    """LinePrinter stand-in that keeps (pod, line) pairs."""

    def __init__(self):
        self.lines: List[tuple] = []

    def emit(self, pod_name: str, line: str) -> None:
        self.lines.append((pod_name, line))


def deployment(name: str, namespace: str = "prod") -> ResourceReference:
    return ResourceReference(kind=ResourceKind.DEPLOYMENT, name=name, namespace=namespace)


async def settle(supervisor: StreamSupervisor) -> None:
    """Let started streaming tasks run to completion."""
    await asyncio.sleep(0)
    if supervisor.tasks:
        await asyncio.wait_for(asyncio.gather(*supervisor.tasks), timeout=2)


@pytest.fixture
def cluster():
    return FakeCluster()


@pytest.fixture
def printer():
    return RecordingPrinter()


@pytest.fixture
def active():
    return ActivePodSet()


@pytest.fixture
def supervisor(cluster, printer):
    return StreamSupervisor(cluster, printer, namespace="prod", follow=True, line_filter="")
