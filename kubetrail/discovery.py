"""
Pod discovery and the discovery-and-start cycle.

A discovery cycle resolves every watched workload to its current pods, claims
the names not seen before in the shared ``ActivePodSet``, and starts one
streaming task per claimed name.

Discovery is all-or-nothing: a ``DiscoveryError`` for any workload aborts the
whole cycle before anything is claimed, and the next scheduled cycle tries
again. Cycles must never overlap; the initial cycle finishes before the
refresh scheduler starts, and the scheduler runs cycles one at a time.

Key Components:
- PodDiscoverer: Resolves a watch set to a flat list of pod names
- start_pods: Claims names and starts streams for the new ones
- run_discovery_cycle: One full discovery-and-start pass
"""

from typing import Iterable, List, Sequence

from .kube import ClusterClient
from .log import log
from .models import ResourceReference
from .registry import ActivePodSet
from .streaming import StreamSupervisor


class PodDiscoverer:
    """Resolves watched workloads to pod names through the cluster client."""

    def __init__(self, cluster: ClusterClient):
        self.cluster = cluster

    async def discover(self, watch_set: Sequence[ResourceReference]) -> List[str]:
        """
        Concatenate the pod names of every workload in ``watch_set``.

        Duplicates (workloads sharing a selector) are kept; ``start_pods``
        removes them.

        Raises:
            DiscoveryError: On the first workload that cannot be resolved
        """
        pods: List[str] = []
        for ref in watch_set:
            found = await self.cluster.pods_for_resource(ref)
            log.debug(f"[discovery] {ref} -> {len(found)} pods")
            pods.extend(found)
        return pods


async def start_pods(pod_names: Iterable[str], active: ActivePodSet, supervisor: StreamSupervisor) -> List[str]:
    """
    Start streams for the pods in ``pod_names`` that are not active yet.

    Names are claimed under the registry's write lock before any stream is
    started, so a name is never started twice.

    Returns:
        List[str]: Pods a stream was started for
    """
    new_pods = await active.claim(pod_names)
    for pod_name in new_pods:
        supervisor.start(pod_name)
    return new_pods


async def run_discovery_cycle(discoverer: PodDiscoverer, watch_set: Sequence[ResourceReference],
                              active: ActivePodSet, supervisor: StreamSupervisor) -> List[str]:
    """
    Run one discovery-and-start cycle.

    Returns:
        List[str]: Pods a stream was started for in this cycle

    Raises:
        DiscoveryError: If any watched workload could not be resolved
    """
    pods = await discoverer.discover(watch_set)
    new_pods = await start_pods(pods, active, supervisor)
    if new_pods:
        log.info(f"[discovery] started {len(new_pods)} new streams: {', '.join(new_pods)}")
    return new_pods
