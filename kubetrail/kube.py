"""
Kubernetes client and API interactions for Kubetrail.

This module is the boundary between Kubetrail and the Kubernetes API. It
loads cluster configuration, resolves watched workloads to pod names, and
opens pod log streams. Everything above this module talks to the cluster
only through the ``ClusterClient`` protocol, so tests can substitute a fake.

Key Components:
- ClusterClient: Capability protocol consumed by discovery and streaming
- KubeContext: Container for Kubernetes API clients
- load_kube: Initialize Kubernetes clients with config loading
- KubeCluster: ``ClusterClient`` implementation on the official client

The ``kubernetes`` client is synchronous. Resource reads and pod listing run
in the loop's default executor; each log stream is read on its own daemon
thread and handed to the event loop line by line through a bounded queue, so
an open follow stream never keeps the process alive at exit and a fast pod
cannot outrun a slow terminal.

Example:
    ```python
    kube = await load_kube(kubeconfig=None, context=None)
    cluster = KubeCluster(kube)
    pods = await cluster.pods_for_resource(ref)
    async for line in cluster.stream_pod_logs(pods[0], "prod", follow=True, line_filter=""):
        print(line)
    ```
"""

from __future__ import annotations
import asyncio
import concurrent.futures
import threading
from contextlib import closing
from typing import Any, AsyncIterator, Dict, Iterator, List, Optional, Protocol, Tuple

from kubernetes import client, config
from kubernetes.client import ApiException

from .constants import LOG_QUEUE_MAXSIZE, LOG_QUEUE_PUT_POLL_SECONDS
from .exceptions import DiscoveryError, StreamError
from .formatting import line_matches
from .models import ResourceKind, ResourceReference
from .selectors import resolve_selector, selector_to_string


class ClusterClient(Protocol):
    """Cluster access consumed by PodDiscoverer and StreamSupervisor."""

    async def pods_for_resource(self, ref: ResourceReference) -> List[str]:
        ...

    def stream_pod_logs(self, pod_name: str, namespace: str, follow: bool, line_filter: str) -> AsyncIterator[str]:
        ...


class KubeContext:
    """
    Container for Kubernetes API clients.

    Attributes:
        core: CoreV1Api client for pods and pod logs
        apps: AppsV1Api client for Deployments, StatefulSets and DaemonSets
        batch: BatchV1Api client for Jobs and CronJobs
    """

    def __init__(self, core: client.CoreV1Api, apps: client.AppsV1Api, batch: client.BatchV1Api):
        self.core = core
        self.apps = apps
        self.batch = batch


async def load_kube(kubeconfig: Optional[str], context: Optional[str]) -> KubeContext:
    """
    Load and initialize Kubernetes API clients.

    Uses the given kubeconfig/context when either is provided; otherwise tries
    the default kubeconfig and falls back to in-cluster configuration.

    Args:
        kubeconfig: Path to kubeconfig file (optional, uses default if None)
        context: Kubernetes context name (optional, uses current context if None)

    Returns:
        KubeContext: Initialized context with all API clients

    Raises:
        Exception: If Kubernetes configuration cannot be loaded
    """
    def _load():
        if kubeconfig or context:
            config.load_kube_config(config_file=kubeconfig, context=context)
        else:
            try:
                config.load_kube_config()
            except Exception:
                config.load_incluster_config()
        return client.CoreV1Api(), client.AppsV1Api(), client.BatchV1Api()
    loop = asyncio.get_running_loop()
    core, apps, batch = await loop.run_in_executor(None, _load)
    return KubeContext(core, apps, batch)


# kind -> (KubeContext attribute, read method)
RESOURCE_READERS: Dict[ResourceKind, Tuple[str, str]] = {
    ResourceKind.DEPLOYMENT: ("apps", "read_namespaced_deployment"),
    ResourceKind.STATEFULSET: ("apps", "read_namespaced_stateful_set"),
    ResourceKind.DAEMONSET: ("apps", "read_namespaced_daemon_set"),
    ResourceKind.JOB: ("batch", "read_namespaced_job"),
    ResourceKind.CRONJOB: ("batch", "read_namespaced_cron_job"),
}

_EOF = object()


def read_log_lines(core: client.CoreV1Api, pod_name: str, namespace: str, follow: bool) -> Iterator[str]:
    """
    Blocking iterator over the log lines of a pod's first container.

    Raises:
        ApiException: If the pod cannot be read or its log cannot be opened
        StreamError: If the pod declares no containers
    """
    pod = core.read_namespaced_pod(name=pod_name, namespace=namespace)
    containers = (pod.spec.containers if pod.spec else None) or []
    if not containers:
        raise StreamError(pod_name, "pod has no containers")
    resp = core.read_namespaced_pod_log(
        name=pod_name,
        namespace=namespace,
        container=containers[0].name,
        follow=follow,
        _preload_content=False,
    )
    try:
        for raw in resp:
            yield raw.decode("utf-8", "replace").rstrip("\r\n")
    finally:
        resp.release_conn()


class KubeCluster:
    """``ClusterClient`` backed by the official Kubernetes Python client."""

    def __init__(self, kube: KubeContext):
        self.kube = kube

    async def pods_for_resource(self, ref: ResourceReference) -> List[str]:
        """
        Resolve a workload to the names of the pods its selector matches.

        Raises:
            DiscoveryError: If the workload does not exist, has no selector,
                or either API call fails
        """
        api_name, method = RESOURCE_READERS[ref.kind]
        reader = getattr(getattr(self.kube, api_name), method)
        loop = asyncio.get_running_loop()

        def _list():
            try:
                resource = reader(name=ref.name, namespace=ref.namespace)
            except ApiException as e:
                if e.status == 404:
                    raise DiscoveryError(str(ref), "not found") from e
                raise DiscoveryError(str(ref), f"read failed ({e.status} {e.reason})") from e
            except Exception as e:
                raise DiscoveryError(str(ref), f"read failed ({e.__class__.__name__}: {e})") from e
            selector = resolve_selector(ref.kind, resource)
            if selector is None:
                raise DiscoveryError(str(ref), "no label selector")
            try:
                label_selector = selector_to_string(selector)
            except ValueError as e:
                raise DiscoveryError(str(ref), str(e)) from e
            if not label_selector:
                raise DiscoveryError(str(ref), "label selector is empty")
            try:
                pods = self.kube.core.list_namespaced_pod(namespace=ref.namespace, label_selector=label_selector)
            except ApiException as e:
                raise DiscoveryError(str(ref), f"pod list failed ({e.status} {e.reason})") from e
            except Exception as e:
                raise DiscoveryError(str(ref), f"pod list failed ({e.__class__.__name__}: {e})") from e
            return [p.metadata.name for p in pods.items or []]

        return await loop.run_in_executor(None, _list)

    async def stream_pod_logs(self, pod_name: str, namespace: str, follow: bool, line_filter: str) -> AsyncIterator[str]:
        """
        Yield the log lines of ``pod_name`` that contain ``line_filter``.

        The stream ends when the API closes it (pod terminated, or the end of
        the log when not following). At most ``LOG_QUEUE_MAXSIZE`` lines are
        held between the reader thread and the consumer; a slow consumer
        stalls the reader, which leaves the backlog with the API server.

        Raises:
            StreamError: If the stream cannot be opened or breaks while reading
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue(maxsize=LOG_QUEUE_MAXSIZE)
        stopped = threading.Event()

        def _put(item: Any) -> bool:
            """Hand ``item`` to the loop, blocking while the queue is full."""
            try:
                fut = asyncio.run_coroutine_threadsafe(queue.put(item), loop)
            except RuntimeError:
                # Event loop already closed at process exit.
                return False
            while True:
                try:
                    fut.result(timeout=LOG_QUEUE_PUT_POLL_SECONDS)
                    return True
                except concurrent.futures.TimeoutError:
                    if stopped.is_set() or loop.is_closed():
                        fut.cancel()
                        return False
                except concurrent.futures.CancelledError:
                    return False

        def _pump() -> None:
            try:
                with closing(read_log_lines(self.kube.core, pod_name, namespace, follow)) as lines:
                    for line in lines:
                        if line_matches(line, line_filter) and not _put(line):
                            return
            except StreamError as e:
                _put(e)
            except ApiException as e:
                _put(StreamError(pod_name, f"{e.status} {e.reason}", status=e.status))
            except Exception as e:
                _put(StreamError(pod_name, f"{e.__class__.__name__}: {e}"))
            _put(_EOF)

        threading.Thread(target=_pump, name=f"logs-{pod_name}", daemon=True).start()
        try:
            while True:
                item = await queue.get()
                if item is _EOF:
                    return
                if isinstance(item, StreamError):
                    raise item
                yield item
        finally:
            stopped.set()
