"""
Top-level runner for Kubetrail.

``run`` wires the components together and drives a whole session:

1. Connect to the cluster (unless a client is injected)
2. Run one discovery-and-start cycle so existing pods stream right away
3. Start streams for explicitly named pods
4. Start the refresh scheduler (unless the interval is zero)
5. Wait for SIGINT/SIGTERM, then stop the scheduler and return

Streaming tasks still running at that point are not joined; they are torn
down with the event loop.

Example:
    ```python
    config = build_config("prod", {ResourceKind.DEPLOYMENT: ["web"]}, pods=[], follow=True)
    asyncio.run(run(config))
    ```
"""

import asyncio
import functools
import signal
from typing import Optional

from .discovery import PodDiscoverer, run_discovery_cycle, start_pods
from .exceptions import DiscoveryError, KubernetesConnectionError
from .formatting import LinePrinter
from .kube import ClusterClient, KubeCluster, load_kube
from .log import log, log_exception
from .models import WatchConfig
from .registry import ActivePodSet
from .scheduler import RefreshScheduler, ShutdownCoordinator
from .streaming import StreamSupervisor


def install_signal_handlers(shutdown: ShutdownCoordinator) -> bool:
    """Route SIGINT/SIGTERM to ``shutdown``; False where the loop cannot (e.g. Windows)."""
    loop = asyncio.get_running_loop()
    try:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, shutdown.trigger)
    except (NotImplementedError, RuntimeError):
        return False
    return True


def remove_signal_handlers() -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.remove_signal_handler(sig)
        except (NotImplementedError, RuntimeError):
            return


async def connect(config: WatchConfig) -> KubeCluster:
    """Load kube configuration and build the cluster client."""
    try:
        kube = await load_kube(config.kubeconfig, config.context)
    except Exception as e:
        log_exception("[startup] Failed to load Kubernetes configuration", e)
        raise KubernetesConnectionError(f"Failed to connect to Kubernetes: {e}") from e
    return KubeCluster(kube)


async def run(
    config: WatchConfig,
    cluster: Optional[ClusterClient] = None,
    printer: Optional[LinePrinter] = None,
    shutdown: Optional[ShutdownCoordinator] = None,
    handle_signals: bool = True,
) -> ActivePodSet:
    """
    Run a Kubetrail session until shutdown.

    Args:
        config: Validated run configuration
        cluster: Cluster client (connects with ``config`` when None)
        printer: Line printer (stdout printer when None)
        shutdown: Shutdown signal (a new one when None)
        handle_signals: Route SIGINT/SIGTERM to the shutdown signal

    Returns:
        ActivePodSet: The pods streams were started for during the session

    Raises:
        KubernetesConnectionError: If no cluster client was given and connecting fails
    """
    if cluster is None:
        cluster = await connect(config)
    printer = printer or LinePrinter(pretty_json=config.pretty_json)
    shutdown = shutdown or ShutdownCoordinator()

    active = ActivePodSet()
    supervisor = StreamSupervisor(cluster, printer, config.namespace, config.follow, config.line_filter)
    discoverer = PodDiscoverer(cluster)
    cycle = functools.partial(run_discovery_cycle, discoverer, config.watch_set, active, supervisor)

    log.info(f"[startup] namespace={config.namespace} resources={len(config.watch_set)} pods={len(config.pods)}")
    if config.watch_set:
        try:
            await cycle()
        except DiscoveryError as e:
            log_exception("[startup] initial discovery failed", e)
    if config.pods:
        await start_pods(config.pods, active, supervisor)

    # explicit pods alone need no re-discovery
    interval = config.refresh_interval if config.watch_set else 0
    scheduler = RefreshScheduler(cycle, interval, shutdown)
    refresh_task = scheduler.start()

    signals = handle_signals and install_signal_handlers(shutdown)
    try:
        await shutdown.wait()
        if refresh_task is not None:
            await refresh_task
    finally:
        if signals:
            remove_signal_handlers()
    return active
