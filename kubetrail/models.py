"""
Data models for Kubetrail.

This module defines the data structures used throughout Kubetrail. The models
are built once at startup from validated command-line input and are never
mutated afterwards.

Key Models:
- ResourceKind: The workload kinds whose pods can be watched
- ResourceReference: A (kind, name, namespace) triple naming one workload
- WatchConfig: Complete, validated configuration for a run

Example:
    ```python
    ref = ResourceReference(kind=ResourceKind.DEPLOYMENT, name="web", namespace="prod")
    print(ref)  # deployment/web
    ```
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .constants import DEFAULT_REFRESH_INTERVAL_SECONDS


class ResourceKind(Enum):
    """
    Workload kinds that own pods through a label selector.

    The enum value is the Kubernetes kind name. ``option`` is the plural,
    lower-case form used on the command line (``--deployments`` etc.).
    """

    DEPLOYMENT = "Deployment"
    STATEFULSET = "StatefulSet"
    DAEMONSET = "DaemonSet"
    JOB = "Job"
    CRONJOB = "CronJob"

    @property
    def option(self) -> str:
        return f"{self.value.lower()}s"


@dataclass(frozen=True)
class ResourceReference:
    """
    Reference to a watched workload.

    Attributes:
        kind: Workload kind
        name: Workload name
        namespace: Namespace the workload lives in
    """
    kind: ResourceKind
    name: str
    namespace: str

    def __str__(self) -> str:
        return f"{self.kind.value.lower()}/{self.name}"


@dataclass(frozen=True)
class WatchConfig:
    """
    Validated configuration for one Kubetrail run.

    Attributes:
        namespace: The single namespace every lookup and stream uses
        watch_set: Ordered workload references to discover pods from
        pods: Explicitly named pods streamed without discovery
        follow: Keep log streams open and follow new output
        line_filter: Substring a line must contain to be printed ("" prints all)
        refresh_interval: Seconds between discovery cycles (0 disables refresh)
        pretty_json: Render JSON log lines as ``[level] ts: msg``
        kubeconfig: Path to kubeconfig (optional)
        context: Kube context override (optional)

    Example:
        ```python
        config = WatchConfig(
            namespace="prod",
            watch_set=(ResourceReference(ResourceKind.DEPLOYMENT, "web", "prod"),),
            follow=True,
        )
        ```
    """
    namespace: str
    watch_set: Tuple[ResourceReference, ...] = field(default_factory=tuple)
    pods: Tuple[str, ...] = field(default_factory=tuple)
    follow: bool = False
    line_filter: str = ""
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL_SECONDS
    pretty_json: bool = False
    kubeconfig: Optional[str] = None
    context: Optional[str] = None
