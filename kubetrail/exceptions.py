"""
Custom exceptions for Kubetrail.

Exception Hierarchy:
- KubetrailError: Base exception for all Kubetrail-specific errors
  - ConfigurationError: Raised when the command line describes nothing to watch
    or carries an invalid value; fatal at startup
  - KubernetesConnectionError: Raised when the kube configuration cannot be loaded
  - DiscoveryError: Raised when a watched workload cannot be resolved to pods;
    aborts the current discovery cycle only
  - StreamError: Raised when a pod's log stream cannot be opened or read;
    ends that pod's streaming task only

Example:
    ```python
    try:
        pods = await cluster.pods_for_resource(ref)
    except DiscoveryError as e:
        print(f"Discovery failed: {e}")
    ```
"""

from typing import Optional


class KubetrailError(Exception):
    """Base exception for Kubetrail errors."""
    pass


class ConfigurationError(KubetrailError):
    """Raised when there's a configuration issue."""
    pass


class KubernetesConnectionError(KubetrailError):
    """Raised when unable to connect to Kubernetes cluster."""
    pass


class DiscoveryError(KubetrailError):
    """Raised when a watched resource cannot be resolved to its pods."""

    def __init__(self, resource: str, reason: str):
        super().__init__(f"{resource}: {reason}")
        self.resource = resource
        self.reason = reason


class StreamError(KubetrailError):
    """Raised when a pod's log stream fails."""

    def __init__(self, pod: str, reason: str, status: Optional[int] = None):
        super().__init__(f"pod/{pod}: {reason}")
        self.pod = pod
        self.reason = reason
        self.status = status
