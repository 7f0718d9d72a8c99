"""
Input validation and sanitization for Kubetrail.

This module validates the command-line input before any cluster connection
is attempted and assembles it into a ``WatchConfig``.

Key Functions:
- validate_namespace: Validates the single namespace of a run
- validate_refresh_interval: Validates the re-discovery interval
- sanitize_names: Trims and de-duplicates resource or pod names
- build_watch_set: Builds the ordered ResourceReference tuple
- build_config: Validates everything and returns a WatchConfig

All validation functions raise ConfigurationError with a descriptive message
when validation fails.

Example:
    ```python
    try:
        config = build_config(
            namespace="prod",
            names_by_kind={ResourceKind.DEPLOYMENT: ["web"]},
            pods=[],
        )
    except ConfigurationError as e:
        print(f"Validation failed: {e}")
    ```
"""

import math
from typing import Iterable, Mapping, Optional, Tuple

from .constants import DEFAULT_REFRESH_INTERVAL_SECONDS, MAX_NAME_LENGTH
from .exceptions import ConfigurationError
from .models import ResourceKind, ResourceReference, WatchConfig


def validate_namespace(namespace: Optional[str]) -> str:
    """
    Validate the namespace every lookup and stream will use.

    Raises:
        ConfigurationError: If the namespace is empty or too long
    """
    if not namespace or not namespace.strip():
        raise ConfigurationError("Namespace cannot be empty")

    namespace = namespace.strip()
    if len(namespace) > MAX_NAME_LENGTH:
        raise ConfigurationError("Namespace too long")

    return namespace


def validate_refresh_interval(interval: float) -> float:
    """
    Validate the pod re-discovery interval.

    Zero is accepted and disables periodic discovery.

    Raises:
        ConfigurationError: If interval is not a finite number or is negative
    """
    if (isinstance(interval, bool) or not isinstance(interval, (int, float))
            or not math.isfinite(interval) or interval < 0):
        raise ConfigurationError(f"Refresh interval must be a finite non-negative number, got: {interval}")
    return interval


def sanitize_names(names: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """Strip names, drop empty ones and repeats, keep first-seen order."""
    seen = []
    for name in names or ():
        name = (name or "").strip()
        if not name:
            continue
        if len(name) > MAX_NAME_LENGTH:
            raise ConfigurationError(f"Name too long: {name[:40]}...")
        if name not in seen:
            seen.append(name)
    return tuple(seen)


def build_watch_set(namespace: str, names_by_kind: Mapping[ResourceKind, Iterable[str]]) -> Tuple[ResourceReference, ...]:
    """Build ResourceReferences in ResourceKind order, then name order."""
    refs = []
    for kind in ResourceKind:
        for name in sanitize_names(names_by_kind.get(kind)):
            refs.append(ResourceReference(kind=kind, name=name, namespace=namespace))
    return tuple(refs)


def build_config(
    namespace: Optional[str],
    names_by_kind: Mapping[ResourceKind, Iterable[str]],
    pods: Optional[Iterable[str]],
    follow: bool = False,
    line_filter: Optional[str] = "",
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
    pretty_json: bool = False,
    kubeconfig: Optional[str] = None,
    context: Optional[str] = None,
) -> WatchConfig:
    """
    Validate command-line input and assemble the run configuration.

    Raises:
        ConfigurationError: If nothing to watch was given or any value is invalid
    """
    namespace = validate_namespace(namespace)
    watch_set = build_watch_set(namespace, names_by_kind)
    pod_names = sanitize_names(pods)
    if not watch_set and not pod_names:
        options = ", ".join(f"--{kind.option}" for kind in ResourceKind)
        raise ConfigurationError(f"Nothing to watch: specify at least one resource ({options}) or --pods")

    return WatchConfig(
        namespace=namespace,
        watch_set=watch_set,
        pods=pod_names,
        follow=follow,
        line_filter=line_filter or "",
        refresh_interval=validate_refresh_interval(refresh_interval),
        pretty_json=pretty_json,
        kubeconfig=kubeconfig,
        context=context,
    )
