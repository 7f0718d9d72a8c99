"""
Label selector resolution for watched workloads.

Every supported workload kind owns its pods through a label selector, but the
selector sits in a differently shaped place for each kind:

- Deployment, StatefulSet, DaemonSet: ``spec.selector`` (mandatory)
- Job: ``spec.selector`` (optional, usually set by the controller)
- CronJob: ``spec.job_template.spec.selector`` (optional, often absent)

``resolve_selector`` hides those differences behind one call keyed on
``ResourceKind``; ``selector_to_string`` renders the result into the
``label_selector`` query string accepted by ``list_namespaced_pod``.

Example:
    ```python
    selector = resolve_selector(ResourceKind.DEPLOYMENT, deployment)
    if selector is not None:
        core.list_namespaced_pod("prod", label_selector=selector_to_string(selector))
    ```
"""

from typing import Any, Callable, Dict, List, Optional

from .models import ResourceKind


def _spec_selector(resource: Any) -> Optional[Any]:
    spec = getattr(resource, "spec", None)
    if spec is None:
        return None
    return getattr(spec, "selector", None)


def _job_template_selector(resource: Any) -> Optional[Any]:
    spec = getattr(resource, "spec", None)
    template = getattr(spec, "job_template", None) if spec is not None else None
    job_spec = getattr(template, "spec", None) if template is not None else None
    if job_spec is None:
        return None
    return getattr(job_spec, "selector", None)


SELECTOR_RESOLVERS: Dict[ResourceKind, Callable[[Any], Optional[Any]]] = {
    ResourceKind.DEPLOYMENT: _spec_selector,
    ResourceKind.STATEFULSET: _spec_selector,
    ResourceKind.DAEMONSET: _spec_selector,
    ResourceKind.JOB: _spec_selector,
    ResourceKind.CRONJOB: _job_template_selector,
}


def resolve_selector(kind: ResourceKind, resource: Any) -> Optional[Any]:
    """
    Return the ``V1LabelSelector`` that selects the pods of ``resource``.

    Args:
        kind: Kind of the workload object
        resource: Workload object as returned by the Kubernetes client

    Returns:
        Optional[V1LabelSelector]: The selector, or None if the object has none
    """
    return SELECTOR_RESOLVERS[kind](resource)


def _requirement_to_string(req: Any) -> str:
    op = req.operator
    values = ",".join(sorted(req.values or []))
    if op == "In":
        return f"{req.key} in ({values})"
    if op == "NotIn":
        return f"{req.key} notin ({values})"
    if op == "Exists":
        return req.key
    if op == "DoesNotExist":
        return f"!{req.key}"
    raise ValueError(f"Unsupported label selector operator: {op}")


def selector_to_string(selector: Any) -> str:
    """
    Render a label selector into Kubernetes query syntax.

    ``match_labels`` become ``key=value`` terms (sorted by key) followed by
    one term per ``match_expressions`` requirement. An empty selector renders
    as an empty string.

    Raises:
        ValueError: If an expression uses an unknown operator
    """
    terms: List[str] = []
    for key, value in sorted((selector.match_labels or {}).items()):
        terms.append(f"{key}={value}")
    for req in selector.match_expressions or []:
        terms.append(_requirement_to_string(req))
    return ",".join(terms)
