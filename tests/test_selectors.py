"""
Unit tests for label selector resolution
"""

from types import SimpleNamespace

import pytest
from kubernetes.client import V1LabelSelector, V1LabelSelectorRequirement

from kubetrail.models import ResourceKind
from kubetrail.selectors import resolve_selector, selector_to_string


def label_selector():
    return V1LabelSelector(match_labels={"app": "web"})


def workload(selector):
    return SimpleNamespace(spec=SimpleNamespace(selector=selector))


class TestResolveSelector:
    """Test cases for resolve_selector"""

    @pytest.mark.parametrize("kind", [ResourceKind.DEPLOYMENT, ResourceKind.STATEFULSET, ResourceKind.DAEMONSET])
    def test_direct_spec_selector(self, kind):
        selector = label_selector()
        assert resolve_selector(kind, workload(selector)) is selector

    def test_job_with_selector(self):
        selector = label_selector()
        assert resolve_selector(ResourceKind.JOB, workload(selector)) is selector

    def test_job_without_selector(self):
        assert resolve_selector(ResourceKind.JOB, workload(None)) is None

    def test_missing_spec(self):
        assert resolve_selector(ResourceKind.DEPLOYMENT, SimpleNamespace(spec=None)) is None

    def test_cronjob_uses_job_template_selector(self):
        selector = label_selector()
        cronjob = SimpleNamespace(spec=SimpleNamespace(job_template=SimpleNamespace(spec=SimpleNamespace(selector=selector))))
        assert resolve_selector(ResourceKind.CRONJOB, cronjob) is selector

    def test_cronjob_without_job_spec(self):
        cronjob = SimpleNamespace(spec=SimpleNamespace(job_template=SimpleNamespace(spec=None)))
        assert resolve_selector(ResourceKind.CRONJOB, cronjob) is None

    def test_cronjob_without_template_selector(self):
        cronjob = SimpleNamespace(spec=SimpleNamespace(job_template=SimpleNamespace(spec=SimpleNamespace(selector=None))))
        assert resolve_selector(ResourceKind.CRONJOB, cronjob) is None


class TestSelectorToString:
    """Test cases for selector_to_string"""

    def test_match_labels_sorted(self):
        selector = V1LabelSelector(match_labels={"tier": "frontend", "app": "web"})
        assert selector_to_string(selector) == "app=web,tier=frontend"

    def test_match_expressions(self):
        selector = V1LabelSelector(
            match_labels={"app": "web"},
            match_expressions=[
                V1LabelSelectorRequirement(key="env", operator="In", values=["prod", "canary"]),
                V1LabelSelectorRequirement(key="track", operator="NotIn", values=["debug"]),
                V1LabelSelectorRequirement(key="release", operator="Exists"),
                V1LabelSelectorRequirement(key="legacy", operator="DoesNotExist"),
            ],
        )
        assert selector_to_string(selector) == (
            "app=web,env in (canary,prod),track notin (debug),release,!legacy"
        )

    def test_empty_selector(self):
        assert selector_to_string(V1LabelSelector()) == ""

    def test_unknown_operator(self):
        selector = V1LabelSelector(match_expressions=[V1LabelSelectorRequirement(key="a", operator="Gt", values=["1"])])
        with pytest.raises(ValueError):
            selector_to_string(selector)
