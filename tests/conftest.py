"""Shared fixtures for the readiness tests."""

from typing import Dict, List, Optional

import pytest

from kube_readiness.inspectors import StatusInspector
from kube_readiness.models import ResourceKind, ResourceQuery, ResourceStatus
from kube_readiness.poller import ReadinessPoller


class ScriptedInspector(StatusInspector):
    """Inspector that replays a scripted status sequence per resource name.

    Each entry is a ResourceStatus, None (absent) or an exception to raise.
    The last entry repeats once the script is exhausted. Namespaces without
    a script exist and are Active; those checks go to ``namespace_calls``.
    """

    def __init__(self, scripts: Optional[Dict[str, list]] = None,
                 listings: Optional[Dict[tuple, object]] = None) -> None:
        self.scripts = {name: list(seq) for name, seq in (scripts or {}).items()}
        self.listings = listings or {}
        self.calls: List[str] = []
        self.list_calls: List[tuple] = []
        self.namespace_calls: List[str] = []

    def inspect(self, query: ResourceQuery) -> Optional[ResourceStatus]:
        if query.kind is ResourceKind.NAMESPACE and query.name not in self.scripts:
            self.namespace_calls.append(query.name)
            return ResourceStatus(phase="Active")
        self.calls.append(query.name)
        seq = self.scripts[query.name]
        idx = min(self.calls.count(query.name), len(seq)) - 1
        item = seq[idx]
        if isinstance(item, Exception):
            raise item
        return item

    def list_names(self, kind: ResourceKind, namespace: str) -> List[str]:
        self.list_calls.append((kind, namespace))
        item = self.listings.get((kind, namespace), [])
        if isinstance(item, Exception):
            raise item
        return list(item)


def workload(ready: Optional[int], desired: Optional[int]) -> ResourceStatus:
    return ResourceStatus(ready_count=ready, desired_count=desired)


def pod(fraction: str, phase: str = "Running") -> ResourceStatus:
    ready, total = (int(part) for part in fraction.split("/"))
    return ResourceStatus(ready_count=ready, desired_count=total, phase=phase)


@pytest.fixture
def sleeps() -> List[float]:
    """Records every sleep the poller performs instead of sleeping."""
    return []


@pytest.fixture
def make_poller(sleeps):
    def _make(inspector: StatusInspector, interval: float = 1.0) -> ReadinessPoller:
        return ReadinessPoller(inspector, interval=interval, sleep=sleeps.append)
    return _make


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host configuration out of Config defaults."""
    for name in ("POLL_TIMEOUT", "POLL_INTERVAL", "INSPECTOR", "KUBECTL", "KUBECONFIG",
                 "KUBE_CONTEXT", "KUBECTL_TABLE_OUTPUT", "KUBECTL_COMMAND_TIMEOUT",
                 "K8S_VERIFY", "OCP_API_VERIFY", "VERIFY_SSL", "LOG_FILE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
